"""The visible set of stop markers."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

from stoptiles.config import StopTilesConfig
from stoptiles.marker.composer import IconResolver, MarkerComposer, MarkerRenderer
from stoptiles.marker.tile import StopMarker
from stoptiles.models.stop import Stop
from stoptiles.state.store import ContextStore

_logger = logging.getLogger(__name__)


class StopLayer:
    """Keeps one :class:`StopMarker` per stop in the latest feed snapshot.

    Each marker owns its own timer; the layer only decides which markers
    exist and forwards snapshots to them.
    """

    def __init__(
        self,
        store: ContextStore,
        renderer: MarkerRenderer,
        icon_resolver: IconResolver,
        *,
        config: StopTilesConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._renderer = renderer
        self._composer = MarkerComposer(icon_resolver, config)
        self._loop = loop
        self._clock = clock
        self._markers: dict[str, StopMarker] = {}
        self._closed = False

    @property
    def markers(self) -> Mapping[str, StopMarker]:
        return MappingProxyType(self._markers)

    def __len__(self) -> int:
        return len(self._markers)

    def __contains__(self, stop_id: object) -> bool:
        return stop_id in self._markers

    def _create(self, stop: Stop, force: bool) -> StopMarker:
        marker = StopMarker(
            stop,
            store=self._store,
            renderer=self._renderer,
            composer=self._composer,
            loop=self._loop,
            clock=self._clock,
            force=force,
        )
        self._markers[stop.id] = marker
        marker.mount()
        return marker

    def sync(self, stops: Iterable[Stop], *, force_id: str | None = None) -> None:
        """Reconcile markers with a complete feed snapshot.

        New stops get a marker, known stops are offered the new snapshot
        (subject to the render gate) and stops missing from *stops* are
        destroyed.  When an id appears twice the last snapshot wins.
        """
        if self._closed:
            return
        latest: dict[str, Stop] = {}
        for stop in stops:
            latest[stop.id] = stop

        for stop_id in [sid for sid in self._markers if sid not in latest]:
            self._markers.pop(stop_id).destroy()

        created = 0
        for stop_id, stop in latest.items():
            marker = self._markers.get(stop_id)
            if marker is None:
                self._create(stop, force=stop_id == force_id)
                created += 1
                continue
            marker.update(stop)
            if stop_id == force_id:
                marker.set_force(True)
        _logger.debug("Synced %d stops (%d new, %d markers)", len(latest), created, len(self._markers))

    def close(self) -> None:
        """Destroy every marker; further syncs are ignored."""
        self._closed = True
        markers = list(self._markers.values())
        self._markers.clear()
        for marker in markers:
            marker.destroy()
