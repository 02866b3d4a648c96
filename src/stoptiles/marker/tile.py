"""A single stop marker and its lifecycle."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

from stoptiles.marker.composer import MarkerComposer, MarkerDescriptor, MarkerRenderer, resolve_ranges
from stoptiles.models.context import ViewContext
from stoptiles.models.stop import Stop
from stoptiles.state.gate import needs_render
from stoptiles.state.scheduler import ExpiryScheduler
from stoptiles.state.store import ContextStore, Subscription
from stoptiles.state.timers import TimerPreferences, TimerSet, build_timer_set
from stoptiles.state.visibility import VisibilityFlags, derive_visibility

_logger = logging.getLogger(__name__)


class StopMarker:
    """Owns the derived state, expiry timer and drawn output of one stop.

    Usage::

        marker = StopMarker(stop, store=store, renderer=renderer, composer=composer)
        marker.mount()
        marker.update(newer_stop)
        marker.destroy()
    """

    def __init__(
        self,
        stop: Stop,
        *,
        store: ContextStore,
        renderer: MarkerRenderer,
        composer: MarkerComposer,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], float] = time.time,
        force: bool = False,
    ) -> None:
        self._stop = stop
        self._store = store
        self._renderer = renderer
        self._composer = composer
        self._clock = clock
        self._scheduler = ExpiryScheduler(self._on_expiry, loop=loop, clock=clock, name=f"stop:{stop.id}")
        self._subscription: Subscription | None = None
        self._force = force
        self._auto_opened = False
        self._destroyed = False
        self._flags = VisibilityFlags()
        self._timers: TimerSet = frozenset()
        self._drawn: MarkerDescriptor | None = None
        self.render_count = 0

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def stop(self) -> Stop:
        """Snapshot the marker last rendered."""
        return self._stop

    @property
    def flags(self) -> VisibilityFlags:
        return self._flags

    @property
    def timers(self) -> TimerSet:
        return self._timers

    @property
    def scheduler(self) -> ExpiryScheduler:
        return self._scheduler

    @property
    def drawn(self) -> MarkerDescriptor | None:
        return self._drawn

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def auto_opened(self) -> bool:
        return self._auto_opened

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _select(self, context: ViewContext) -> tuple[Any, ...]:
        stop = self._stop
        return (
            derive_visibility(stop, context, self._clock()),
            TimerPreferences.for_stop(stop, context),
            resolve_ranges(context),
        )

    def mount(self) -> None:
        """Subscribe to the context store and draw for the first time."""
        if self._destroyed or self._subscription is not None:
            return
        self._subscription = self._store.subscribe(self._select, self._on_context_change)
        _logger.debug("Mounted marker for stop %s", self._stop.id)
        self.refresh()

    def update(self, stop: Stop) -> bool:
        """Offer a newer snapshot; returns True when it caused a render."""
        if self._destroyed:
            return False
        if not needs_render(self._stop, stop):
            _logger.debug("Render gate skipped stop %s", stop.id)
            return False
        self._stop = stop
        self.refresh()
        return True

    def refresh(self, now: float | None = None) -> None:
        """Re-derive flags and timers, re-arm the scheduler and redraw."""
        if self._destroyed:
            return
        now = self._clock() if now is None else now
        context = self._store.get()
        stop = self._stop

        flags = derive_visibility(stop, context, now)
        preferences = TimerPreferences.for_stop(stop, context)
        timers = build_timer_set(stop, flags, preferences, context, now)
        self._scheduler.arm(timers)
        self._flags = flags
        self._timers = timers
        # The store compares later contexts against what this stop selects now.
        if self._subscription is not None:
            self._subscription.resync()

        descriptor = self._composer.compose(stop, flags, timers, resolve_ranges(context))
        self.render_count += 1
        if descriptor is None:
            if self._drawn is not None:
                self._renderer.remove(stop.id)
                self._drawn = None
            return
        self._renderer.draw(descriptor)
        self._drawn = descriptor
        self._apply_force()

    def set_force(self, force: bool) -> None:
        """Request the popup to be opened once for this marker's lifetime."""
        self._force = force
        self._apply_force()

    def _apply_force(self) -> None:
        if self._force and not self._auto_opened and self._drawn is not None and not self._destroyed:
            self._auto_opened = True
            self._renderer.open_popup(self._stop.id)

    def destroy(self) -> None:
        """Cancel the timer, drop the subscription and remove the drawing."""
        if self._destroyed:
            return
        self._scheduler.close()
        self._destroyed = True
        subscription = self._subscription
        self._subscription = None
        if subscription is not None:
            subscription()
        if self._drawn is not None:
            self._renderer.remove(self._stop.id)
            self._drawn = None
        _logger.debug("Destroyed marker for stop %s", self._stop.id)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def _on_expiry(self, deadline: float) -> None:
        # Never re-derive with a clock reading earlier than the expiry that fired.
        self.refresh(now=max(self._clock(), deadline))

    def _on_context_change(self, _selected: Any) -> None:
        self.refresh()
