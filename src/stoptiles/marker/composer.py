"""Marker composition.

Turns derived flags and timers into plain descriptors that an external
map renderer can draw.  Nothing in this module draws anything itself.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from stoptiles.config import StopTilesConfig
from stoptiles.models.context import ViewContext
from stoptiles.models.stop import Stop
from stoptiles.state.timers import TimerSet
from stoptiles.state.visibility import VisibilityFlags

IconResolver = Callable[[Stop, VisibilityFlags], Any]
"""Picks the marker icon for a stop given its flags (external)."""


class MarkerRenderer(Protocol):
    """Drawing sink for composed markers."""

    def draw(self, marker: MarkerDescriptor) -> None: ...

    def remove(self, stop_id: str) -> None: ...

    def open_popup(self, stop_id: str) -> None: ...


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True)


class RangeToggles(_Descriptor):
    """Which range circles to draw, already gated by zoom."""

    interaction_range: bool = False
    lure_range: bool = False
    custom_range: float = 0.0


class PopupPayload(_Descriptor):
    flags: VisibilityFlags
    stop: Stop


class TimerLabel(_Descriptor):
    expiries: tuple[float, ...]
    offset: tuple[int, int]


class RangeCircle(_Descriptor):
    kind: str
    center: tuple[float, float]
    radius: float
    color: str
    weight: float


class MarkerDescriptor(_Descriptor):
    stop_id: str
    position: tuple[float, float]
    icon: Any = None
    popup: PopupPayload
    timer: TimerLabel | None = None
    circles: tuple[RangeCircle, ...] = ()


def resolve_ranges(context: ViewContext) -> RangeToggles:
    """Apply the zoom threshold to the user's range circle settings."""
    settings = context.settings
    zoomed_in = context.zoom >= context.interaction_range_zoom
    return RangeToggles(
        interaction_range=settings.interaction_range and zoomed_in,
        lure_range=settings.lure_range and zoomed_in,
        custom_range=settings.custom_range if zoomed_in else 0.0,
    )


class MarkerComposer:
    """Builds :class:`MarkerDescriptor` objects for stops."""

    def __init__(self, icon_resolver: IconResolver, config: StopTilesConfig | None = None) -> None:
        self._icon_resolver = icon_resolver
        self._config = config or StopTilesConfig()

    def _circles(self, stop: Stop, ranges: RangeToggles) -> tuple[RangeCircle, ...]:
        cfg = self._config
        circles: list[RangeCircle] = []
        if ranges.interaction_range:
            circles.append(
                RangeCircle(
                    kind="interaction",
                    center=stop.position,
                    radius=cfg.interaction_range_m,
                    color=cfg.interaction_range_color,
                    weight=cfg.interaction_range_weight,
                )
            )
        if ranges.lure_range:
            circles.append(
                RangeCircle(
                    kind="lure",
                    center=stop.position,
                    radius=cfg.lure_range_m,
                    color=cfg.lure_range_color,
                    weight=cfg.lure_range_weight,
                )
            )
        if ranges.custom_range:
            circles.append(
                RangeCircle(
                    kind="custom",
                    center=stop.position,
                    radius=ranges.custom_range,
                    color=cfg.custom_range_color,
                    weight=cfg.custom_range_weight,
                )
            )
        return tuple(circles)

    def compose(
        self,
        stop: Stop,
        flags: VisibilityFlags,
        timers: TimerSet,
        ranges: RangeToggles,
    ) -> MarkerDescriptor | None:
        """Return the marker to draw, or ``None`` when it is suppressed."""
        if not flags.should_render:
            return None
        timer = None
        if timers:
            timer = TimerLabel(expiries=tuple(sorted(timers)), offset=self._config.timer_offset)
        return MarkerDescriptor(
            stop_id=stop.id,
            position=stop.position,
            icon=self._icon_resolver(stop, flags),
            popup=PopupPayload(flags=flags, stop=stop),
            timer=timer,
            circles=self._circles(stop, ranges),
        )
