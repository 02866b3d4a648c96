"""Read-only view context consumed by the derivation layer.

These models mirror what the surrounding application keeps in its global
stores: the signed-in user's permissions, their stop filters and display
settings, the exclusion list and the current map zoom.  The derivation
functions receive them explicitly as parameters.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from stoptiles._constants import DEFAULT_INTERACTION_RANGE_ZOOM


def _as_frozenset(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value})
    if isinstance(value, Iterable):
        return frozenset(str(item) for item in value)
    return frozenset()


KeySet = Annotated[frozenset[str], BeforeValidator(_as_frozenset)]


class _ContextModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Permissions(_ContextModel):
    """Per-sub-state capabilities granted to the current user."""

    pokestops: bool = False
    lures: bool = False
    invasions: bool = False
    quests: bool = False
    event_stops: bool = Field(default=False, alias="eventStops")


class StopFilters(_ContextModel):
    """User-selected stop filters."""

    all_pokestops: bool = Field(default=False, alias="allPokestops")
    event_stops: bool = Field(default=False, alias="eventStops")


class StopDisplaySettings(_ContextModel):
    """Per-sub-state "show timer" and "show range" toggles."""

    invasion_timers: bool = Field(default=False, alias="invasionTimers")
    lure_timers: bool = Field(default=False, alias="lureTimers")
    event_stop_timers: bool = Field(default=False, alias="eventStopTimers")
    lure_range: bool = Field(default=False, alias="lureRange")
    interaction_range: bool = Field(default=False, alias="interactionRange")
    custom_range: float = Field(default=0.0, ge=0.0, alias="customRange")


class ViewContext(_ContextModel):
    """Everything a stop marker reads from outside its own entity.

    Parameters
    ----------
    exclude_list : frozenset of str
        Opaque keys suppressing individual sub-state instances
        (``l<lure_id>``, ``i<grunt_type>``, quest keys).
    timer_list : frozenset of str
        Stop ids whose timers are forced on regardless of settings.
    zoom : float
        Current map zoom.
    interaction_range_zoom : float
        Range circles are suppressed below this zoom.
    """

    permissions: Permissions = Field(default_factory=Permissions)
    filters: StopFilters = Field(default_factory=StopFilters)
    settings: StopDisplaySettings = Field(default_factory=StopDisplaySettings)
    exclude_list: KeySet = Field(default_factory=frozenset, alias="excludeList")
    timer_list: KeySet = Field(default_factory=frozenset, alias="timerList")
    zoom: float = 0.0
    interaction_range_zoom: float = Field(
        default=DEFAULT_INTERACTION_RANGE_ZOOM,
        alias="interactionRangeZoom",
    )

    def is_excluded(self, key: str) -> bool:
        return key in self.exclude_list
