"""Visibility derivation.

Pure functions turning a stop snapshot plus the read-only view context
into per-sub-state flags.  Nothing here reads the clock; callers pass
``now`` explicitly so the same inputs always yield the same flags.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from stoptiles._constants import invasion_exclude_key, lure_exclude_key
from stoptiles.models.context import ViewContext
from stoptiles.models.stop import Invasion, Stop, StopEvent


class VisibilityFlags(BaseModel):
    """Which sub-states of a stop are currently shown."""

    model_config = ConfigDict(frozen=True)

    has_lure: bool = False
    has_invasion: bool = False
    has_quest: bool = False
    has_event: bool = False
    has_all_stops: bool = False

    @property
    def should_render(self) -> bool:
        """Whether the marker is drawn at all."""
        return self.has_lure or self.has_invasion or self.has_quest or self.has_event or self.has_all_stops


def _is_future(expires_at: float | None, now: float) -> bool:
    return expires_at is not None and expires_at > now


def lure_active(stop: Stop, context: ViewContext, now: float) -> bool:
    return (
        _is_future(stop.lure_expire_timestamp, now)
        and context.permissions.lures
        and not context.is_excluded(lure_exclude_key(stop.lure_id))
    )


def active_invasions(stop: Stop, context: ViewContext, now: float) -> tuple[Invasion, ...]:
    """Invasions that are permitted, typed, not excluded and not yet over."""
    if not context.permissions.invasions:
        return ()
    return tuple(
        invasion
        for invasion in stop.invasions
        if invasion.grunt_type
        and not context.is_excluded(invasion_exclude_key(invasion.grunt_type))
        and _is_future(invasion.incident_expire_timestamp, now)
    )


def quest_active(stop: Stop, context: ViewContext) -> bool:
    if not context.permissions.quests:
        return False
    return any(not context.is_excluded(quest.key) for quest in stop.quests)


def active_events(stop: Stop, context: ViewContext, now: float) -> tuple[StopEvent, ...]:
    """Events that are permitted, filtered in and not yet over."""
    if not (context.permissions.event_stops and context.filters.event_stops):
        return ()
    return tuple(event for event in stop.events if _is_future(event.event_expire_timestamp, now))


def always_shown(stop: Stop, context: ViewContext) -> bool:
    """Baseline visibility independent of any sub-state.

    The "all stops" filter and AR scan eligibility are OR'd together; the
    exclusion list is not consulted.
    """
    return (context.filters.all_pokestops or stop.ar_scan_eligible) and context.permissions.pokestops


def derive_visibility(stop: Stop, context: ViewContext, now: float) -> VisibilityFlags:
    """Derive the visibility flags of *stop* at instant *now* (epoch seconds)."""
    return VisibilityFlags(
        has_lure=lure_active(stop, context, now),
        has_invasion=bool(active_invasions(stop, context, now)),
        has_quest=quest_active(stop, context),
        has_event=bool(active_events(stop, context, now)),
        has_all_stops=always_shown(stop, context),
    )
