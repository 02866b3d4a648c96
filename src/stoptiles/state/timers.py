"""Timer set construction.

Collects the future expiry instants a marker has to wake up for.  Only
active sub-states whose "show timer" preference is on contribute, so an
expiry that is hidden or not permitted never schedules work.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from stoptiles.models.context import StopDisplaySettings, ViewContext
from stoptiles.models.stop import Stop
from stoptiles.state.visibility import VisibilityFlags, active_events, active_invasions

TimerSet = frozenset[float]


class TimerPreferences(BaseModel):
    """Effective per-sub-state "show timer" switches."""

    model_config = ConfigDict(frozen=True)

    invasions: bool = False
    lures: bool = False
    event_stops: bool = False

    @classmethod
    def resolve(cls, settings: StopDisplaySettings, *, force: bool = False) -> TimerPreferences:
        """Combine user settings with a force override (e.g. a pinned stop)."""
        return cls(
            invasions=settings.invasion_timers or force,
            lures=settings.lure_timers or force,
            event_stops=settings.event_stop_timers or force,
        )

    @classmethod
    def for_stop(cls, stop: Stop, context: ViewContext) -> TimerPreferences:
        return cls.resolve(context.settings, force=stop.id in context.timer_list)


def build_timer_set(
    stop: Stop,
    flags: VisibilityFlags,
    preferences: TimerPreferences,
    context: ViewContext,
    now: float,
) -> TimerSet:
    """Return the distinct future expiry instants relevant to *stop*.

    An empty set means nothing needs scheduling.
    """
    instants: set[float] = set()
    if preferences.invasions and flags.has_invasion:
        for invasion in active_invasions(stop, context, now):
            if invasion.incident_expire_timestamp is not None:
                instants.add(invasion.incident_expire_timestamp)
    if preferences.lures and flags.has_lure and stop.lure_expire_timestamp is not None:
        instants.add(stop.lure_expire_timestamp)
    if preferences.event_stops and flags.has_event:
        for event in active_events(stop, context, now):
            if event.event_expire_timestamp is not None:
                instants.add(event.event_expire_timestamp)
    return frozenset(instants)
