"""Marker state layer.

Derivation (visibility flags, timer sets), the per-marker expiry
scheduler, the render gate and the view context store.  Everything here
is synchronous except the scheduler's wake-ups, which run on the asyncio
event loop.
"""

from stoptiles.state.gate import needs_render, same_snapshot
from stoptiles.state.scheduler import ExpiryScheduler, SchedulerState
from stoptiles.state.store import ContextStore, Subscription, basic_equal
from stoptiles.state.timers import TimerPreferences, TimerSet, build_timer_set
from stoptiles.state.visibility import VisibilityFlags, derive_visibility

__all__ = [
    "ContextStore",
    "ExpiryScheduler",
    "SchedulerState",
    "Subscription",
    "TimerPreferences",
    "TimerSet",
    "VisibilityFlags",
    "basic_equal",
    "build_timer_set",
    "derive_visibility",
    "needs_render",
    "same_snapshot",
]
