"""stoptiles - Live, self-expiring stop markers for interactive maps."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("stoptiles")
except PackageNotFoundError:
    __version__ = "0+local"
from stoptiles.config import StopTilesConfig
from stoptiles.exceptions import (
    SchedulerClosedError,
    StopFeedError,
    StopTilesConfigError,
    StopTilesError,
)
from stoptiles.feed import MapBounds, StopFeedClient
from stoptiles.marker import (
    MarkerComposer,
    MarkerDescriptor,
    MarkerRenderer,
    StopLayer,
    StopMarker,
)
from stoptiles.models import (
    Invasion,
    Lure,
    Permissions,
    Quest,
    Stop,
    StopDisplaySettings,
    StopEvent,
    StopFilters,
    ViewContext,
)
from stoptiles.state import (
    ContextStore,
    ExpiryScheduler,
    SchedulerState,
    TimerPreferences,
    VisibilityFlags,
    build_timer_set,
    derive_visibility,
    needs_render,
)

__all__ = [
    "__version__",
    "ContextStore",
    "ExpiryScheduler",
    "Invasion",
    "Lure",
    "MapBounds",
    "MarkerComposer",
    "MarkerDescriptor",
    "MarkerRenderer",
    "Permissions",
    "Quest",
    "SchedulerClosedError",
    "SchedulerState",
    "Stop",
    "StopDisplaySettings",
    "StopEvent",
    "StopFeedClient",
    "StopFeedError",
    "StopFilters",
    "StopLayer",
    "StopMarker",
    "StopTilesConfig",
    "StopTilesConfigError",
    "StopTilesError",
    "TimerPreferences",
    "ViewContext",
    "VisibilityFlags",
    "build_timer_set",
    "derive_visibility",
    "needs_render",
]
