"""Data models for stops and the view context."""

from stoptiles.models._base import EpochSeconds, StopBaseModel
from stoptiles.models.context import Permissions, StopDisplaySettings, StopFilters, ViewContext
from stoptiles.models.stop import Invasion, Lure, Quest, Stop, StopEvent

__all__ = [
    "EpochSeconds",
    "Invasion",
    "Lure",
    "Permissions",
    "Quest",
    "Stop",
    "StopBaseModel",
    "StopDisplaySettings",
    "StopEvent",
    "StopFilters",
    "ViewContext",
]
