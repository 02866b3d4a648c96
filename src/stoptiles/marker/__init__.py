"""Marker composition and lifecycle."""

from stoptiles.marker.composer import (
    IconResolver,
    MarkerComposer,
    MarkerDescriptor,
    MarkerRenderer,
    PopupPayload,
    RangeCircle,
    RangeToggles,
    TimerLabel,
    resolve_ranges,
)
from stoptiles.marker.layer import StopLayer
from stoptiles.marker.tile import StopMarker

__all__ = [
    "IconResolver",
    "MarkerComposer",
    "MarkerDescriptor",
    "MarkerRenderer",
    "PopupPayload",
    "RangeCircle",
    "RangeToggles",
    "StopLayer",
    "StopMarker",
    "TimerLabel",
    "resolve_ranges",
]
