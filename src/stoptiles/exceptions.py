"""Custom exception hierarchy for stoptiles."""

from __future__ import annotations


class StopTilesError(Exception):
    """Base exception for all stoptiles errors."""


class StopTilesConfigError(StopTilesError):
    """Invalid or missing configuration."""


class StopFeedError(StopTilesError):
    """Feed fetch failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class SchedulerClosedError(StopTilesError):
    """An expiry scheduler was armed after it had been closed.

    Markers close their scheduler before anything else on destroy, so
    hitting this means a disposed marker is still being driven.
    """
