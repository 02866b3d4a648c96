"""Per-marker expiry scheduler.

Each marker owns exactly one :class:`ExpiryScheduler`.  It keeps at most
one wake-up armed on the event loop, always for the soonest expiry
instant, and hands the fired instant back to its owner so re-derivation
never runs with a clock value older than the expiry it was woken for.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from enum import StrEnum

from stoptiles.exceptions import SchedulerClosedError

_logger = logging.getLogger(__name__)


class SchedulerState(StrEnum):
    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"


class ExpiryScheduler:
    """Arms a single cancellable wake-up for the nearest expiry instant.

    Parameters
    ----------
    on_fire : callable
        Called with the absolute instant (epoch seconds) that fired.  The
        owner is expected to re-derive and call :meth:`arm` again.
    loop : asyncio.AbstractEventLoop, optional
        Loop used for ``call_later``.  Resolved with
        ``asyncio.get_running_loop()`` on first use when omitted.
    clock : callable
        Wall clock returning epoch seconds.
    name : str
        Label used in debug logs.
    """

    def __init__(
        self,
        on_fire: Callable[[float], None],
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        clock: Callable[[], float] = time.time,
        name: str = "",
    ) -> None:
        self._on_fire = on_fire
        self._loop = loop
        self._clock = clock
        self._name = name
        self._handle: asyncio.TimerHandle | None = None
        self._deadline: float | None = None
        self._generation = 0
        self._state = SchedulerState.IDLE
        self._closed = False

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def deadline(self) -> float | None:
        """Instant the pending wake-up is armed for, if any."""
        return self._deadline

    @property
    def closed(self) -> bool:
        return self._closed

    def arm(self, instants: Iterable[float]) -> float | None:
        """Replace any pending wake-up with one for ``min(instants)``.

        Returns the armed deadline, or ``None`` when *instants* is empty.
        Instants already in the past fire on the next loop iteration.

        Raises
        ------
        SchedulerClosedError
            If the scheduler has been closed.
        """
        if self._closed:
            raise SchedulerClosedError(f"scheduler {self._name!r} is closed")
        self.cancel()

        pending = list(instants)
        if not pending:
            self._state = SchedulerState.IDLE
            return None

        deadline = min(pending)
        delay = max(0.0, deadline - self._clock())
        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop

        self._generation += 1
        self._handle = loop.call_later(delay, self._fire, self._generation, deadline)
        self._deadline = deadline
        self._state = SchedulerState.ARMED
        _logger.debug("Armed %s deadline=%s delay=%.3fs", self._name, deadline, delay)
        return deadline

    def cancel(self) -> None:
        """Drop the pending wake-up, if any."""
        handle = self._handle
        self._handle = None
        self._deadline = None
        if handle is not None:
            handle.cancel()
            _logger.debug("Cancelled wake-up for %s", self._name)
        if self._state is SchedulerState.ARMED:
            self._state = SchedulerState.IDLE

    def close(self) -> None:
        """Cancel unconditionally; the scheduler cannot be armed again."""
        self.cancel()
        self._closed = True
        self._state = SchedulerState.IDLE

    def _fire(self, generation: int, deadline: float) -> None:
        # A handle that was replaced or cancelled must never reach the owner.
        if self._closed or generation != self._generation:
            return
        self._handle = None
        self._deadline = None
        self._state = SchedulerState.FIRING
        _logger.debug("Wake-up fired for %s deadline=%s", self._name, deadline)
        try:
            self._on_fire(deadline)
        finally:
            if self._state is SchedulerState.FIRING:
                self._state = SchedulerState.IDLE
