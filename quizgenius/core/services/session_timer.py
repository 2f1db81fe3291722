"""Countdown timer for a quiz session.

The timer owns the remaining-seconds counter and, optionally, a periodic
callback handle obtained from a scheduler. The scheduler abstraction keeps the
session core independent of the event loop: the desktop client passes a
``QTimer``-backed scheduler, tests drive ``tick()`` by hand.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Protocol

from quizgenius.constants.quiz_constants import TIMER_INTERVAL_MS

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    """Cancellable periodic callback returned by a scheduler."""

    def cancel(self) -> None: ...


Scheduler = Callable[[int, Callable[[], None]], TimerHandle]


def format_time_remaining(seconds: int) -> str:
    """Format remaining seconds as ``m:ss``."""
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes}:{secs:02d}"


class SessionTimer:
    """Non-negative countdown decremented once per interval."""

    def __init__(self, scheduler: Scheduler | None = None, interval_ms: int = TIMER_INTERVAL_MS) -> None:
        self._scheduler = scheduler
        self._interval_ms = interval_ms
        self._seconds_remaining: int = 0
        self._handle: TimerHandle | None = None

    @property
    def seconds_remaining(self) -> int:
        return self._seconds_remaining

    def is_running(self) -> bool:
        return self._handle is not None

    def seed(self, time_limit_minutes: int) -> None:
        """Set the countdown from a time limit in minutes. Cancels any running interval."""
        self.cancel()
        self._seconds_remaining = max(0, int(time_limit_minutes) * 60)

    def start(self, on_tick: Callable[[], None]) -> None:
        """Begin calling ``on_tick`` once per interval, if a scheduler is available."""
        if self._handle is not None or self._scheduler is None:
            return
        self._handle = self._scheduler(self._interval_ms, on_tick)

    def tick(self) -> bool:
        """Decrement by one second, floored at zero.

        Returns True only for the tick that moves the counter from 1 to 0.
        """
        if self._seconds_remaining <= 0:
            return False
        self._seconds_remaining -= 1
        return self._seconds_remaining == 0

    def cancel(self) -> None:
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        logger.debug("Session timer interval cancelled")

    def reset(self) -> None:
        self.cancel()
        self._seconds_remaining = 0
