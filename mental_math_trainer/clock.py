from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class PeriodicTimer:
    """Cancellable fixed-interval wakeup driven by an injected Clock.

    The timer never fires on its own: the owner calls :meth:`poll` from its
    update loop and receives the number of whole intervals that elapsed since
    the previous poll.  Restarting always discards the previous schedule, so a
    single instance can never run two overlapping countdowns.
    """

    def __init__(self, clock: Clock, *, interval_s: float = 1.0) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._clock = clock
        self._interval_s = float(interval_s)
        self._next_due_s: float | None = None

    @property
    def active(self) -> bool:
        return self._next_due_s is not None

    def start(self) -> None:
        self._next_due_s = self._clock.now() + self._interval_s

    def cancel(self) -> None:
        self._next_due_s = None

    def poll(self) -> int:
        """Return how many wakeups are due, and consume them."""

        if self._next_due_s is None:
            return 0
        now = self._clock.now()
        fired = 0
        while self._next_due_s is not None and now >= self._next_due_s:
            fired += 1
            self._next_due_s += self._interval_s
        return fired
