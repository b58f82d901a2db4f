"""
Cooperative deadline token passed into provider I/O

A Deadline is created by the search processor for each provider call and
handed to the adapter, which derives its socket timeouts from
``remaining()`` and checks ``expired`` between reads. Nothing is timer- or
thread-driven: the adapter itself stops once the budget is spent.
"""

import time
from typing import Callable, Optional


class DeadlineExceeded(Exception):
    """Raised by Deadline.check() once the budget is spent"""


class Deadline:
    """
    Absolute point in time after which a provider call must give up

    Args:
        seconds: Budget from now, in seconds
        clock: Monotonic clock, injectable for tests
    """

    # Floor for timeouts derived from the remaining budget; requests rejects 0
    MIN_TIMEOUT = 0.05

    def __init__(self, seconds: float, clock: Optional[Callable[[], float]] = None):
        if seconds <= 0:
            raise ValueError(f"Deadline budget must be positive, got {seconds}")
        self._clock = clock or time.monotonic
        self.budget = float(seconds)
        self._expires_at = self._clock() + self.budget

    def remaining(self) -> float:
        """Seconds left, never negative"""
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def timeout(self) -> float:
        """Remaining budget usable as a socket timeout"""
        return max(self.MIN_TIMEOUT, self.remaining())

    def check(self) -> None:
        """Raise DeadlineExceeded if the budget is spent"""
        if self.expired:
            raise DeadlineExceeded(f"Deadline of {self.budget:.1f}s exceeded")

    def __repr__(self) -> str:
        return f"Deadline(budget={self.budget:.1f}s, remaining={self.remaining():.2f}s)"
