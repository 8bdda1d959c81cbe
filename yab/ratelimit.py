"""Rate limiters that pace a process to a target number of operations per second."""

from __future__ import annotations

import abc
import threading
import time


class Limiter(abc.ABC):
    """Paces a process; call take() before every iteration."""

    @abc.abstractmethod
    def take(self, cancel=None) -> bool:
        """Block until the next iteration may run.

        Returns False if ``cancel`` (a threading.Event) is set while waiting.
        """


class TimePeriodLimiter(Limiter):
    """Limits to a fixed number of operations per second, averaged over time."""

    def __init__(self, rps: int) -> None:
        if rps <= 0:
            raise ValueError(f"rps must be positive, got {rps}")
        self._lock = threading.Lock()
        self._last: float | None = None
        self._sleep_for = 0.0
        self._per_request = 1.0 / rps
        # Bound how far behind we may fall, so a slow period is not followed
        # by a burst well above the target rate.
        self._max_slack = -10.0 / rps

    def take(self, cancel=None) -> bool:
        with self._lock:
            cur = time.monotonic()
            if self._last is None:
                self._last = cur
                return True

            self._sleep_for += self._per_request - (cur - self._last)
            self._last = cur

            if self._sleep_for < self._max_slack:
                self._sleep_for = self._max_slack

            if self._sleep_for > 0:
                if cancel is None:
                    time.sleep(self._sleep_for)
                elif cancel.wait(self._sleep_for):
                    return False
                self._last = cur + self._sleep_for
                self._sleep_for = 0.0

            return True


class InfiniteLimiter(Limiter):
    """A limiter that never blocks."""

    def take(self, cancel=None) -> bool:
        return True


def new_limiter(rps: int) -> Limiter:
    """Return a limiter that allows ``rps`` operations per second."""
    return TimePeriodLimiter(rps)


def new_infinite() -> Limiter:
    """Return a limiter with no limit."""
    return InfiniteLimiter()