"""A benchmark run bounded by a request count, a rate and a duration."""

from __future__ import annotations

import threading

from yab.ratelimit import new_infinite, new_limiter


class Run:
    """A run limited by a number of requests, which can also be stopped early.

    ``max_requests`` of 0 means no request limit, ``rps`` of 0 means no rate
    limit and ``max_duration`` (seconds) of 0 means no time limit.
    """

    def __init__(self, max_requests: int, rps: int, max_duration: float = 0) -> None:
        self._lock = threading.Lock()
        self._unlimited = max_requests == 0
        self._requests_left = max_requests
        self._limiter = new_limiter(rps) if rps > 0 else new_infinite()
        self._cancel = threading.Event()
        self._cancelled = False

        if max_duration > 0:
            timer = threading.Timer(max_duration, self.stop)
            timer.daemon = True
            timer.start()

    def more(self) -> bool:
        """Return whether another request may start, waiting on the rate limit."""
        with self._lock:
            unlimited = self._unlimited
            left = self._requests_left

        if unlimited:
            self._limiter.take(self._cancel)
            return True

        if left >= 0:
            self._limiter.take(self._cancel)

        with self._lock:
            self._requests_left -= 1
            return self._requests_left >= 0

    def stop(self) -> None:
        """Make every later call to more() return False."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._requests_left = 0
            self._unlimited = False
        self._cancel.set()