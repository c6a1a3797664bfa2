"""
In-memory sliding-window request limiter, keyed by client address.
"""
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict


class SlidingWindowRateLimiter:
    """
    Allow at most `max_requests` per `window_seconds` for each key.

    Each key keeps the monotonic timestamps of its accepted requests;
    timestamps older than the window are dropped on every check.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """Record a request for `key` and report whether it is within the limit."""
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            self._prune(hits, now)
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)

            # Keep memory bounded for long-running processes
            if len(self._hits) > 10000:
                self._drop_idle_keys(now)
        return True

    def retry_after(self, key: str) -> int:
        """Seconds until `key` gets a free slot again."""
        now = self._clock()
        with self._lock:
            hits = self._hits.get(key)
            if not hits:
                return 0
            self._prune(hits, now)
            if len(hits) < self.max_requests:
                return 0
            return max(1, int(hits[0] + self.window_seconds - now) + 1)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _prune(self, hits: Deque[float], now: float) -> None:
        cutoff = now - self.window_seconds
        while hits and hits[0] <= cutoff:
            hits.popleft()

    def _drop_idle_keys(self, now: float) -> None:
        cutoff = now - self.window_seconds
        idle = [k for k, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in idle:
            self._hits.pop(key, None)
