"""
Sliding-window request rate limiter keyed by client.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from collections.abc import Callable
from functools import lru_cache

from app.config import get_webhook_settings


class SlidingWindowRateLimiter:
    """
    Allows at most ``max_requests`` per ``window_seconds`` for each key.
    """

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_requests = max(1, max_requests)
        self._window_seconds = max(0.001, window_seconds)
        self._clock = clock
        self._hits_by_key: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """
        Record one request for ``key``; return False when over the limit.
        """

        with self._lock:
            now = self._clock()
            cutoff = now - self._window_seconds
            hits = self._hits_by_key.setdefault(key, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self._max_requests:
                return False
            hits.append(now)
            return True

    def reset(self) -> None:
        with self._lock:
            self._hits_by_key.clear()


@lru_cache(maxsize=1)
def get_webhook_rate_limiter() -> SlidingWindowRateLimiter:
    settings = get_webhook_settings()
    return SlidingWindowRateLimiter(
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
