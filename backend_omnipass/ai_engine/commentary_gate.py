"""
CommentaryGate: response cache (TTL) and sliding-window rate limiter.

One instance is built at process start and shared by the insights step and
the AI coach; tests build isolated instances with a fake clock. All state is
guarded by a lock so sync and async callers can share it.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Callable

from backend_omnipass.config.settings import (
    DEFAULT_CACHE_TTL_SEC,
    DEFAULT_RATE_LIMIT_MAX_REQUESTS,
    DEFAULT_RATE_LIMIT_WINDOW_SEC,
)
from backend_omnipass.omnipass_logging import get_logger

logger = get_logger(__name__)

ANONYMOUS_IDENTIFIER = "anonymous"
NO_TIER = "no-tier"


class CommentaryGate:
    def __init__(
        self,
        ttl_sec: float = DEFAULT_CACHE_TTL_SEC,
        window_sec: float = DEFAULT_RATE_LIMIT_WINDOW_SEC,
        max_requests: int = DEFAULT_RATE_LIMIT_MAX_REQUESTS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_sec = ttl_sec
        self.window_sec = window_sec
        self.max_requests = max_requests
        self._clock = clock
        self._lock = threading.Lock()
        self._cache: dict[str, tuple[Any, float]] = {}
        self._windows: dict[str, deque[float]] = {}

    @staticmethod
    def cache_key(question: str, tier: str | None) -> str:
        return f"{question}|{tier or NO_TIER}"

    def get_cached(self, key: str) -> Any | None:
        """Cached value younger than the TTL; expired entries are evicted on read."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            value, created_at = entry
            if self._clock() - created_at >= self.ttl_sec:
                del self._cache[key]
                return None
            return value

    def set_cached(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = (value, self._clock())

    def allow_request(self, identifier: str | None) -> bool:
        """
        Record a request for identifier and return True, or return False once
        max_requests were recorded for it within the trailing window.
        """
        ident = identifier or ANONYMOUS_IDENTIFIER
        with self._lock:
            now = self._clock()
            self._sweep(now)
            window = self._windows.setdefault(ident, deque())
            if len(window) >= self.max_requests:
                logger.warning("commentary_rate_limited", identifier=ident, window_sec=self.window_sec)
                return False
            window.append(now)
            return True

    def _sweep(self, now: float) -> None:
        window_start = now - self.window_sec
        for ident in list(self._windows):
            window = self._windows[ident]
            while window and window[0] < window_start:
                window.popleft()
            if not window:
                del self._windows[ident]
        for key in [k for k, (_, created) in self._cache.items() if now - created >= self.ttl_sec]:
            del self._cache[key]

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "cached_responses": len(self._cache),
                "rate_limited_identifiers": len(self._windows),
            }

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._windows.clear()
