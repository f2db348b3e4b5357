"""Process-local fixed-window rate limiter."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Dict

CLEANUP_INTERVAL_SECONDS = 60.0


@dataclass
class _Window:
    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float


class RateLimiter:
    """Allow ``max_requests`` per key inside each ``window_seconds`` window.

    State lives in memory, so limits reset with the process and are not shared
    between workers. Expired windows are purged at most once per minute.
    """

    def __init__(
        self,
        max_requests: int = 60,
        window_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._last_cleanup = clock()

    def check(self, key: str) -> RateLimitResult:
        now = self._clock()
        self._cleanup(now)

        window = self._windows.get(key)
        if window is None or now > window.reset_at:
            window = _Window(count=1, reset_at=now + self.window_seconds)
            self._windows[key] = window
            return RateLimitResult(True, self.max_requests - 1, window.reset_at)

        if window.count >= self.max_requests:
            return RateLimitResult(False, 0, window.reset_at)

        window.count += 1
        return RateLimitResult(True, self.max_requests - window.count, window.reset_at)

    def __len__(self) -> int:
        return len(self._windows)

    def _cleanup(self, now: float) -> None:
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        self._last_cleanup = now
        expired = [key for key, window in self._windows.items() if now > window.reset_at]
        for key in expired:
            del self._windows[key]
