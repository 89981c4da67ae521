"""In-memory fixed-window rate limiter.

Each key owns a window start and a counter. A call that lands at or after
`window_start + window_ms` opens a new window. Counters live in the
instance, so the limit is per process: a caller spreading requests across
several instances can exceed it. That is acceptable for a soft abuse guard
on bid submission; it is not a security boundary.

Closed windows are dropped at most once per `purge_interval_ms`, so keys of
users who stop bidding do not accumulate.

Usage (bid placement, keyed by actor):
    limiter = RateLimiter()
    result = limiter.attempt(f"bid:{user_id}", 20, 60_000)
    if not result.allowed:
        raise RateLimitError(result.reset_time)
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass


def _epoch_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: int  # epoch ms at which the current window closes


@dataclass
class _Window:
    started_at: int
    window_ms: int
    count: int = 0

    def closed(self, now: int) -> bool:
        return now - self.started_at >= self.window_ms


class RateLimiter:
    def __init__(
        self, clock: Callable[[], int] = _epoch_ms, purge_interval_ms: int = 60_000
    ) -> None:
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._purge_interval_ms = purge_interval_ms
        self._next_purge = clock() + purge_interval_ms

    @property
    def size(self) -> int:
        """Number of keys currently tracked."""
        with self._lock:
            return len(self._windows)

    def attempt(self, key: str, max_requests: int, window_ms: int) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            if now >= self._next_purge:
                self._purge(now)
            window = self._windows.get(key)
            if window is None or now - window.started_at >= window_ms:
                window = _Window(started_at=now, window_ms=window_ms)
                self._windows[key] = window
            window.count += 1
            return RateLimitResult(
                allowed=window.count <= max_requests,
                remaining=max(0, max_requests - window.count),
                reset_time=window.started_at + window_ms,
            )

    def _purge(self, now: int) -> None:
        self._windows = {k: w for k, w in self._windows.items() if not w.closed(now)}
        self._next_purge = now + self._purge_interval_ms

    def reset(self, key: str | None = None) -> None:
        """Forget one key's window, or every window when key is None."""
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)
