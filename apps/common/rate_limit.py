"""Fixed-window, in-process rate limiting.

A best-effort abuse deterrent: windows live in process memory, are not shared
between workers and vanish on restart.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict

from django.conf import settings


@dataclass(slots=True)
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Count calls per key in non-overlapping windows.

    ``clock`` returns seconds; tests inject a fake one. Expired windows are
    swept at most once per ``sweep_interval`` seconds, piggybacking on
    ``allow`` calls.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, sweep_interval: float = 60.0) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def allow(self, key: str, max_requests: int, window_ms: int) -> bool:
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep_locked(now)

            window = self._windows.get(key)
            if window is None or now >= window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + window_ms / 1000)
                return True

            if window.count >= max_requests:
                return False
            window.count += 1
            return True

    def sweep(self) -> int:
        """Drop expired windows; returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        expired = [key for key, window in self._windows.items() if now >= window.reset_at]
        for key in expired:
            del self._windows[key]
        self._last_sweep = now
        return len(expired)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


@dataclass(frozen=True, slots=True)
class RateBudget:
    """A named request budget for one operation class."""

    prefix: str
    max_requests: int
    window_ms: int
    per_user: bool = False

    def key(self, ident: str) -> str:
        return f"{self.prefix}:{ident}"


MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS

RATE_LIMITS: Dict[str, RateBudget] = {
    "login": RateBudget("login", 5, 15 * MINUTE_MS),
    "sign_up": RateBudget("signup", 10, HOUR_MS),
    "lead_search": RateBudget("lead-search", 100, HOUR_MS, per_user=True),
    "ai_context": RateBudget("ai", 60, HOUR_MS, per_user=True),
    "webhook": RateBudget("webhook", 100, MINUTE_MS),
}

_limiter: FixedWindowRateLimiter | None = None
_limiter_lock = threading.Lock()


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Return the process-wide limiter, creating it on first use."""
    global _limiter
    if _limiter is None:
        with _limiter_lock:
            if _limiter is None:
                _limiter = FixedWindowRateLimiter(
                    sweep_interval=float(getattr(settings, "RATE_LIMIT_SWEEP_SECONDS", 60))
                )
    return _limiter


def client_ip(request) -> str:
    """Best-effort caller IP: first X-Forwarded-For hop, else a sentinel."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
    first = forwarded.split(",")[0].strip() if forwarded else ""
    return first or "unknown"
