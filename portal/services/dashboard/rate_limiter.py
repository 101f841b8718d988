"""
Login Lockout — Failed sign-in attempts per client IP.

Only rejected credentials count. A successful login forgets the IP's
history. State lives in process memory and is lost on restart.
"""

from __future__ import annotations

import logging
import time
from collections import deque

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60.0


class LoginRateLimiter:
    """Counts failed logins per IP over a trailing window."""

    def __init__(self, window_seconds: float = WINDOW_SECONDS) -> None:
        self.window_seconds = window_seconds
        self._failures: dict[str, deque[float]] = {}

    def _recent(self, ip: str, now: float) -> deque[float] | None:
        failures = self._failures.get(ip)
        if failures is None:
            return None
        cutoff = now - self.window_seconds
        while failures and failures[0] <= cutoff:
            failures.popleft()
        if not failures:
            del self._failures[ip]
            return None
        return failures

    def is_blocked(self, ip: str, max_failures: int) -> bool:
        """True once ``ip`` has ``max_failures`` failures inside the window."""
        failures = self._recent(ip, time.monotonic())
        if failures is not None and len(failures) >= max_failures:
            logger.warning(
                "Login locked for %s: %d failures in %.0fs",
                ip,
                len(failures),
                self.window_seconds,
            )
            return True
        return False

    def record_failure(self, ip: str) -> None:
        now = time.monotonic()
        failures = self._recent(ip, now)
        if failures is None:
            failures = self._failures[ip] = deque()
        failures.append(now)

    def clear(self, ip: str) -> None:
        self._failures.pop(ip, None)

    def tracked_ips(self) -> int:
        return len(self._failures)

    def reset(self) -> None:
        """Forget every IP (for testing)."""
        self._failures.clear()


_rate_limiter: LoginRateLimiter | None = None


def get_rate_limiter() -> LoginRateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = LoginRateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    global _rate_limiter
    _rate_limiter = None
