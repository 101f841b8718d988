"""
Tests for the failed-login lockout.

Covers: failures below the limit, lockout at the limit, window expiry,
per-IP isolation, clear on success, pruning of idle IPs.
"""

import time
from unittest.mock import patch

import pytest

from portal.services.dashboard.rate_limiter import LoginRateLimiter

IP = "1.2.3.4"


def _fail(limiter: LoginRateLimiter, ip: str, times: int) -> None:
    for _ in range(times):
        limiter.record_failure(ip)


# ===========================================================================
# TestLoginRateLimiter
# ===========================================================================


@pytest.mark.unit
class TestLoginRateLimiter:
    def test_unknown_ip_is_not_blocked(self) -> None:
        limiter = LoginRateLimiter()
        assert limiter.is_blocked(IP, max_failures=3) is False
        assert limiter.tracked_ips() == 0

    def test_checking_does_not_count_as_failure(self) -> None:
        limiter = LoginRateLimiter()
        for _ in range(10):
            assert limiter.is_blocked(IP, max_failures=3) is False

    def test_blocks_at_limit(self) -> None:
        limiter = LoginRateLimiter()
        _fail(limiter, IP, 2)
        assert limiter.is_blocked(IP, max_failures=3) is False
        limiter.record_failure(IP)
        assert limiter.is_blocked(IP, max_failures=3) is True

    def test_ips_are_independent(self) -> None:
        limiter = LoginRateLimiter()
        _fail(limiter, IP, 3)
        assert limiter.is_blocked("5.6.7.8", max_failures=3) is False

    def test_failures_expire_and_idle_ip_is_pruned(self) -> None:
        limiter = LoginRateLimiter(window_seconds=60.0)
        now = time.monotonic()
        _fail(limiter, IP, 3)

        with patch("portal.services.dashboard.rate_limiter.time") as mock_time:
            mock_time.monotonic.return_value = now + 61.0
            assert limiter.is_blocked(IP, max_failures=3) is False

        assert limiter.tracked_ips() == 0

    def test_clear_forgets_one_ip(self) -> None:
        limiter = LoginRateLimiter()
        _fail(limiter, IP, 3)
        _fail(limiter, "5.6.7.8", 3)

        limiter.clear(IP)

        assert limiter.is_blocked(IP, max_failures=3) is False
        assert limiter.is_blocked("5.6.7.8", max_failures=3) is True

    def test_reset_forgets_everything(self) -> None:
        limiter = LoginRateLimiter()
        _fail(limiter, IP, 3)
        limiter.reset()
        assert limiter.tracked_ips() == 0
        assert limiter.is_blocked(IP, max_failures=3) is False
