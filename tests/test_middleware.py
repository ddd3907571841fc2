"""
Cat Registry API — Middleware Tests
====================================

What:  Sliding window accounting of the rate limiter and the access log
       level mapping. The limiter is exercised without an HTTP stack.
"""

import logging
from unittest.mock import patch

import pytest

from catapi.config import settings
from catapi.middleware.logging import level_for_status
from catapi.middleware.rate_limit import RateLimitMiddleware


class TestRateLimiter:

    @pytest.fixture(autouse=True)
    def limiter(self):
        with patch.object(settings, "rate_limit_requests", 2), \
             patch.object(settings, "rate_limit_window", 60):
            self.limiter = RateLimitMiddleware(app=None)
            yield

    def test_allows_up_to_the_limit(self):
        assert self.limiter._check("1.2.3.4", 1000.0) is None
        assert self.limiter._check("1.2.3.4", 1001.0) is None

    def test_rejects_over_the_limit_with_retry_after(self):
        self.limiter._check("1.2.3.4", 1000.0)
        self.limiter._check("1.2.3.4", 1001.0)
        assert self.limiter._check("1.2.3.4", 1010.0) == 51

    def test_window_slides(self):
        self.limiter._check("1.2.3.4", 1000.0)
        self.limiter._check("1.2.3.4", 1001.0)
        assert self.limiter._check("1.2.3.4", 1061.0) is None

    def test_ips_are_counted_separately(self):
        self.limiter._check("1.2.3.4", 1000.0)
        self.limiter._check("1.2.3.4", 1001.0)
        assert self.limiter._check("5.6.7.8", 1002.0) is None

    def test_sweep_drops_idle_ips(self):
        self.limiter._check("1.2.3.4", 1000.0)
        self.limiter._sweep(window_start=2000.0)
        assert "1.2.3.4" not in self.limiter._hits


@pytest.mark.parametrize("status, level", [
    (200, logging.INFO),
    (302, logging.INFO),
    (404, logging.WARNING),
    (429, logging.WARNING),
    (500, logging.ERROR),
])
def test_level_for_status(status, level):
    assert level_for_status(status) == level
