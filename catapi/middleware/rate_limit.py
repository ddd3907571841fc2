"""
Cat Registry API — Rate Limiting Middleware
============================================

What:  Per-IP sliding window rate limiter.
How:   Each IP keeps a deque of request timestamps. Timestamps older than the
       window are popped from the left on every request; a client already at
       the limit gets 429 with Retry-After.

Single-process only: the counters are not shared between uvicorn workers.
Disable with RATE_LIMIT_ENABLED=false (the test suite does).
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from catapi.config import settings
from catapi.exceptions import RateLimitExceededError
from catapi.middleware.logging import client_ip
from catapi.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Sweep idle IPs after this many requests
SWEEP_EVERY = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Configuration (from settings):
        rate_limit_enabled:  Master switch
        rate_limit_requests: Max requests per window
        rate_limit_window:   Window duration in seconds

    Runs outside the exception handlers, so the 429 envelope is built here
    from RateLimitExceededError rather than raised.
    """

    EXCLUDED_PATHS = frozenset({"/health", "/docs", "/openapi.json", "/redoc"})

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)
        self._since_sweep = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not settings.rate_limit_enabled or request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        ip = client_ip(request)
        retry_after = self._check(ip, time.time())
        if retry_after is not None:
            error = RateLimitExceededError(retry_after=retry_after)
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                ip,
                settings.rate_limit_requests,
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=error.status_code,
                content={
                    "message": error.message,
                    "error": error.error_code,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)

    def _check(self, ip: str, now: float) -> Optional[int]:
        """Record a hit for `ip`; return seconds to wait if it is over the limit."""
        window_start = now - settings.rate_limit_window
        hits = self._hits[ip]
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= settings.rate_limit_requests:
            return int(hits[0] + settings.rate_limit_window - now) + 1

        hits.append(now)
        self._since_sweep += 1
        if self._since_sweep >= SWEEP_EVERY:
            self._sweep(window_start)
        return None

    def _sweep(self, window_start: float) -> None:
        """Forget IPs with no hit inside the current window."""
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._hits[ip]
        self._since_sweep = 0
        if idle:
            logger.debug("Dropped %d idle rate limit entries", len(idle))
