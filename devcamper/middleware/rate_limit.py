"""
DevCamper Backend — Rate Limiting Middleware
==============================================

What:  Per-IP sliding window limiter: RATE_LIMIT_REQUESTS per
       RATE_LIMIT_WINDOW seconds (100 per 10 minutes by default).
How:   Keeps the timestamps of each IP's recent requests in memory; a
       request arriving with the window already full gets a 429 envelope and
       a Retry-After header.

Single-process only: each worker keeps its own counters.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from devcamper.config import settings
from devcamper.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Excluded paths: /health and the API docs.

    Errors raised inside BaseHTTPMiddleware bypass the app's exception
    handlers, so the 429 envelope is rendered here.
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    # Seconds between sweeps of IPs with no request inside the window
    CLEANUP_INTERVAL = 60.0

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[str, List[float]] = defaultdict(list)
        self._last_cleanup = time.time()

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        window_start = now - settings.rate_limit_window

        if now - self._last_cleanup >= self.CLEANUP_INTERVAL:
            self._cleanup_inactive_ips(window_start)
            self._last_cleanup = now

        self._requests[client_ip] = [
            ts for ts in self._requests[client_ip] if ts > window_start
        ]

        if len(self._requests[client_ip]) >= settings.rate_limit_requests:
            oldest = self._requests[client_ip][0]
            exc = RateLimitExceededError(
                retry_after=int(oldest + settings.rate_limit_window - now) + 1
            )
            logger.warning(
                "Rate limit exceeded for IP %s: %d requests in %ds window",
                client_ip,
                len(self._requests[client_ip]),
                settings.rate_limit_window,
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={"success": False, "error": exc.message, "request_id": None},
                headers={"Retry-After": str(exc.retry_after)},
            )

        self._requests[client_ip].append(now)
        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))
