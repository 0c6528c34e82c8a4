"""
DevCamper Backend — Rate Limit Middleware Tests
=================================================

What:  RateLimitMiddleware.dispatch() called directly with a bare request
       scope, so the per-IP table can be inspected.
"""

import time
from unittest.mock import AsyncMock

import pytest
from starlette.requests import Request
from starlette.responses import Response

from devcamper.config import settings
from devcamper.middleware.rate_limit import RateLimitMiddleware


def _request(ip: str, path: str = "/api/v1/bootcamps") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [],
        "client": (ip, 5000),
    })


@pytest.fixture
def limiter():
    return RateLimitMiddleware(app=AsyncMock())


@pytest.fixture
def call_next():
    return AsyncMock(return_value=Response("ok"))


class TestIdleCleanup:

    @pytest.mark.asyncio
    async def test_idle_ips_swept_once_interval_passes(self, limiter, call_next):
        stale = time.time() - settings.rate_limit_window - 10
        limiter._requests["10.0.0.1"] = [stale]
        limiter._requests["10.0.0.2"] = [stale]
        limiter._last_cleanup = time.time() - limiter.CLEANUP_INTERVAL - 1

        await limiter.dispatch(_request("10.0.0.9"), call_next)

        assert set(limiter._requests) == {"10.0.0.9"}

    @pytest.mark.asyncio
    async def test_no_sweep_inside_interval(self, limiter, call_next):
        stale = time.time() - settings.rate_limit_window - 10
        limiter._requests["10.0.0.1"] = [stale]

        await limiter.dispatch(_request("10.0.0.9"), call_next)

        assert "10.0.0.1" in limiter._requests

    @pytest.mark.asyncio
    async def test_rejected_requests_still_trigger_sweep(self, limiter, call_next, monkeypatch):
        monkeypatch.setattr(settings, "rate_limit_requests", 1)
        stale = time.time() - settings.rate_limit_window - 10
        limiter._requests["10.0.0.1"] = [stale]
        limiter._requests["10.0.0.9"] = [time.time()]
        limiter._last_cleanup = time.time() - limiter.CLEANUP_INTERVAL - 1

        response = await limiter.dispatch(_request("10.0.0.9"), call_next)

        assert response.status_code == 429
        assert "10.0.0.1" not in limiter._requests
        call_next.assert_not_awaited()


class TestLimit:

    @pytest.mark.asyncio
    async def test_excluded_paths_not_counted(self, limiter, call_next):
        await limiter.dispatch(_request("10.0.0.9", "/health"), call_next)

        assert "10.0.0.9" not in limiter._requests
        call_next.assert_awaited_once()
