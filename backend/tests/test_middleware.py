"""
Hebrew Study Backend - Middleware Tests
========================================
"""

import logging

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from hebrewstudy.middleware.logging import access_log_level
from hebrewstudy.middleware.rate_limit import RateLimitMiddleware
from hebrewstudy.middleware.request_id import RequestIDMiddleware


def _limited_app(max_requests: int) -> FastAPI:
    app = FastAPI()

    @app.get("/api/vocab/sets")
    async def sets():
        return {"success": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)
    return app


@pytest.mark.parametrize(
    "status,path,expected",
    [
        (200, "/api/bible/books", logging.INFO),
        (200, "/api/vocab/session/heartbeat", logging.DEBUG),
        (200, "/health", logging.DEBUG),
        (401, "/api/vocab/session/heartbeat", logging.WARNING),
        (404, "/api/vocab/sets/x/activate", logging.WARNING),
        (500, "/health", logging.ERROR),
    ],
)
def test_access_log_level(status, path, expected):
    assert access_log_level(status, path) == expected


@pytest.mark.asyncio
async def test_rate_limit_rejects_after_budget():
    transport = ASGITransport(app=_limited_app(max_requests=2))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        assert (await client.get("/api/vocab/sets")).status_code == 200
        assert (await client.get("/api/vocab/sets")).status_code == 200
        response = await client.get("/api/vocab/sets")

    assert response.status_code == 429
    assert int(response.headers["Retry-After"]) > 0
    body = response.json()
    assert body["error"].startswith("Too many requests")
    assert body["details"]["retryAfter"] > 0


@pytest.mark.asyncio
async def test_health_is_not_rate_limited():
    transport = ASGITransport(app=_limited_app(max_requests=1))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        statuses = [(await client.get("/health")).status_code for _ in range(3)]
    assert statuses == [200, 200, 200]


@pytest.mark.asyncio
async def test_request_id_generated_when_absent():
    transport = ASGITransport(app=_limited_app(max_requests=10))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/vocab/sets")
    assert len(response.headers["X-Request-ID"]) == 8
