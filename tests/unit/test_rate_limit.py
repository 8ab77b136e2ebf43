"""Unit tests for the access gate: budget store, tiering, and the middleware."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.requests import Request

from learnpath.api.middleware import rate_limit
from learnpath.api.middleware.rate_limit import (
    InMemoryRateLimitStore,
    RateLimitMiddleware,
    RateLimitTier,
    classify_tier,
)
from learnpath.config import Settings


def _request(method: str, path: str) -> Request:
    return Request({"type": "http", "method": method, "path": path, "headers": [], "query_string": b""})


class TestInMemoryRateLimitStore:
    """Tests for fixed-window counting."""

    def test_budget_exhausts(self):
        store = InMemoryRateLimitStore({RateLimitTier.STANDARD: 2, RateLimitTier.ADMIN: 1})
        assert store.check_and_consume("1.2.3.4", RateLimitTier.STANDARD)
        assert store.check_and_consume("1.2.3.4", RateLimitTier.STANDARD)
        assert not store.check_and_consume("1.2.3.4", RateLimitTier.STANDARD)

    def test_tiers_and_callers_are_independent(self):
        store = InMemoryRateLimitStore({RateLimitTier.STANDARD: 1, RateLimitTier.ADMIN: 1})
        assert store.check_and_consume("a", RateLimitTier.STANDARD)
        assert store.check_and_consume("a", RateLimitTier.ADMIN)
        assert store.check_and_consume("b", RateLimitTier.STANDARD)
        assert not store.check_and_consume("a", RateLimitTier.ADMIN)

    def test_window_resets(self):
        store = InMemoryRateLimitStore({RateLimitTier.STANDARD: 1, RateLimitTier.ADMIN: 1}, window_seconds=0)
        assert store.check_and_consume("a", RateLimitTier.STANDARD)
        assert store.check_and_consume("a", RateLimitTier.STANDARD)

    def test_from_settings(self):
        store = InMemoryRateLimitStore.from_settings(
            Settings(rate_limit_api_per_minute=7, rate_limit_admin_per_minute=3)
        )
        assert store.limits == {RateLimitTier.STANDARD: 7, RateLimitTier.ADMIN: 3}


class TestClassifyTier:
    """Catalog mutations use the admin budget."""

    @pytest.mark.parametrize(
        "method,path,tier",
        [
            ("POST", "/v1/internal/ensure-track", RateLimitTier.ADMIN),
            ("POST", "/v1/internal/seed-lessons", RateLimitTier.ADMIN),
            ("POST", "/v1/tracks", RateLimitTier.ADMIN),
            ("GET", "/v1/tracks", RateLimitTier.STANDARD),
            ("POST", "/v1/attempts", RateLimitTier.STANDARD),
            ("GET", "/v1/lessons/next", RateLimitTier.STANDARD),
        ],
    )
    def test_classify(self, method, path, tier):
        assert classify_tier(_request(method, path), "/v1") is tier


class TestRateLimitMiddleware:
    """The middleware answers 429 once the caller's budget is spent."""

    @pytest.fixture
    def limited_app(self, monkeypatch) -> FastAPI:
        settings = Settings(
            rate_limit_enabled=True,
            rate_limit_api_per_minute=2,
            rate_limit_admin_per_minute=1,
        )
        monkeypatch.setattr(rate_limit, "get_settings", lambda: settings)

        app = FastAPI()
        app.add_middleware(RateLimitMiddleware)

        @app.get("/v1/ping")
        async def ping():
            return {"ok": True}

        @app.get("/health")
        async def health():
            return {"status": "ok"}

        return app

    async def test_rejects_over_budget(self, limited_app):
        async with AsyncClient(transport=ASGITransport(app=limited_app), base_url="http://test") as client:
            assert (await client.get("/v1/ping")).status_code == 200
            assert (await client.get("/v1/ping")).status_code == 200
            response = await client.get("/v1/ping")

        assert response.status_code == 429
        assert response.json()["code"] == "rate_limited"

    async def test_paths_outside_api_are_not_limited(self, limited_app):
        async with AsyncClient(transport=ASGITransport(app=limited_app), base_url="http://test") as client:
            for _ in range(5):
                assert (await client.get("/health")).status_code == 200
