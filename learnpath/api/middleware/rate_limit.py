"""
Access gate rate limiting - per caller, two budgets.

- standard: learner-facing and read calls, rate_limit_api_per_minute
- admin: catalog mutations, rate_limit_admin_per_minute

The budget store is a replaceable capability (RateBudgetStore). The in-memory
store is process-local; pass another implementation to externalize it.
"""

import time
from enum import Enum
from typing import Callable, Dict, Optional, Protocol, Tuple

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from learnpath.api.deps import get_client_ip
from learnpath.config import Settings, get_settings

WINDOW_SECONDS = 60


class RateLimitTier(str, Enum):
    STANDARD = "standard"
    ADMIN = "admin"


class RateBudgetStore(Protocol):
    def check_and_consume(self, caller_key: str, tier: RateLimitTier) -> bool:
        """True if the caller still has budget in ``tier`` (and consume one unit)."""
        ...


class InMemoryRateLimitStore:
    """Fixed-window counters. (tier, caller) -> (count, window_start)."""

    def __init__(self, limits: Dict[RateLimitTier, int], window_seconds: int = WINDOW_SECONDS):
        self.limits = limits
        self.window_seconds = window_seconds
        self._data: Dict[Tuple[RateLimitTier, str], Tuple[int, float]] = {}

    @classmethod
    def from_settings(cls, settings: Settings) -> "InMemoryRateLimitStore":
        return cls(
            {
                RateLimitTier.STANDARD: settings.rate_limit_api_per_minute,
                RateLimitTier.ADMIN: settings.rate_limit_admin_per_minute,
            }
        )

    def check_and_consume(self, caller_key: str, tier: RateLimitTier) -> bool:
        key = (tier, caller_key)
        now = time.monotonic()
        entry = self._data.get(key)
        if entry is None or now - entry[1] >= self.window_seconds:
            self._data[key] = (1, now)
            return True
        count, start = entry
        if count >= self.limits[tier]:
            return False
        self._data[key] = (count + 1, start)
        return True

    def cleanup_old(self, max_age_seconds: int = 3600) -> None:
        """Remove entries older than max_age_seconds to avoid unbounded growth."""
        now = time.monotonic()
        stale = [k for k, (_, start) in self._data.items() if now - start > max_age_seconds]
        for k in stale:
            self._data.pop(k, None)


def classify_tier(request: Request, api_prefix: str) -> RateLimitTier:
    """Catalog mutations spend the admin budget, everything else the standard one."""
    path = request.url.path
    if path.startswith(f"{api_prefix}/internal"):
        return RateLimitTier.ADMIN
    if request.method == "POST" and path.rstrip("/") == f"{api_prefix}/tracks":
        return RateLimitTier.ADMIN
    return RateLimitTier.STANDARD


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject callers over budget with 429 before the request reaches the core."""

    def __init__(self, app: ASGIApp, store: Optional[RateBudgetStore] = None):
        super().__init__(app)
        self.store = store

    def _get_store(self, settings: Settings) -> RateBudgetStore:
        if self.store is None:
            self.store = InMemoryRateLimitStore.from_settings(settings)
        return self.store

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        settings = get_settings()
        if not settings.rate_limit_enabled:
            return await call_next(request)

        if not request.url.path.startswith(settings.api_v1_prefix):
            return await call_next(request)

        store = self._get_store(settings)
        if isinstance(store, InMemoryRateLimitStore):
            store.cleanup_old(max_age_seconds=2 * store.window_seconds)

        tier = classify_tier(request, settings.api_v1_prefix)
        if not store.check_and_consume(get_client_ip(request), tier):
            return Response(
                content='{"detail":"Too many requests. Please try again later.","code":"rate_limited"}',
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                media_type="application/json",
            )
        return await call_next(request)
