"""
FastAPI dependencies for database sessions and the catalog privilege check.
"""

import secrets
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.config import get_settings
from learnpath.database import get_db

ADMIN_KEY_HEADER = "X-ADMIN-KEY"

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def require_admin_key(
    x_admin_key: Annotated[Optional[str], Header(alias=ADMIN_KEY_HEADER)] = None,
) -> None:
    """
    Allow catalog mutations only for callers presenting the configured admin key.

    Raises 500 when no key is configured, so an unconfigured server never
    accepts authoring calls, and 401 on a missing or wrong key.
    """
    configured = get_settings().admin_key
    if not configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="ADMIN_KEY is not configured on the server.",
        )
    if not x_admin_key or not secrets.compare_digest(x_admin_key, configured):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


AdminKey = Depends(require_admin_key)


def get_request_id(request: Request) -> Optional[str]:
    """Get request correlation ID (set by RequestIdMiddleware)."""
    return getattr(request.state, "request_id", None)


def get_client_ip(request: Request) -> str:
    """Client IP from X-Forwarded-For or the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
