"""
Dialect-aware INSERT construct.

PostgreSQL and SQLite both support ``INSERT ... ON CONFLICT``, but SQLAlchemy
exposes it through each dialect's own ``insert()``. Engines pick the right one
here so upserts stay single statements on either backend.
"""

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession


def dialect_insert(session: AsyncSession, model):
    """Return an ``insert(model)`` that supports ``on_conflict_do_*`` for the session's backend."""
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(model)
    if dialect == "sqlite":
        return sqlite.insert(model)
    raise ValueError(f"Upserts are not supported on {dialect}")
