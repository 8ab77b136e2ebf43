"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.
"""

import ssl
from typing import AsyncGenerator, Union

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from learnpath.config import Settings, get_settings

SSL_MODES = ("disable", "require", "verify-full")


def resolve_ssl_context(settings: Settings) -> Union[ssl.SSLContext, bool]:
    """
    Build the TLS configuration for PostgreSQL connections.

    Returns False when TLS is disabled, otherwise an SSLContext that always
    verifies the server certificate chain. verify-full also checks the hostname.

    Raises:
        ValueError: Unknown mode, or TLS disabled in production
    """
    mode = (settings.pg_ssl_mode or "require").lower()

    if mode == "disable":
        if settings.environment == "production":
            raise ValueError("PG_SSL_MODE=disable is not allowed in production.")
        return False

    if mode not in SSL_MODES:
        raise ValueError("Invalid PG_SSL_MODE. Use disable, require, or verify-full.")

    context = ssl.create_default_context(cafile=settings.pg_ssl_ca_path)
    context.verify_mode = ssl.CERT_REQUIRED
    context.check_hostname = mode == "verify-full"

    if settings.pg_ssl_cert_path:
        context.load_cert_chain(
            certfile=settings.pg_ssl_cert_path,
            keyfile=settings.pg_ssl_key_path,
        )

    return context


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    Per-connection SQLite setup: WAL, foreign keys, busy timeout.

    The driver's implicit transaction handling is switched off and BEGIN is
    emitted explicitly, otherwise SAVEPOINT (begin_nested) misbehaves.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")


settings = get_settings()

# Determine engine options based on database type
is_sqlite = settings.database_url.startswith("sqlite")

if is_sqlite:
    # NullPool: every session gets its own connection
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    configure_sqlite(engine)
else:
    # PostgreSQL settings with connection pooling
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        connect_args={"ssl": resolve_ssl_context(settings)},
    )

# Session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that yields database sessions.

    Commits once the request handler returns; any exception rolls back
    everything the request wrote.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Initialize database tables."""
    # Import Base from kernel models to ensure all models are registered
    from learnpath.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
