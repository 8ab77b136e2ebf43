"""
Pytest fixtures for LearnPath tests.

Every test runs against a fresh SQLite file so upserts, savepoints and
foreign keys behave the way they do in the application.
"""

import os
import tempfile
from typing import AsyncGenerator

# Configure the app before anything imports learnpath.database
_tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
_tmp.close()
TEST_DB_PATH = _tmp.name
TEST_DATABASE_URL = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
TEST_ADMIN_KEY = "test-admin-key"

os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_KEY"] = TEST_ADMIN_KEY

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from learnpath.config import get_settings

get_settings.cache_clear()

from learnpath.database import configure_sqlite
from learnpath.kernel.models import Base


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine with a fresh schema."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    configure_sqlite(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


# Sample payloads

@pytest.fixture
def track_payload() -> dict:
    return {
        "slug": "python-basics",
        "title": "Python Basics",
        "official_sources": ["https://docs.python.org/3/tutorial/"],
    }


@pytest.fixture
def lessons_payload() -> list:
    return [
        {
            "lesson_order": 1,
            "title": "Install Python and run your first script",
            "objectives": ["Install Python", "Run a hello world script"],
            "tags": ["setup", "syntax"],
            "source_urls": ["https://docs.python.org/3/tutorial/interpreter.html"],
        },
        {
            "lesson_order": 2,
            "title": "Variables, types, and control flow",
            "objectives": ["Use variables", "Write if/else and loops"],
            "tags": ["fundamentals"],
            "source_urls": ["https://docs.python.org/3/tutorial/introduction.html"],
        },
        {
            "lesson_order": 3,
            "title": "Functions and modules",
            "objectives": ["Define functions", "Import modules"],
            "tags": ["functions", "modules"],
            "source_urls": ["https://docs.python.org/3/tutorial/modules.html"],
        },
    ]
