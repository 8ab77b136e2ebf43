"""Ensure the python-basics demo track and seed its first three lessons.

Run from the repo root:  python scripts/seed_demo.py
Uses DATABASE_URL (and the PG_SSL_* settings) from the environment or .env.
"""
import asyncio
import json
import sys

from learnpath.database import async_session_maker, close_db, init_db
from learnpath.engines.catalog import CatalogStore

TRACK = {
    "slug": "python-basics",
    "title": "Python Basics",
    "official_sources": ["https://docs.python.org/3/tutorial/"],
    "track_type": "official",
    "status": "active",
}

LESSONS = [
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


async def seed() -> dict:
    await init_db()
    async with async_session_maker() as session:
        store = CatalogStore(session)
        ensured = await store.ensure_track(TRACK)
        seeded = await store.seed_lessons({"track_slug": TRACK["slug"], "lessons": LESSONS})
        await session.commit()
    return {
        "event": "seed-demo-complete",
        "track_slug": ensured.track.slug,
        "lessons_seeded": seeded.count,
    }


async def main() -> int:
    try:
        print(json.dumps(await seed()))
        return 0
    except Exception as exc:
        print(json.dumps({"event": "seed-demo-failed", "error": str(exc)}), file=sys.stderr)
        return 1
    finally:
        await close_db()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
