"""
Catalog Engine - idempotent track and lesson authoring.

- ensure_track: create-if-absent, partial merge if present
- seed_lessons: all-or-nothing upsert of a track's lessons by position
"""

from learnpath.engines.catalog.catalog_store import (
    CatalogStore,
    EnsureTrackResult,
    SeedLessonsResult,
    SeededLessonRow,
)

__all__ = [
    "CatalogStore",
    "EnsureTrackResult",
    "SeedLessonsResult",
    "SeededLessonRow",
]
