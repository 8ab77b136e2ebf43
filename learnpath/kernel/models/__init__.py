"""
Kernel Data Models

SQLAlchemy models for the five persisted entities: learners, tracks, lessons,
attempts and progress states.
"""

from learnpath.kernel.models.base import Base, CreatedAtMixin, generate_uuid
from learnpath.kernel.models.learner import Learner
from learnpath.kernel.models.catalog import Track, TrackType, TrackStatus, Lesson
from learnpath.kernel.models.progress import Attempt, AttemptType, ProgressState

__all__ = [
    # Base
    "Base",
    "CreatedAtMixin",
    "generate_uuid",
    # Learner
    "Learner",
    # Catalog
    "Track",
    "TrackType",
    "TrackStatus",
    "Lesson",
    # Progress
    "Attempt",
    "AttemptType",
    "ProgressState",
]
