"""
Kernel Layer

Persisted entities, the learner identity core, and the error taxonomy shared by
every engine:
- Models (learners, tracks, lessons, attempts, progress states)
- Identifier resolution (anonymous learner ids)
- Dialect-aware upsert construct
"""

from learnpath.kernel.exceptions import (
    LearnPathError,
    InvalidPayload,
    InvalidIdentifier,
    NotFound,
    ConflictError,
)
from learnpath.kernel.models import (
    Learner,
    Track,
    TrackType,
    TrackStatus,
    Lesson,
    Attempt,
    AttemptType,
    ProgressState,
)

__all__ = [
    # Errors
    "LearnPathError",
    "InvalidPayload",
    "InvalidIdentifier",
    "NotFound",
    "ConflictError",
    # Models
    "Learner",
    "Track",
    "TrackType",
    "TrackStatus",
    "Lesson",
    "Attempt",
    "AttemptType",
    "ProgressState",
]
