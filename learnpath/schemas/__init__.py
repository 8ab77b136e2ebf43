"""
Pydantic schemas for API request/response validation.
"""

from learnpath.schemas.catalog import (
    TrackCreate,
    TrackEnsure,
    LessonIn,
    LessonSeed,
    TrackResponse,
    TrackSummary,
    TrackListResponse,
    EnsureTrackResponse,
    CreateTrackResponse,
    SeededLesson,
    SeedLessonsResponse,
    LessonResponse,
)
from learnpath.schemas.progress import (
    AttemptCreate,
    AttemptResponse,
    NextLessonResponse,
    TrackCursor,
    ProgressSummaryResponse,
)
from learnpath.schemas.common import (
    ErrorResponse,
    HealthResponse,
    parse_payload,
)

__all__ = [
    # Catalog
    "TrackCreate",
    "TrackEnsure",
    "LessonIn",
    "LessonSeed",
    "TrackResponse",
    "TrackSummary",
    "TrackListResponse",
    "EnsureTrackResponse",
    "CreateTrackResponse",
    "SeededLesson",
    "SeedLessonsResponse",
    "LessonResponse",
    # Progress
    "AttemptCreate",
    "AttemptResponse",
    "NextLessonResponse",
    "TrackCursor",
    "ProgressSummaryResponse",
    # Common
    "ErrorResponse",
    "HealthResponse",
    "parse_payload",
]
