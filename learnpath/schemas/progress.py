"""
Pydantic schemas for learner progress: next lesson, attempts, summary.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from learnpath.kernel.models.progress import AttemptType
from learnpath.schemas.catalog import LessonResponse, TrackResponse
from learnpath.schemas.common import UtcDatetime


class AttemptCreate(BaseModel):
    """
    Attempt submission.

    ``user_id`` stays a plain string so a malformed id is reported by the
    identifier resolver rather than as a schema error.
    """

    user_id: Optional[str] = None
    lesson_id: uuid.UUID
    attempt_type: AttemptType
    score: Optional[float] = None
    max_score: Optional[float] = None
    duration_sec: Optional[int] = Field(None, gt=0)
    weak_tags: List[str] = Field(default_factory=list)


class AttemptResponse(BaseModel):
    """Result of recording an attempt."""

    user_id: uuid.UUID
    attempt_id: uuid.UUID
    saved_at: UtcDatetime
    advanced: bool


class NextLessonResponse(BaseModel):
    """Lesson at the learner's cursor, or null when none is authored there."""

    user_id: uuid.UUID
    track: TrackResponse
    next_lesson: Optional[LessonResponse] = None
    message: Optional[str] = None


class TrackCursor(BaseModel):
    """Learner's position within one track."""

    track_slug: str
    current_position: int
    last_seen: Optional[UtcDatetime] = None


class ProgressSummaryResponse(BaseModel):
    """Learner dashboard."""

    user_id: uuid.UUID
    attempts_7d: int
    tracks: List[TrackCursor] = []
