"""
Learner endpoints - dashboard, next lesson, attempt submission.

Learners are anonymous: ``user_id`` is optional everywhere and a new learner
is created when it is missing.
"""

from typing import Optional

from fastapi import APIRouter, Query

from learnpath.api.deps import DbSession
from learnpath.engines.catalog import CatalogStore
from learnpath.engines.progress import AttemptEvaluator, ProgressTracker
from learnpath.kernel.exceptions import NotFound
from learnpath.kernel.identity import IdentifierResolver
from learnpath.schemas.catalog import LessonResponse, TrackResponse
from learnpath.schemas.progress import (
    AttemptCreate,
    AttemptResponse,
    NextLessonResponse,
    ProgressSummaryResponse,
    TrackCursor,
)

router = APIRouter()

NO_LESSON_MESSAGE = "No lessons found for this track yet. Seed lessons in the lessons table."


@router.get("/me", response_model=ProgressSummaryResponse)
async def get_me(db: DbSession, user_id: Optional[str] = None):
    """Resolve the learner and summarize their recent activity and track cursors."""
    learner_id = await IdentifierResolver(db).resolve(user_id)
    summary = await ProgressTracker(db).summarize(learner_id)
    return ProgressSummaryResponse(
        user_id=summary.learner_id,
        attempts_7d=summary.attempts_7d,
        tracks=[
            TrackCursor(
                track_slug=c.track_slug,
                current_position=c.current_position,
                last_seen=c.last_seen,
            )
            for c in summary.tracks
        ],
    )


@router.get("/lessons/next", response_model=NextLessonResponse)
async def get_next_lesson(
    db: DbSession,
    track: str = Query(..., min_length=1, description="Track slug"),
    user_id: Optional[str] = None,
):
    """Lesson at the learner's cursor in the track; next_lesson is null when none is authored."""
    learner_id = await IdentifierResolver(db).resolve(user_id)
    track_row = await CatalogStore(db).get_track_by_slug(track)
    if track_row is None:
        raise NotFound("track", track)

    result = await ProgressTracker(db).next_lesson(learner_id, track_row)
    if not result.available:
        return NextLessonResponse(
            user_id=learner_id,
            track=TrackResponse.model_validate(track_row),
            next_lesson=None,
            message=NO_LESSON_MESSAGE,
        )
    return NextLessonResponse(
        user_id=learner_id,
        track=TrackResponse.model_validate(track_row),
        next_lesson=LessonResponse.model_validate(result.lesson),
    )


@router.post("/attempts", response_model=AttemptResponse)
async def submit_attempt(body: AttemptCreate, db: DbSession):
    """Record an attempt; the cursor advances when the score is at least 70%."""
    outcome = await AttemptEvaluator(db).record_attempt(body)
    return AttemptResponse(
        user_id=outcome.learner_id,
        attempt_id=outcome.attempt_id,
        saved_at=outcome.saved_at,
        advanced=outcome.advanced,
    )
