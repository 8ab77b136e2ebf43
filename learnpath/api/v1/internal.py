"""
Catalog authoring endpoints for the content agent. All require the admin key.
"""

from fastapi import APIRouter, Response, status

from learnpath.api.deps import AdminKey, DbSession
from learnpath.engines.catalog import CatalogStore
from learnpath.schemas.catalog import (
    EnsureTrackResponse,
    LessonSeed,
    SeededLesson,
    SeedLessonsResponse,
    TrackEnsure,
    TrackResponse,
    TrackSummary,
)

router = APIRouter(dependencies=[AdminKey])


@router.post("/ensure-track", response_model=EnsureTrackResponse)
async def ensure_track(body: TrackEnsure, response: Response, db: DbSession):
    """
    Create the track or merge the supplied fields into it.

    201 when the track was created, 200 when an existing track was merged.
    """
    result = await CatalogStore(db).ensure_track(body)
    response.status_code = status.HTTP_201_CREATED if result.was_created else status.HTTP_200_OK
    return EnsureTrackResponse(
        created=result.was_created,
        track=TrackResponse.model_validate(result.track),
    )


@router.post("/seed-lessons", response_model=SeedLessonsResponse)
async def seed_lessons(body: LessonSeed, db: DbSession):
    """Upsert a track's lessons by position; all of them or none."""
    result = await CatalogStore(db).seed_lessons(body)
    return SeedLessonsResponse(
        track=TrackSummary.model_validate(result.track),
        inserted_or_updated=result.count,
        lessons=[
            SeededLesson(id=row.id, lesson_order=row.position, title=row.title)
            for row in result.lessons
        ],
    )
