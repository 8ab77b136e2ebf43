"""
Track catalog endpoints - public listing and privileged creation.
"""

from fastapi import APIRouter, status

from learnpath.api.deps import AdminKey, DbSession
from learnpath.engines.catalog import CatalogStore
from learnpath.schemas.catalog import (
    CreateTrackResponse,
    TrackCreate,
    TrackListResponse,
    TrackResponse,
)

router = APIRouter()


@router.get("", response_model=TrackListResponse)
async def list_tracks(db: DbSession):
    """List all tracks ordered by title."""
    tracks = await CatalogStore(db).list_tracks()
    return TrackListResponse(tracks=[TrackResponse.model_validate(t) for t in tracks])


@router.post(
    "",
    response_model=CreateTrackResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[AdminKey],
)
async def create_track(body: TrackCreate, db: DbSession):
    """Create a track. 409 if the slug already exists; use ensure-track to merge."""
    track = await CatalogStore(db).create_track(body)
    return CreateTrackResponse(track=TrackResponse.model_validate(track))
