"""
API v1 routes.
"""

from fastapi import APIRouter

from learnpath.api.v1 import tracks, internal, learners

router = APIRouter()

router.include_router(tracks.router, prefix="/tracks", tags=["Tracks"])
router.include_router(internal.router, prefix="/internal", tags=["Catalog Authoring"])
router.include_router(learners.router, tags=["Learners"])
