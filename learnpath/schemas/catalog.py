"""
Catalog schemas - track and lesson authoring payloads and responses.
"""

import uuid
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from learnpath.kernel.models.catalog import TrackStatus, TrackType
from learnpath.schemas.common import check_urls

SLUG_MIN, SLUG_MAX = 2, 50


def normalize_slug(value: str) -> str:
    """Trim and lowercase a slug."""
    return value.strip().lower()


class TrackCreate(BaseModel):
    """Strict track creation request."""

    slug: str = Field(..., min_length=SLUG_MIN, max_length=SLUG_MAX)
    title: str = Field(..., min_length=2, max_length=100)
    official_sources: List[str] = Field(default_factory=list)

    @field_validator("slug", mode="before")
    @classmethod
    def _normalize_slug(cls, v):
        return normalize_slug(v) if isinstance(v, str) else v

    @field_validator("official_sources")
    @classmethod
    def _check_sources(cls, v: List[str]) -> List[str]:
        return check_urls(v)


class TrackEnsure(TrackCreate):
    """
    Ensure-track request.

    Optional fields merge only when sent. Presence is read from
    ``model_fields_set``: an omitted field keeps the stored value, while an
    explicit ``null`` owner or ``[]`` sources overwrites it.
    """

    track_type: TrackType = TrackType.CUSTOM
    owner_user_id: Optional[uuid.UUID] = None
    status: TrackStatus = TrackStatus.DRAFT

    MERGEABLE_FIELDS: ClassVar[Tuple[str, ...]] = ("official_sources", "track_type", "owner_user_id", "status")

    @property
    def supplied_fields(self) -> List[str]:
        """Optional fields the caller actually sent."""
        return [name for name in self.MERGEABLE_FIELDS if name in self.model_fields_set]


class LessonIn(BaseModel):
    """One lesson in a seed request."""

    lesson_order: int = Field(..., gt=0)
    title: str = Field(..., min_length=2, max_length=160)
    objectives: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    source_urls: List[str] = Field(default_factory=list)

    @field_validator("source_urls")
    @classmethod
    def _check_sources(cls, v: List[str]) -> List[str]:
        return check_urls(v)


class LessonSeed(BaseModel):
    """Seed a track's lessons in one all-or-nothing call."""

    track_slug: str = Field(..., min_length=SLUG_MIN, max_length=SLUG_MAX)
    lessons: List[LessonIn] = Field(..., min_length=1)

    @field_validator("track_slug", mode="before")
    @classmethod
    def _normalize_slug(cls, v):
        return normalize_slug(v) if isinstance(v, str) else v

    @model_validator(mode="after")
    def _unique_positions(self) -> "LessonSeed":
        seen = set()
        for lesson in self.lessons:
            if lesson.lesson_order in seen:
                raise ValueError(f"Duplicate lesson_order {lesson.lesson_order}")
            seen.add(lesson.lesson_order)
        return self


class TrackResponse(BaseModel):
    """Track as returned by the API."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    slug: str
    title: str
    official_sources: List[str]
    track_type: str
    owner_user_id: Optional[uuid.UUID] = Field(None, validation_alias="owner_learner_id")
    status: str


class TrackSummary(BaseModel):
    """Compact track reference."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    slug: str
    title: str


class TrackListResponse(BaseModel):
    tracks: List[TrackResponse]


class EnsureTrackResponse(BaseModel):
    created: bool
    track: TrackResponse


class CreateTrackResponse(BaseModel):
    track: TrackResponse


class SeededLesson(BaseModel):
    """Id, position and title of an upserted lesson."""

    id: uuid.UUID
    lesson_order: int
    title: str


class SeedLessonsResponse(BaseModel):
    track: TrackSummary
    inserted_or_updated: int
    lessons: List[SeededLesson]


class LessonResponse(BaseModel):
    """Full lesson content served to learners."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    lesson_order: int = Field(..., validation_alias="position")
    title: str
    objectives: List[str]
    tags: List[str]
    source_urls: List[str]
