"""
Catalog Store - tracks and lessons with idempotent "ensure" semantics.

Authoring agents declare the same catalog over and over. Declaring it again
must never duplicate a track or lesson and must never lose data the agent did
not mention:

- ensure_track: create-if-absent, partial merge of the fields actually sent
- seed_lessons: upsert on (track, position), full replace per lesson, all
  lessons of one call in a single savepoint
"""

import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.kernel.exceptions import ConflictError, NotFound
from learnpath.kernel.identity.identifier_resolver import IdentifierResolver
from learnpath.kernel.models.catalog import Lesson, Track
from learnpath.kernel.upsert import dialect_insert
from learnpath.logging_config import get_logger
from learnpath.schemas.catalog import LessonSeed, TrackCreate, TrackEnsure
from learnpath.schemas.common import parse_payload

logger = get_logger(__name__)

Payload = Mapping[str, Any]

# request field -> (Track attribute, value converter)
_MERGE_COLUMNS: Dict[str, tuple[str, Callable[[Any], Any]]] = {
    "official_sources": ("official_sources", list),
    "track_type": ("track_type", lambda v: v.value),
    "owner_user_id": ("owner_learner_id", lambda v: v),
    "status": ("status", lambda v: v.value),
}


@dataclass
class EnsureTrackResult:
    """Outcome of ensure_track."""

    track: Track
    was_created: bool


@dataclass
class SeededLessonRow:
    """Id, position and title of one upserted lesson."""

    id: uuid.UUID
    position: int
    title: str


@dataclass
class SeedLessonsResult:
    """Outcome of seed_lessons."""

    track: Track
    lessons: List[SeededLessonRow]

    @property
    def count(self) -> int:
        return len(self.lessons)


class CatalogStore:
    """
    Owns Track and Lesson rows.

    Writes are flushed, never committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.resolver = IdentifierResolver(session)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_track_by_slug(self, slug: str) -> Optional[Track]:
        """Look up a track by slug (normalized before the lookup)."""
        result = await self.session.execute(
            select(Track).where(Track.slug == slug.strip().lower())
        )
        return result.scalar_one_or_none()

    async def list_tracks(self) -> List[Track]:
        """All tracks ordered by title."""
        result = await self.session.execute(select(Track).order_by(Track.title, Track.slug))
        return list(result.scalars().all())

    async def get_lesson(self, lesson_id: uuid.UUID) -> Optional[Lesson]:
        return await self.session.get(Lesson, lesson_id)

    async def get_lesson_at(self, track_id: uuid.UUID, position: int) -> Optional[Lesson]:
        """The lesson at exactly ``position`` within the track, if authored."""
        result = await self.session.execute(
            select(Lesson)
            .where(Lesson.track_id == track_id, Lesson.position == position)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_track(self, payload: Union[TrackCreate, Payload]) -> Track:
        """
        Insert a new track. Unlike ensure_track this never touches an existing row.

        Raises:
            InvalidPayload: Schema violation
            ConflictError: The slug is already taken
        """
        request = parse_payload(TrackCreate, payload)
        track = Track(
            slug=request.slug,
            title=request.title,
            official_sources=list(request.official_sources),
        )
        try:
            async with self.session.begin_nested():
                self.session.add(track)
        except IntegrityError as exc:
            raise ConflictError(
                "Track slug already exists",
                {"slug": request.slug},
            ) from exc

        await self.session.refresh(track)
        logger.info("Track created", extra={"track_slug": track.slug})
        return track

    async def ensure_track(self, payload: Union[TrackEnsure, Payload]) -> EnsureTrackResult:
        """
        Create the track if its slug is unknown, otherwise merge into it.

        On merge the title is always written, and each optional field only when
        it was present in the payload (an explicit null owner clears it).

        Raises:
            InvalidPayload: Schema violation
            ConflictError: A constraint failed outside the slug-race path
        """
        request = parse_payload(TrackEnsure, payload)
        supplied = request.supplied_fields

        if request.owner_user_id is not None:
            # Owner may not exist yet as a row
            await self.resolver.resolve(request.owner_user_id)

        track = await self.get_track_by_slug(request.slug)
        was_created = False
        if track is None:
            track = await self._insert_track(request)
            was_created = track is not None
            if track is None:
                # Lost a first-insert race on the slug: merge into the winner
                track = await self.get_track_by_slug(request.slug)
                if track is None:
                    raise ConflictError("Unable to ensure track", {"slug": request.slug})

        if not was_created:
            track.title = request.title
            for field in supplied:
                attr, convert = _MERGE_COLUMNS[field]
                setattr(track, attr, convert(getattr(request, field)))
            try:
                await self.session.flush()
            except IntegrityError as exc:
                raise ConflictError("Unable to ensure track", {"slug": request.slug}) from exc

        logger.info(
            "Track ensured",
            extra={"track_slug": track.slug, "created": was_created, "merged_fields": supplied},
        )
        return EnsureTrackResult(track=track, was_created=was_created)

    async def _insert_track(self, request: TrackEnsure) -> Optional[Track]:
        """Insert a full row with defaults. Returns None if the slug already exists."""
        track = Track(
            slug=request.slug,
            title=request.title,
            official_sources=list(request.official_sources),
            track_type=request.track_type.value,
            status=request.status.value,
            owner_learner_id=request.owner_user_id,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(track)
        except IntegrityError:
            return None
        await self.session.refresh(track)
        return track

    async def seed_lessons(self, payload: Union[LessonSeed, Payload]) -> SeedLessonsResult:
        """
        Upsert every lesson of the payload into its track.

        The whole payload is validated before anything is written, and all
        upserts share one savepoint: either every lesson is written or none is.

        Raises:
            InvalidPayload: Any lesson fails validation
            NotFound: The track does not exist
            ConflictError: The database rejected one of the upserts
        """
        request = parse_payload(LessonSeed, payload)

        track = await self.get_track_by_slug(request.track_slug)
        if track is None:
            raise NotFound("track", request.track_slug)

        seeded: List[SeededLessonRow] = []
        try:
            async with self.session.begin_nested():
                for lesson in request.lessons:
                    stmt = dialect_insert(self.session, Lesson).values(
                        track_id=track.id,
                        position=lesson.lesson_order,
                        title=lesson.title,
                        objectives=list(lesson.objectives),
                        tags=list(lesson.tags),
                        source_urls=list(lesson.source_urls),
                    )
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["track_id", "position"],
                        set_={
                            "title": stmt.excluded.title,
                            "objectives": stmt.excluded.objectives,
                            "tags": stmt.excluded.tags,
                            "source_urls": stmt.excluded.source_urls,
                        },
                    ).returning(Lesson.id, Lesson.position, Lesson.title)
                    row = (await self.session.execute(stmt)).one()
                    seeded.append(SeededLessonRow(id=row.id, position=row.position, title=row.title))
        except IntegrityError as exc:
            logger.warning("Lesson seed rolled back", extra={"track_slug": track.slug})
            raise ConflictError("Unable to seed lessons", {"track_slug": track.slug}) from exc

        logger.info("Lessons seeded", extra={"track_slug": track.slug, "count": len(seeded)})
        return SeedLessonsResult(track=track, lessons=seeded)
