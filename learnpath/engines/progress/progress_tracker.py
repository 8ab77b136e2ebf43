"""
Progress Tracker - per-(learner, track) cursors (DB-backed).
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnpath.engines.catalog.catalog_store import CatalogStore
from learnpath.kernel.models.catalog import Lesson, Track
from learnpath.kernel.models.progress import Attempt, ProgressState
from learnpath.kernel.upsert import dialect_insert


@dataclass
class NextLesson:
    """Lesson at the learner's cursor. ``lesson`` is None when nothing is authored there."""

    track: Track
    position: int
    lesson: Optional[Lesson] = None

    @property
    def available(self) -> bool:
        return self.lesson is not None


@dataclass
class TrackCursorState:
    track_slug: str
    current_position: int
    last_seen: Optional[datetime]


@dataclass
class ProgressSummary:
    learner_id: uuid.UUID
    attempts_7d: int
    tracks: List[TrackCursorState] = field(default_factory=list)


class ProgressTracker:
    """
    Owns ProgressState rows.

    Every write is a single INSERT ... ON CONFLICT DO UPDATE, so concurrent
    callers on the same (learner, track) converge: the cursor update is a
    max(), which is commutative. Every cursor read refreshes last_seen.
    """

    RECENT_ACTIVITY_WINDOW = timedelta(days=7)

    def __init__(self, session: AsyncSession):
        self.session = session
        self.catalog = CatalogStore(session)

    async def get_or_init_cursor(self, learner_id: uuid.UUID, track_id: uuid.UUID) -> int:
        """Current position, creating the state at position 1 on first access."""
        stmt = dialect_insert(self.session, ProgressState).values(
            learner_id=learner_id,
            track_id=track_id,
            current_position=1,
            last_seen=func.now(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["learner_id", "track_id"],
            set_={"last_seen": func.now()},
        ).returning(ProgressState.current_position)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def advance_if_eligible(
        self,
        learner_id: uuid.UUID,
        track_id: uuid.UUID,
        from_position: int,
    ) -> int:
        """
        Move the cursor past ``from_position``. Never moves it backwards.

        Returns:
            The stored position after the update: max(stored, from_position + 1)
        """
        target = from_position + 1
        stmt = dialect_insert(self.session, ProgressState).values(
            learner_id=learner_id,
            track_id=track_id,
            current_position=max(1, target),
            last_seen=func.now(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["learner_id", "track_id"],
            set_={
                "current_position": case(
                    (ProgressState.current_position < target, target),
                    else_=ProgressState.current_position,
                ),
                "last_seen": func.now(),
            },
        ).returning(ProgressState.current_position)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def next_lesson(self, learner_id: uuid.UUID, track: Track) -> NextLesson:
        """
        Lesson at the learner's cursor.

        Positions are assumed dense from 1. A gap, an unseeded track, or a
        cursor past the last lesson all yield ``lesson=None``.
        """
        position = await self.get_or_init_cursor(learner_id, track.id)
        lesson = await self.catalog.get_lesson_at(track.id, position)
        return NextLesson(track=track, position=position, lesson=lesson)

    async def get_cursor(self, learner_id: uuid.UUID, track_id: uuid.UUID) -> Optional[int]:
        """Stored position without touching last_seen. None if never accessed."""
        result = await self.session.execute(
            select(ProgressState.current_position).where(
                ProgressState.learner_id == learner_id,
                ProgressState.track_id == track_id,
            )
        )
        return result.scalar_one_or_none()

    async def summarize(self, learner_id: uuid.UUID) -> ProgressSummary:
        """Recent attempt count and every track cursor of a learner."""
        since = datetime.now(timezone.utc) - self.RECENT_ACTIVITY_WINDOW
        count_q = select(func.count()).select_from(Attempt).where(
            Attempt.learner_id == learner_id,
            Attempt.created_at >= since,
        )
        attempts_7d = (await self.session.execute(count_q)).scalar() or 0

        cursors_q = (
            select(Track.slug, ProgressState.current_position, ProgressState.last_seen)
            .join(Track, Track.id == ProgressState.track_id)
            .where(ProgressState.learner_id == learner_id)
            .order_by(Track.slug)
        )
        rows = (await self.session.execute(cursors_q)).all()
        return ProgressSummary(
            learner_id=learner_id,
            attempts_7d=attempts_7d,
            tracks=[
                TrackCursorState(
                    track_slug=row.slug,
                    current_position=row.current_position,
                    last_seen=row.last_seen,
                )
                for row in rows
            ],
        )
