"""
Progress models - per-track cursors and the append-only attempt log.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from learnpath.kernel.models.base import Base, CreatedAtMixin, generate_uuid


class AttemptType(str, Enum):
    """Kind of work a learner submitted for a lesson."""
    QUIZ = "quiz"
    CHALLENGE = "challenge"
    PROJECT = "project"


class ProgressState(Base):
    """
    Cursor of one learner within one track.

    Only the progress tracker writes this table, and only through upserts, so
    concurrent writers converge without application locks.
    """

    __tablename__ = "progress_states"

    learner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("learners.id", ondelete="CASCADE"),
        primary_key=True,
    )
    track_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tracks.id", ondelete="CASCADE"),
        primary_key=True,
    )
    current_position: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_seen: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )


class Attempt(Base, CreatedAtMixin):
    """Immutable record of a learner's performance on a lesson."""

    __tablename__ = "attempts"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    learner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("learners.id", ondelete="CASCADE"),
        nullable=False,
    )
    lesson_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attempt_type: Mapped[str] = mapped_column(String(20), nullable=False)
    score: Mapped[Optional[float]] = mapped_column(Numeric(asdecimal=False), nullable=True)
    max_score: Mapped[Optional[float]] = mapped_column(Numeric(asdecimal=False), nullable=True)
    duration_sec: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weak_tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint(
            "attempt_type IN ('quiz', 'challenge', 'project')",
            name="ck_attempts_attempt_type",
        ),
        Index("ix_attempts_learner_created", "learner_id", "created_at"),
    )
