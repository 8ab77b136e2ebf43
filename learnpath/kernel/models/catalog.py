"""
Catalog models - tracks and their ordered lessons.
"""

import uuid
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Integer, JSON, String, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnpath.kernel.models.base import Base, CreatedAtMixin, generate_uuid

if TYPE_CHECKING:
    from learnpath.kernel.models.learner import Learner


class TrackType(str, Enum):
    """Who curates a track."""
    OFFICIAL = "official"
    CUSTOM = "custom"


class TrackStatus(str, Enum):
    """Track lifecycle."""
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class Track(Base, CreatedAtMixin):
    """A named, ordered curriculum identified by its slug."""

    __tablename__ = "tracks"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    slug: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    official_sources: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    track_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TrackType.CUSTOM.value,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TrackStatus.DRAFT.value,
    )
    # Weak back-reference: deleting the learner clears it
    owner_learner_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("learners.id", ondelete="SET NULL"),
        nullable=True,
    )

    lessons: Mapped[List["Lesson"]] = relationship(
        "Lesson",
        back_populates="track",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Lesson.position",
    )
    owner: Mapped[Optional["Learner"]] = relationship("Learner")

    __table_args__ = (
        CheckConstraint("track_type IN ('official', 'custom')", name="ck_tracks_track_type"),
        CheckConstraint("status IN ('draft', 'active', 'archived')", name="ck_tracks_status"),
    )

    def __repr__(self) -> str:
        return f"<Track {self.slug}>"


class Lesson(Base, CreatedAtMixin):
    """One ordered unit of a track, addressed by its position."""

    __tablename__ = "lessons"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )
    track_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("tracks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(160), nullable=False)
    objectives: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    source_urls: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    track: Mapped["Track"] = relationship("Track", back_populates="lessons")

    __table_args__ = (
        UniqueConstraint("track_id", "position", name="uq_lessons_track_position"),
        CheckConstraint("position > 0", name="ck_lessons_position_positive"),
    )

    def __repr__(self) -> str:
        return f"<Lesson {self.position}: {self.title}>"
