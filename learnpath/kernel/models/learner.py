"""
Learner model - an anonymous identity known only by its UUID.
"""

import uuid

from sqlalchemy.orm import Mapped, mapped_column

from learnpath.kernel.models.base import Base, CreatedAtMixin, generate_uuid


class Learner(Base, CreatedAtMixin):
    """Anonymous learner. Created lazily on first reference, never updated."""

    __tablename__ = "learners"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=generate_uuid,
    )

    def __repr__(self) -> str:
        return "<Learner>"
