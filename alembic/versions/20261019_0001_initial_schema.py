"""Initial schema - learners, catalog, progress

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Learners (anonymous, id only)
    op.create_table(
        'learners',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Tracks
    op.create_table(
        'tracks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('slug', sa.String(50), unique=True, nullable=False),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('official_sources', sa.JSON(), nullable=False),
        sa.Column('track_type', sa.String(20), nullable=False, server_default='custom'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('owner_learner_id', sa.Uuid(), sa.ForeignKey('learners.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("track_type IN ('official', 'custom')", name='ck_tracks_track_type'),
        sa.CheckConstraint("status IN ('draft', 'active', 'archived')", name='ck_tracks_status'),
    )

    # Lessons, unique per (track, position)
    op.create_table(
        'lessons',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('track_id', sa.Uuid(), sa.ForeignKey('tracks.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(160), nullable=False),
        sa.Column('objectives', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('source_urls', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('track_id', 'position', name='uq_lessons_track_position'),
        sa.CheckConstraint('position > 0', name='ck_lessons_position_positive'),
    )

    # Progress cursors
    op.create_table(
        'progress_states',
        sa.Column('learner_id', sa.Uuid(), sa.ForeignKey('learners.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('track_id', sa.Uuid(), sa.ForeignKey('tracks.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('current_position', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('last_seen', sa.DateTime(timezone=True), nullable=True),
    )

    # Attempt log
    op.create_table(
        'attempts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('learner_id', sa.Uuid(), sa.ForeignKey('learners.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lesson_id', sa.Uuid(), sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('attempt_type', sa.String(20), nullable=False),
        sa.Column('score', sa.Numeric(), nullable=True),
        sa.Column('max_score', sa.Numeric(), nullable=True),
        sa.Column('duration_sec', sa.Integer(), nullable=True),
        sa.Column('weak_tags', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("attempt_type IN ('quiz', 'challenge', 'project')", name='ck_attempts_attempt_type'),
    )
    op.create_index('ix_attempts_learner_created', 'attempts', ['learner_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_attempts_learner_created', table_name='attempts')
    op.drop_table('attempts')
    op.drop_table('progress_states')
    op.drop_table('lessons')
    op.drop_table('tracks')
    op.drop_table('learners')
