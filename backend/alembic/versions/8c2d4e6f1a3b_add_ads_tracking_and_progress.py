"""Add ad configs, playback events and playback progress

Revision ID: 8c2d4e6f1a3b
Revises: 3f1c2a9d7b10
Create Date: 2026-10-19

- title_ad_configs: one pre-roll ad setting per title, served only while
  the ads_enabled flag is on
- playback_events: play/completion/ad impression rows, written only while
  the tracking_enabled flag is on
- playback_progress: per-user resume position, one row per title/episode
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8c2d4e6f1a3b"
down_revision: Union[str, None] = "3f1c2a9d7b10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "title_ad_configs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title_id", sa.Integer(), nullable=False),
        sa.Column(
            "ads_enabled", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "ad_duration_seconds", sa.Integer(), nullable=False, server_default="15"
        ),
        sa.Column("ad_url", sa.String(2048), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["title_id"], ["titles.id"]),
        sa.ForeignKeyConstraint(["updated_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("title_id"),
    )
    op.create_index("ix_title_ad_configs_id", "title_ad_configs", ["id"])

    op.create_table(
        "playback_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("title_id", sa.Integer(), nullable=True),
        sa.Column("episode_id", sa.Integer(), nullable=True),
        sa.Column("session_id", sa.String(64), nullable=True),
        sa.Column("watch_percentage", sa.Float(), nullable=True),
        sa.Column("ad_duration_seconds", sa.Integer(), nullable=True),
        sa.Column("ad_completed", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["title_id"], ["titles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_playback_events_id", "playback_events", ["id"])
    op.create_index(
        "ix_playback_events_type_created",
        "playback_events",
        ["event_type", "created_at"],
    )
    op.create_index("ix_playback_events_title", "playback_events", ["title_id"])

    op.create_table(
        "playback_progress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title_id", sa.Integer(), nullable=False),
        sa.Column("episode_id", sa.Integer(), nullable=True),
        sa.Column("position_seconds", sa.Float(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["title_id"], ["titles.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "title_id", "episode_id", name="uq_playback_progress_position"
        ),
    )
    op.create_index("ix_playback_progress_id", "playback_progress", ["id"])
    op.create_index(
        "ix_playback_progress_user_updated",
        "playback_progress",
        ["user_id", "updated_at"],
    )


def downgrade() -> None:
    op.drop_table("playback_progress")
    op.drop_table("playback_events")
    op.drop_table("title_ad_configs")
