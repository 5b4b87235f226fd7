"""progress_and_rewards

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: str | None = None
branch_labels = None
depends_on = None

_JSON = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _id_and_created() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def _soft_delete() -> sa.Column:
    return sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False)


def upgrade() -> None:
    # ── Catalog ───────────────────────────────────────────────────────────────
    op.create_table(
        "activities",
        *_id_and_created(),
        _soft_delete(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("xp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("photo_required", sa.Boolean(), nullable=False),
        sa.Column("categories", _JSON, nullable=False),
    )
    op.create_table(
        "packs",
        *_id_and_created(),
        _soft_delete(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("colour", sa.String(20), nullable=True),
    )
    op.create_table(
        "pack_activities",
        *_id_and_created(),
        _soft_delete(),
        sa.Column(
            "pack_id", sa.Integer(), sa.ForeignKey("packs.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "activity_id",
            sa.Integer(),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.UniqueConstraint("pack_id", "activity_id", name="uq_pack_activity"),
    )
    op.create_index("ix_pack_activities_pack_id", "pack_activities", ["pack_id"])
    op.create_index("ix_pack_activities_activity_id", "pack_activities", ["activity_id"])
    op.create_table(
        "badges",
        *_id_and_created(),
        _soft_delete(),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("icon", sa.String(20), nullable=True),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("requirement_type", sa.String(50), nullable=False),
        sa.Column("requirement_value", sa.Integer(), nullable=False),
        sa.Column("requirement_category", sa.String(50), nullable=True),
    )

    # ── Players ───────────────────────────────────────────────────────────────
    op.create_table(
        "teams",
        *_id_and_created(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("colour", sa.String(20), nullable=True),
        sa.Column("mascot_name", sa.String(100), nullable=True),
        sa.Column("team_xp", sa.Integer(), server_default="0", nullable=False),
    )
    op.create_table(
        "profiles",
        *_id_and_created(),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("nickname", sa.String(100), nullable=True),
        sa.Column("colour", sa.String(20), nullable=True),
        sa.Column(
            "team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="RESTRICT"), nullable=False
        ),
        sa.Column("xp", sa.Integer(), server_default="0", nullable=False),
        sa.Column("team_contribution", sa.Integer(), server_default="0", nullable=False),
    )
    op.create_index("ix_profiles_user_id", "profiles", ["user_id"])
    op.create_index("ix_profiles_team_id", "profiles", ["team_id"])

    # ── Progress ──────────────────────────────────────────────────────────────
    op.create_table(
        "activity_progress",
        *_id_and_created(),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "activity_id",
            sa.Integer(),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("rewarded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.String(1024), nullable=True),
        sa.UniqueConstraint(
            "profile_id", "activity_id", name="uq_activity_progress_profile_activity"
        ),
    )
    op.create_index("ix_activity_progress_activity_id", "activity_progress", ["activity_id"])
    op.create_index(
        "ix_activity_progress_profile_completed",
        "activity_progress",
        ["profile_id", "completed_at"],
    )
    op.create_table(
        "user_activity_photos",
        *_id_and_created(),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "progress_id",
            sa.Integer(),
            sa.ForeignKey("activity_progress.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "activity_id",
            sa.Integer(),
            sa.ForeignKey("activities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("photo_url", sa.String(1024), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.UniqueConstraint("progress_id", "photo_url", name="uq_activity_photo_progress_url"),
    )
    op.create_index("ix_user_activity_photos_profile_id", "user_activity_photos", ["profile_id"])

    # ── Rewards ───────────────────────────────────────────────────────────────
    op.create_table(
        "user_badges",
        *_id_and_created(),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "badge_id", sa.Integer(), sa.ForeignKey("badges.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("profile_id", "badge_id", name="uq_user_badges_profile_badge"),
    )
    op.create_index("ix_user_badges_profile_id", "user_badges", ["profile_id"])
    op.create_table(
        "user_achievements",
        *_id_and_created(),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("source", sa.String(20), nullable=False),
        sa.Column("source_id", sa.Integer(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("xp", sa.Integer(), server_default="0", nullable=False),
    )
    op.create_index("ix_user_achievements_profile_id", "user_achievements", ["profile_id"])
    op.create_index(
        "ix_user_achievements_team_created", "user_achievements", ["team_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("user_achievements")
    op.drop_table("user_badges")
    op.drop_table("user_activity_photos")
    op.drop_table("activity_progress")
    op.drop_table("profiles")
    op.drop_table("teams")
    op.drop_table("badges")
    op.drop_table("pack_activities")
    op.drop_table("packs")
    op.drop_table("activities")
