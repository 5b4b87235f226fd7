"""activity_reactions

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 14:00:00.000000

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: str | None = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "activity_reactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "progress_id",
            sa.Integer(),
            sa.ForeignKey("activity_progress.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "profile_id",
            sa.Integer(),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("reaction_type", sa.String(20), nullable=False),
        sa.UniqueConstraint(
            "progress_id",
            "profile_id",
            "reaction_type",
            name="uq_activity_reactions_progress_profile_type",
        ),
    )
    op.create_index("ix_activity_reactions_profile_id", "activity_reactions", ["profile_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_reactions_profile_id", table_name="activity_reactions")
    op.drop_table("activity_reactions")
