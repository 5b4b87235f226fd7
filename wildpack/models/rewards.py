"""Reward models: earned badges and the append-only achievement ledger."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wildpack.models.base import TimestampedModel, utcnow


class UserBadge(TimestampedModel):
    """Record of a badge earned by a profile. At most one per (profile, badge)."""

    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("profile_id", "badge_id", name="uq_user_badges_profile_badge"),
    )

    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    badge_id: Mapped[int] = mapped_column(
        ForeignKey("badges.id", ondelete="CASCADE"), nullable=False
    )
    team_id: Mapped[int | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True
    )
    earned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class UserAchievement(TimestampedModel):
    """Ledger entry. Never updated or deleted; player/team are copied at write time."""

    __tablename__ = "user_achievements"
    __table_args__ = (
        Index("ix_user_achievements_team_created", "team_id", "created_at"),
    )

    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    source: Mapped[str] = mapped_column(String(20), nullable=False)  # mission, badge
    source_id: Mapped[int] = mapped_column(Integer, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
