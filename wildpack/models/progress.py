"""Per-player activity progress, photo submissions and teammate reactions."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wildpack.models.base import TimestampedModel
from wildpack.models.enums import ActivityStatus, PhotoStatus


class ActivityProgress(TimestampedModel):
    """The single progress row for a (profile, activity) pair.

    completed_at NULL means started. rewarded_at is stamped in the same
    transaction that grants the completion's XP, team XP, ledger entries and
    badges, so completed_at set with rewarded_at NULL means rewards pending.
    """

    __tablename__ = "activity_progress"
    __table_args__ = (
        UniqueConstraint("profile_id", "activity_id", name="uq_activity_progress_profile_activity"),
        Index("ix_activity_progress_activity_id", "activity_id"),
        Index("ix_activity_progress_profile_completed", "profile_id", "completed_at"),
    )

    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    activity_id: Mapped[int] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"), nullable=False
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rewarded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    @property
    def status(self) -> ActivityStatus:
        if self.completed_at is None:
            return ActivityStatus.STARTED
        return ActivityStatus.COMPLETED

    @property
    def rewards_pending(self) -> bool:
        return self.completed_at is not None and self.rewarded_at is None


class ActivityPhoto(TimestampedModel):
    """A completion photo waiting for (or past) admin review."""

    __tablename__ = "user_activity_photos"
    __table_args__ = (
        UniqueConstraint("progress_id", "photo_url", name="uq_activity_photo_progress_url"),
    )

    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    progress_id: Mapped[int] = mapped_column(
        ForeignKey("activity_progress.id", ondelete="CASCADE"), nullable=False
    )
    activity_id: Mapped[int] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"), nullable=False
    )
    photo_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PhotoStatus.PENDING_REVIEW.value
    )


class ActivityReaction(TimestampedModel):
    """A teammate's reaction to a completion. One row per (progress, profile, reaction type)."""

    __tablename__ = "activity_reactions"
    __table_args__ = (
        UniqueConstraint(
            "progress_id",
            "profile_id",
            "reaction_type",
            name="uq_activity_reactions_progress_profile_type",
        ),
    )

    progress_id: Mapped[int] = mapped_column(
        ForeignKey("activity_progress.id", ondelete="CASCADE"), nullable=False
    )
    profile_id: Mapped[int] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reaction_type: Mapped[str] = mapped_column(String(20), nullable=False)
