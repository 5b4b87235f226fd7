"""Catalog models: Activity, Pack, PackActivity, Badge (admin-managed, read-only to the engine)."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from wildpack.models.base import BaseModel

JSONType = JSON().with_variant(JSONB, "postgresql")


class Activity(BaseModel):
    """A mission a player can complete for XP."""

    __tablename__ = "activities"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    photo_required: Mapped[bool] = mapped_column(default=False, nullable=False)
    # category tags, e.g. ["bird", "outdoor"]
    categories: Mapped[list[Any]] = mapped_column(JSONType, nullable=False, default=list)


class Pack(BaseModel):
    __tablename__ = "packs"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    colour: Mapped[str | None] = mapped_column(String(20), nullable=True)


class PackActivity(BaseModel):
    __tablename__ = "pack_activities"
    __table_args__ = (
        UniqueConstraint("pack_id", "activity_id", name="uq_pack_activity"),
        Index("ix_pack_activities_activity_id", "activity_id"),
    )

    pack_id: Mapped[int] = mapped_column(
        ForeignKey("packs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    activity_id: Mapped[int] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"), nullable=False
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Badge(BaseModel):
    """Badge definition; unlocked once a player's stat reaches requirement_value."""

    __tablename__ = "badges"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str | None] = mapped_column(String(20), nullable=True)  # emoji or image url
    category: Mapped[str] = mapped_column(String(20), nullable=False)  # xp, pack, team, special
    requirement_type: Mapped[str] = mapped_column(String(50), nullable=False)
    requirement_value: Mapped[int] = mapped_column(Integer, nullable=False)
    # only for category_count badges
    requirement_category: Mapped[str | None] = mapped_column(String(50), nullable=True)
