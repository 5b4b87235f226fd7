"""Badge API schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BadgeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    icon: str | None
    category: str
    requirement_type: str
    requirement_value: int
    requirement_category: str | None = None


class UserBadgeResponse(BaseModel):
    id: int
    badge_id: int
    name: str
    icon: str | None
    description: str
    category: str
    earned_at: datetime


class BadgeProgressEntry(BaseModel):
    badge_id: int
    percent: float
