"""Pydantic schemas for activity progress endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from wildpack.models.enums import ActivityStatus


class ProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    profile_id: int
    activity_id: int
    status: ActivityStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    rewards_pending: bool = False
    notes: str | None = None
    photo_url: str | None = None


class RecentCompletion(BaseModel):
    id: int
    activity_id: int
    title: str
    xp: int
    completed_at: datetime


class PackCompletionResponse(BaseModel):
    profile_id: int
    pack_id: int
    completion_percentage: int
