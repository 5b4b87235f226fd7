"""Team activity log and reaction schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from wildpack.models.enums import ActivityStatus, ReactionType


class TeamActivityLog(BaseModel):
    id: int
    profile_id: int
    activity_id: int
    status: ActivityStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
    profile_name: str
    profile_colour: str | None = None
    activity_title: str
    activity_description: str | None = None
    xp: int


class ReactionSummary(BaseModel):
    reaction_type: ReactionType
    count: int
    has_reacted: bool


class ReactionRequest(BaseModel):
    profile_id: int
    reaction_type: ReactionType


class ToggleReactionResponse(BaseModel):
    reacted: bool
    reactions: list[ReactionSummary]
