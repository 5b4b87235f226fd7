"""Team and team feed schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    colour: str | None
    team_xp: int


class LeaderboardEntry(TeamResponse):
    rank: int


class FeedEntry(BaseModel):
    id: int
    profile_id: int
    team_id: int
    source: str
    source_id: int
    message: str
    xp: int
    created_at: datetime
    profile_name: str


class TeamFeedTotal(BaseModel):
    team_id: int
    xp: int
