"""Pydantic schemas for the completion endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from wildpack.modules.badges.schemas import BadgeResponse


class CompleteActivityRequest(BaseModel):
    photo_url: str | None = Field(default=None, max_length=1024)  # already hosted; never raw bytes
    notes: str | None = None


class PartyCompletionRequest(CompleteActivityRequest):
    profile_ids: list[int] = Field(min_length=1)


class CompletionSummary(BaseModel):
    success: bool
    xp_gained: int
    team_xp_gained: int
    new_badges: list[BadgeResponse]


class PartyCompletionEntry(CompletionSummary):
    profile_id: int
