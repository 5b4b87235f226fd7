"""Team activity log and reactions API router."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.config import settings
from wildpack.core.database import get_db
from wildpack.models.enums import ActivityStatus, ReactionType
from wildpack.modules.feed import service
from wildpack.modules.feed.schemas import (
    ReactionRequest,
    ReactionSummary,
    TeamActivityLog,
    ToggleReactionResponse,
)
from wildpack.modules.teams.service import get_team_or_raise

logger = structlog.get_logger()

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("/teams/{team_id}/activity", response_model=list[TeamActivityLog])
async def team_activity(
    team_id: int,
    status: ActivityStatus = ActivityStatus.COMPLETED,
    limit: int | None = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    try:
        await get_team_or_raise(db, team_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return await service.get_team_activity_logs_by_status(
        db, team_id, status, limit or settings.FEED_DEFAULT_LIMIT
    )


@router.get("/progress/{progress_id}/reactions", response_model=list[ReactionSummary])
async def list_reactions(
    progress_id: int,
    profile_id: int | None = None,
    db: AsyncSession = Depends(get_db),
):
    try:
        return await service.get_reactions_for_activity(db, progress_id, profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/progress/{progress_id}/reactions", response_model=list[ReactionSummary])
async def add_reaction(
    progress_id: int,
    body: ReactionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Add a reaction. Adding one that already exists changes nothing."""
    try:
        await service.add_reaction(db, progress_id, body.profile_id, body.reaction_type)
        return await service.get_reactions_for_activity(db, progress_id, body.profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.delete(
    "/progress/{progress_id}/reactions/{reaction_type}", response_model=list[ReactionSummary]
)
async def remove_reaction(
    progress_id: int,
    reaction_type: ReactionType,
    profile_id: int,
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.remove_reaction(db, progress_id, profile_id, reaction_type)
        return await service.get_reactions_for_activity(db, progress_id, profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/progress/{progress_id}/reactions/toggle", response_model=ToggleReactionResponse)
async def toggle_reaction(
    progress_id: int,
    body: ReactionRequest,
    db: AsyncSession = Depends(get_db),
):
    try:
        reacted = await service.toggle_reaction(db, progress_id, body.profile_id, body.reaction_type)
        reactions = await service.get_reactions_for_activity(db, progress_id, body.profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"reacted": reacted, "reactions": reactions}
