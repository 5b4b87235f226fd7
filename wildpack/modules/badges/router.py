"""Badges API router."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.database import get_db
from wildpack.modules.badges import service
from wildpack.modules.badges.schemas import BadgeProgressEntry, BadgeResponse, UserBadgeResponse
from wildpack.modules.profiles.service import get_profile_or_raise

logger = structlog.get_logger()

router = APIRouter(prefix="/badges", tags=["badges"])


@router.get("", response_model=list[BadgeResponse])
async def list_badges(db: AsyncSession = Depends(get_db)):
    return await service.list_badges(db)


@router.get("/profiles/{profile_id}", response_model=list[UserBadgeResponse])
async def profile_badges(profile_id: int, db: AsyncSession = Depends(get_db)):
    return await service.get_user_badges(db, profile_id)


@router.get("/profiles/{profile_id}/progress", response_model=list[BadgeProgressEntry])
async def badge_progress(profile_id: int, db: AsyncSession = Depends(get_db)):
    try:
        await get_profile_or_raise(db, profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    progress = await service.get_badge_progress(db, profile_id)
    return [{"badge_id": badge_id, "percent": pct} for badge_id, pct in progress.items()]


@router.get("/profiles/{profile_id}/pending", response_model=list[BadgeResponse])
async def pending_badges(profile_id: int, db: AsyncSession = Depends(get_db)):
    """Badges the profile qualifies for but does not hold yet. Read-only."""
    try:
        await get_profile_or_raise(db, profile_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return await service.evaluate_new_badges(db, profile_id)
