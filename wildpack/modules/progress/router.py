"""Activity progress API router."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.database import get_db
from wildpack.models.enums import ActivityStatus
from wildpack.modules.profiles.service import get_profile_or_raise
from wildpack.modules.progress import service
from wildpack.modules.progress.schemas import (
    PackCompletionResponse,
    ProgressResponse,
    RecentCompletion,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/profiles/{profile_id}/activities/{activity_id}", response_model=ProgressResponse)
async def get_progress(
    profile_id: int,
    activity_id: int,
    db: AsyncSession = Depends(get_db),
):
    progress = await service.get_progress(db, profile_id, activity_id)
    if progress is None:
        return ProgressResponse(
            profile_id=profile_id, activity_id=activity_id, status=ActivityStatus.NOT_STARTED
        )
    return ProgressResponse.model_validate(progress)


@router.post("/profiles/{profile_id}/activities/{activity_id}/start", response_model=ProgressResponse)
async def start_activity(
    profile_id: int,
    activity_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Create the started progress row if there is none; returns the existing row otherwise."""
    try:
        await get_profile_or_raise(db, profile_id)
        await service.get_activity_or_raise(db, activity_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    progress = await service.ensure_started(db, profile_id, activity_id)
    return ProgressResponse.model_validate(progress)


@router.get("/profiles/{profile_id}/recent", response_model=list[RecentCompletion])
async def recent_completions(
    profile_id: int,
    limit: int = Query(default=8, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    return await service.get_recent_completed(db, profile_id, limit)


@router.get("/profiles/{profile_id}/packs/{pack_id}", response_model=PackCompletionResponse)
async def pack_completion(
    profile_id: int,
    pack_id: int,
    db: AsyncSession = Depends(get_db),
):
    percentage = await service.get_pack_completion(db, profile_id, pack_id)
    return PackCompletionResponse(
        profile_id=profile_id, pack_id=pack_id, completion_percentage=percentage
    )
