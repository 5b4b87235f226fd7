"""Completion API router."""

from __future__ import annotations

from typing import NoReturn

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.database import get_db
from wildpack.core.errors import NotFound, PartialRewardFailure, PersistenceFailure, ValidationFailed
from wildpack.modules.badges.schemas import BadgeResponse
from wildpack.modules.completion import service
from wildpack.modules.completion.schemas import (
    CompleteActivityRequest,
    CompletionSummary,
    PartyCompletionEntry,
    PartyCompletionRequest,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/completions", tags=["completions"])


def _to_summary(result: service.CompletionResult) -> dict:
    return {
        "success": result.success,
        "xp_gained": result.xp_gained,
        "team_xp_gained": result.team_xp_gained,
        "new_badges": [BadgeResponse.model_validate(b) for b in result.new_badges],
    }


def _raise_http(exc: Exception) -> NoReturn:
    if isinstance(exc, NotFound):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ValidationFailed):
        raise HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, PartialRewardFailure):
        raise HTTPException(
            status_code=503,
            detail={"error": "rewards_pending", "message": "Completion saved; please retry."},
        )
    raise HTTPException(
        status_code=503,
        detail={"error": "store_unavailable", "message": "Please try again."},
    )


@router.post("/profiles/{profile_id}/activities/{activity_id}", response_model=CompletionSummary)
async def complete_activity(
    profile_id: int,
    activity_id: int,
    body: CompleteActivityRequest | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Complete an activity. Safe to retry: XP is only ever granted once."""
    body = body or CompleteActivityRequest()
    try:
        result = await service.complete_activity(
            db, profile_id, activity_id, photo_url=body.photo_url, notes=body.notes
        )
    except (NotFound, ValidationFailed, PersistenceFailure) as exc:
        _raise_http(exc)
    return _to_summary(result)


@router.post("/activities/{activity_id}/party", response_model=list[PartyCompletionEntry])
async def complete_activity_for_party(
    activity_id: int,
    body: PartyCompletionRequest,
    db: AsyncSession = Depends(get_db),
):
    """Complete an activity for every profile in a party."""
    try:
        results = await service.complete_activity_for_party(
            db, body.profile_ids, activity_id, photo_url=body.photo_url, notes=body.notes
        )
    except (NotFound, ValidationFailed, PersistenceFailure) as exc:
        _raise_http(exc)
    return [{"profile_id": pid, **_to_summary(result)} for pid, result in results.items()]
