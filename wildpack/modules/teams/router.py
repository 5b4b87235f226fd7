"""Teams API router: leaderboard and the monthly achievement feed."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.config import settings
from wildpack.core.database import get_db
from wildpack.modules.rewards import service as ledger
from wildpack.modules.teams import service
from wildpack.modules.teams.schemas import (
    FeedEntry,
    LeaderboardEntry,
    TeamFeedTotal,
    TeamResponse,
)

logger = structlog.get_logger()

router = APIRouter(prefix="/teams", tags=["teams"])


@router.get("", response_model=list[LeaderboardEntry])
async def leaderboard(db: AsyncSession = Depends(get_db)):
    teams = await service.list_teams_by_xp(db)
    return [
        {"rank": i + 1, "id": t.id, "name": t.name, "colour": t.colour, "team_xp": t.team_xp}
        for i, t in enumerate(teams)
    ]


@router.get("/feed/totals", response_model=list[TeamFeedTotal])
async def feed_totals(db: AsyncSession = Depends(get_db)):
    totals = await ledger.get_team_feed_totals(db)
    return [{"team_id": team_id, "xp": xp} for team_id, xp in sorted(totals.items())]


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team_id: int, db: AsyncSession = Depends(get_db)):
    try:
        return await service.get_team_or_raise(db, team_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/{team_id}/feed", response_model=list[FeedEntry])
async def team_feed(
    team_id: int,
    limit: int | None = Query(default=None, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    try:
        await service.get_team_or_raise(db, team_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return await ledger.get_team_feed(db, team_id, limit or settings.FEED_DEFAULT_LIMIT)
