"""Team aggregator: shared team XP pool and leaderboard reads."""

from __future__ import annotations

import math

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.config import settings
from wildpack.core.errors import TeamNotFound
from wildpack.models.profiles import Team

logger = structlog.get_logger()


def team_share(xp: int) -> int:
    """Portion of a completion's XP credited to the player's team."""
    return math.floor(xp * settings.TEAM_XP_SHARE)


async def increment_team_xp(db: AsyncSession, team_id: int, delta: int) -> int:
    """Atomically add ``delta`` to the team's pool in the store. Returns the new total.

    Executed as ``team_xp = team_xp + :delta`` so concurrent completions from
    different members never lose an update.
    """
    if delta < 0:
        raise ValueError(f"Team XP delta must be non-negative, got {delta}")
    result = await db.execute(
        update(Team)
        .where(Team.id == team_id)
        .values(team_xp=Team.team_xp + delta)
        .returning(Team.team_xp)
        .execution_options(synchronize_session=False)
    )
    total = result.scalar_one_or_none()
    if total is None:
        raise TeamNotFound(team_id)
    logger.info("team.xp_incremented", team_id=team_id, delta=delta, team_xp=total)
    return total


async def get_team_or_raise(db: AsyncSession, team_id: int) -> Team:
    result = await db.execute(
        select(Team).where(Team.id == team_id).execution_options(populate_existing=True)
    )
    team = result.scalar_one_or_none()
    if team is None:
        raise TeamNotFound(team_id)
    return team


async def list_teams_by_xp(db: AsyncSession) -> list[Team]:
    result = await db.execute(select(Team).order_by(Team.team_xp.desc(), Team.id))
    return list(result.scalars().all())
