"""Profile lookups and the player's own XP counters."""

from __future__ import annotations

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.errors import ProfileNotFound
from wildpack.models.profiles import Profile

logger = structlog.get_logger()


async def get_profile_or_raise(db: AsyncSession, profile_id: int) -> Profile:
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise ProfileNotFound(profile_id)
    return profile


async def increment_profile_xp(
    db: AsyncSession, profile_id: int, xp: int, team_contribution: int
) -> int:
    """Single-row atomic increment of xp and team_contribution. Returns the new xp."""
    result = await db.execute(
        update(Profile)
        .where(Profile.id == profile_id)
        .values(
            xp=Profile.xp + xp,
            team_contribution=Profile.team_contribution + team_contribution,
        )
        .returning(Profile.xp)
        .execution_options(synchronize_session=False)
    )
    new_xp = result.scalar_one_or_none()
    if new_xp is None:
        raise ProfileNotFound(profile_id)
    logger.info("profile.xp_incremented", profile_id=profile_id, xp=xp, total_xp=new_xp)
    return new_xp
