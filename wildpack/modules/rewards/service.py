"""Reward ledger: append-only achievement feed.

Writes are plain multi-row INSERTs issued as one statement, so a batch lands
entirely or not at all. Nothing in this module updates or deletes entries.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.models.base import utcnow
from wildpack.models.profiles import Profile
from wildpack.models.rewards import UserAchievement

logger = structlog.get_logger()

DEFAULT_PROFILE_NAME = "Explorer"


@dataclass(frozen=True)
class LedgerEntry:
    profile_id: int
    team_id: int
    source: str
    source_id: int
    message: str
    xp: int = 0


def _current_month_range(now: datetime | None = None) -> tuple[datetime, datetime]:
    now = now or utcnow()
    start = datetime(now.year, now.month, 1, tzinfo=timezone.utc)
    if now.month == 12:
        end = datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)
    return start, end


async def append(db: AsyncSession, entries: list[LedgerEntry]) -> list[int]:
    """Insert ledger entries in a single statement. Returns the new entry ids."""
    if not entries:
        return []
    created_at = utcnow()
    result = await db.execute(
        insert(UserAchievement)
        .values([{**asdict(entry), "created_at": created_at} for entry in entries])
        .returning(UserAchievement.id)
    )
    ids = list(result.scalars().all())
    logger.info(
        "ledger.appended",
        count=len(ids),
        sources=sorted({entry.source for entry in entries}),
        xp=sum(entry.xp for entry in entries),
    )
    return ids


async def get_team_feed(
    db: AsyncSession, team_id: int, limit: int = 20, now: datetime | None = None
) -> list[dict]:
    """This month's ledger entries for a team, newest first, with player nicknames."""
    start, end = _current_month_range(now)
    result = await db.execute(
        select(UserAchievement, Profile.nickname)
        .outerjoin(Profile, Profile.id == UserAchievement.profile_id)
        .where(
            UserAchievement.team_id == team_id,
            UserAchievement.created_at >= start,
            UserAchievement.created_at < end,
        )
        .order_by(UserAchievement.created_at.desc(), UserAchievement.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": entry.id,
            "profile_id": entry.profile_id,
            "team_id": entry.team_id,
            "source": entry.source,
            "source_id": entry.source_id,
            "message": entry.message,
            "xp": entry.xp,
            "created_at": entry.created_at,
            "profile_name": (nickname or "").strip() or DEFAULT_PROFILE_NAME,
        }
        for entry, nickname in result.all()
    ]


async def get_team_feed_totals(db: AsyncSession, now: datetime | None = None) -> dict[int, int]:
    """XP per team from this month's ledger entries."""
    start, end = _current_month_range(now)
    result = await db.execute(
        select(UserAchievement.team_id, func.coalesce(func.sum(UserAchievement.xp), 0))
        .where(UserAchievement.created_at >= start, UserAchievement.created_at < end)
        .group_by(UserAchievement.team_id)
    )
    return {team_id: int(total) for team_id, total in result.all()}


async def get_total_xp_for_profiles(db: AsyncSession, profile_ids: list[int]) -> int:
    if not profile_ids:
        return 0
    result = await db.execute(
        select(func.coalesce(func.sum(UserAchievement.xp), 0)).where(
            UserAchievement.profile_id.in_(profile_ids)
        )
    )
    return int(result.scalar_one())
