"""Team activity log and teammate reactions on completed activities.

The activity log reads progress rows directly, so it shows every completion
on a team regardless of the calendar month. Reactions are keyed on the
progress row and are unique per (progress, profile, reaction type); adding
twice or removing something absent leaves the store unchanged.
"""

from __future__ import annotations

from collections import Counter

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.database import conflict_tolerant_insert
from wildpack.core.errors import ProgressNotFound
from wildpack.models.catalog import Activity
from wildpack.models.enums import ActivityStatus, ReactionType
from wildpack.models.profiles import Profile
from wildpack.models.progress import ActivityProgress, ActivityReaction
from wildpack.modules.profiles.service import get_profile_or_raise
from wildpack.modules.rewards.service import DEFAULT_PROFILE_NAME

logger = structlog.get_logger()


# ── Team activity log ────────────────────────────────────────────────────────


async def get_team_activity_logs(db: AsyncSession, team_id: int, limit: int = 20) -> list[dict]:
    """Completed activities of the team's players, most recent first."""
    return await get_team_activity_logs_by_status(db, team_id, ActivityStatus.COMPLETED, limit)


async def get_team_activity_logs_by_status(
    db: AsyncSession, team_id: int, status: ActivityStatus, limit: int = 20
) -> list[dict]:
    if status == ActivityStatus.NOT_STARTED:
        return []

    if status == ActivityStatus.COMPLETED:
        state = ActivityProgress.completed_at.is_not(None)
        happened_at = ActivityProgress.completed_at
    else:
        state = ActivityProgress.completed_at.is_(None)
        happened_at = func.coalesce(ActivityProgress.started_at, ActivityProgress.created_at)

    result = await db.execute(
        select(ActivityProgress, Profile, Activity)
        .join(Profile, Profile.id == ActivityProgress.profile_id)
        .join(Activity, Activity.id == ActivityProgress.activity_id)
        .where(Profile.team_id == team_id, state)
        .order_by(happened_at.desc(), ActivityProgress.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": progress.id,
            "profile_id": profile.id,
            "activity_id": activity.id,
            "status": progress.status,
            "started_at": progress.started_at,
            "completed_at": progress.completed_at,
            "profile_name": (profile.nickname or "").strip() or profile.name or DEFAULT_PROFILE_NAME,
            "profile_colour": profile.colour,
            "activity_title": activity.title,
            "activity_description": activity.description,
            "xp": activity.xp or 0,
        }
        for progress, profile, activity in result.all()
    ]


# ── Reactions ────────────────────────────────────────────────────────────────


async def _get_progress_or_raise(db: AsyncSession, progress_id: int) -> ActivityProgress:
    progress = await db.get(ActivityProgress, progress_id)
    if progress is None:
        raise ProgressNotFound(progress_id)
    return progress


async def get_reactions_for_activity(
    db: AsyncSession, progress_id: int, current_profile_id: int | None = None
) -> list[dict]:
    """One summary per reaction type, including types nobody has used yet."""
    await _get_progress_or_raise(db, progress_id)
    result = await db.execute(
        select(ActivityReaction.reaction_type, ActivityReaction.profile_id).where(
            ActivityReaction.progress_id == progress_id
        )
    )
    counts: Counter[str] = Counter()
    mine: set[str] = set()
    for reaction_type, profile_id in result.all():
        counts[reaction_type] += 1
        if profile_id == current_profile_id:
            mine.add(reaction_type)
    return [
        {
            "reaction_type": reaction.value,
            "count": counts[reaction.value],
            "has_reacted": reaction.value in mine,
        }
        for reaction in ReactionType
    ]


async def add_reaction(
    db: AsyncSession, progress_id: int, profile_id: int, reaction_type: ReactionType
) -> bool:
    """Insert the reaction unless it exists. Returns whether a row was added."""
    await _get_progress_or_raise(db, progress_id)
    await get_profile_or_raise(db, profile_id)
    stmt = (
        conflict_tolerant_insert(db, ActivityReaction)
        .values(progress_id=progress_id, profile_id=profile_id, reaction_type=reaction_type.value)
        .on_conflict_do_nothing(index_elements=["progress_id", "profile_id", "reaction_type"])
        .returning(ActivityReaction.id)
    )
    added = (await db.execute(stmt)).scalar_one_or_none() is not None
    if added:
        logger.info(
            "reaction.added",
            progress_id=progress_id,
            profile_id=profile_id,
            reaction_type=reaction_type.value,
        )
    return added


async def remove_reaction(
    db: AsyncSession, progress_id: int, profile_id: int, reaction_type: ReactionType
) -> bool:
    """Delete the reaction if present. Returns whether a row was removed."""
    result = await db.execute(
        delete(ActivityReaction)
        .where(
            ActivityReaction.progress_id == progress_id,
            ActivityReaction.profile_id == profile_id,
            ActivityReaction.reaction_type == reaction_type.value,
        )
        .returning(ActivityReaction.id)
    )
    removed = result.scalar_one_or_none() is not None
    if removed:
        logger.info(
            "reaction.removed",
            progress_id=progress_id,
            profile_id=profile_id,
            reaction_type=reaction_type.value,
        )
    return removed


async def toggle_reaction(
    db: AsyncSession, progress_id: int, profile_id: int, reaction_type: ReactionType
) -> bool:
    """Add the reaction, or remove it when it already exists. Returns the new state."""
    if await add_reaction(db, progress_id, profile_id, reaction_type):
        return True
    await remove_reaction(db, progress_id, profile_id, reaction_type)
    return False
