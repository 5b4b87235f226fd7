"""Completion orchestrator: the single idempotent entry point for finishing an activity.

Two commits, in order:

1. Progress: the row is ensured and ``completed_at`` stamped (at most once).
   After this commit the completion is durable.
2. Rewards: one transaction that first claims the row via
   ``rewarded_at IS NULL`` and then applies player XP, team XP, the mission
   ledger entry and any badge awards with their ledger entries.

A failure in step 2 rolls the whole grant back and leaves the row
"completed, rewards pending"; calling again re-runs step 2 exactly once.
A row that is completed and rewarded short-circuits to a zero summary.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.errors import PartialRewardFailure, PersistenceFailure, PhotoRequired, ValidationFailed
from wildpack.core.sentry import tag_player
from wildpack.models.base import utcnow
from wildpack.models.catalog import Activity, Badge
from wildpack.models.enums import LedgerSource
from wildpack.models.profiles import Profile
from wildpack.models.progress import ActivityProgress
from wildpack.modules.badges import service as badges_service
from wildpack.modules.profiles.service import get_profile_or_raise, increment_profile_xp
from wildpack.modules.progress import service as progress_service
from wildpack.modules.progress.service import PhotoSubmission
from wildpack.modules.rewards import service as ledger
from wildpack.modules.rewards.service import LedgerEntry
from wildpack.modules.teams.service import increment_team_xp, team_share

logger = structlog.get_logger()


@dataclass
class CompletionResult:
    success: bool = True
    xp_gained: int = 0
    team_xp_gained: int = 0
    new_badges: list[Badge] = field(default_factory=list)


@dataclass(frozen=True)
class _RewardTarget:
    progress_id: int
    profile_id: int
    team_id: int
    activity_id: int
    activity_title: str
    activity_xp: int


async def _load_or_fail(
    db: AsyncSession, activity_id: int, profile_ids: list[int]
) -> tuple[Activity, list[Profile]]:
    """Fetch the activity and every profile; a store outage surfaces as PersistenceFailure."""
    try:
        activity = await progress_service.get_activity_or_raise(db, activity_id)
        profiles = [await get_profile_or_raise(db, pid) for pid in profile_ids]
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "completion.lookup_failed",
            profile_ids=profile_ids,
            activity_id=activity_id,
            error=str(exc),
        )
        raise PersistenceFailure(f"Could not load activity {activity_id}") from exc
    return activity, profiles


async def complete_activity(
    db: AsyncSession,
    profile_id: int,
    activity_id: int,
    photo_url: str | None = None,
    notes: str | None = None,
) -> CompletionResult:
    activity, profiles = await _load_or_fail(db, activity_id, [profile_id])
    if activity.photo_required and not photo_url:
        raise PhotoRequired(activity_id)
    profile = profiles[0]
    tag_player(profile_id, profile.team_id)

    try:
        await progress_service.ensure_started(db, profile_id, activity_id)
        mark = await progress_service.mark_completed(db, profile_id, activity_id, notes, photo_url)
        # the photo belongs to the completion that stamped completed_at, never to a retry
        if photo_url and mark.newly_completed:
            await progress_service.record_photo_submissions(
                db, [PhotoSubmission(profile_id, mark.progress.id, activity_id, photo_url)]
            )
        target = _RewardTarget(
            progress_id=mark.progress.id,
            profile_id=profile_id,
            team_id=profile.team_id,
            activity_id=activity_id,
            activity_title=activity.title,
            activity_xp=activity.xp or 0,
        )
        already_rewarded = mark.progress.rewarded_at is not None
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "completion.progress_write_failed",
            profile_id=profile_id,
            activity_id=activity_id,
            error=str(exc),
        )
        raise PersistenceFailure(
            f"Could not record completion of activity {activity_id} for profile {profile_id}"
        ) from exc

    if not mark.newly_completed:
        if already_rewarded:
            logger.info("completion.already_completed", profile_id=profile_id, activity_id=activity_id)
            return CompletionResult()
        logger.info("completion.rewards_pending_retry", profile_id=profile_id, activity_id=activity_id)

    try:
        result = await _grant_rewards(db, target)
        await db.commit()
    except (SQLAlchemyError, LookupError) as exc:
        await db.rollback()
        logger.error(
            "completion.partial_reward_failure",
            profile_id=profile_id,
            activity_id=activity_id,
            error=str(exc),
        )
        raise PartialRewardFailure(profile_id, activity_id) from exc
    return result


async def _grant_rewards(db: AsyncSession, target: _RewardTarget) -> CompletionResult:
    claimed = await db.execute(
        update(ActivityProgress)
        .where(ActivityProgress.id == target.progress_id, ActivityProgress.rewarded_at.is_(None))
        .values(rewarded_at=utcnow())
        .returning(ActivityProgress.id)
        .execution_options(synchronize_session=False)
    )
    if claimed.scalar_one_or_none() is None:
        logger.warning(
            "completion.rewards_already_claimed",
            profile_id=target.profile_id,
            activity_id=target.activity_id,
        )
        return CompletionResult()

    xp_gained = target.activity_xp
    team_xp_gained = team_share(xp_gained)
    await increment_profile_xp(db, target.profile_id, xp_gained, team_xp_gained)
    await increment_team_xp(db, target.team_id, team_xp_gained)
    await ledger.append(db, [
        LedgerEntry(
            profile_id=target.profile_id,
            team_id=target.team_id,
            source=LedgerSource.MISSION.value,
            source_id=target.activity_id,
            message=f"Completed {target.activity_title}",
            xp=xp_gained,
        )
    ])

    new_badges: list[Badge] = []
    for badge in await badges_service.evaluate_new_badges(db, target.profile_id):
        _, created = await badges_service.award_badge(db, target.profile_id, target.team_id, badge)
        if created:
            new_badges.append(badge)
    await ledger.append(db, [
        LedgerEntry(
            profile_id=target.profile_id,
            team_id=target.team_id,
            source=LedgerSource.BADGE.value,
            source_id=badge.id,
            message=f"Earned the {badge.name} badge",
        )
        for badge in new_badges
    ])

    logger.info(
        "completion.rewarded",
        profile_id=target.profile_id,
        activity_id=target.activity_id,
        team_id=target.team_id,
        xp=xp_gained,
        team_xp=team_xp_gained,
        new_badges=[b.id for b in new_badges],
    )
    return CompletionResult(
        xp_gained=xp_gained,
        team_xp_gained=team_xp_gained,
        new_badges=new_badges,
    )


async def complete_activity_for_party(
    db: AsyncSession,
    profile_ids: list[int],
    activity_id: int,
    photo_url: str | None = None,
    notes: str | None = None,
) -> dict[int, CompletionResult]:
    """Shared completion: every profile in the party completes the same activity.

    All profiles are validated before anything is written. Each player's
    completion is then run independently; a failure stops the loop and a
    retry of the whole call skips players that were already rewarded.
    """
    party = list(dict.fromkeys(profile_ids))
    if not party:
        raise ValidationFailed("At least one profile is required")
    activity, _ = await _load_or_fail(db, activity_id, party)
    if activity.photo_required and not photo_url:
        raise PhotoRequired(activity_id)

    try:
        batch = await progress_service.ensure_batch(db, party, activity_id)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceFailure(
            f"Could not prepare party completion of activity {activity_id}"
        ) from exc

    results: dict[int, CompletionResult] = {}
    for profile_id in party:
        results[profile_id] = await complete_activity(
            db, profile_id, activity_id, photo_url=photo_url, notes=notes
        )
    logger.info(
        "completion.party_completed",
        activity_id=activity_id,
        profiles=len(party),
        newly_created=len(batch.created),
    )
    return results
