"""Progress store accessor: the per-(profile, activity) completion record.

Duplicate-insert races are resolved by the unique constraint on
(profile_id, activity_id) plus ``ON CONFLICT DO NOTHING``; the loser re-reads
and returns the winner's row. Completion is a conditional UPDATE guarded by
``completed_at IS NULL`` so it can only ever happen once.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.database import conflict_tolerant_insert
from wildpack.core.errors import ActivityNotFound
from wildpack.models.base import utcnow
from wildpack.models.catalog import Activity, PackActivity
from wildpack.models.enums import PhotoStatus
from wildpack.models.progress import ActivityPhoto, ActivityProgress

logger = structlog.get_logger()


@dataclass(frozen=True)
class CompletionMark:
    progress: ActivityProgress
    newly_completed: bool


@dataclass
class BatchProgress:
    progress_ids: dict[int, int] = field(default_factory=dict)  # profile_id -> progress id
    created: set[int] = field(default_factory=set)  # profile_ids whose row was inserted now


@dataclass(frozen=True)
class PhotoSubmission:
    profile_id: int
    progress_id: int
    activity_id: int
    photo_url: str


async def get_progress(
    db: AsyncSession, profile_id: int, activity_id: int, *, fresh: bool = False
) -> ActivityProgress | None:
    stmt = select(ActivityProgress).where(
        ActivityProgress.profile_id == profile_id,
        ActivityProgress.activity_id == activity_id,
    )
    if fresh:
        stmt = stmt.execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def ensure_started(db: AsyncSession, profile_id: int, activity_id: int) -> ActivityProgress:
    """Return the progress row for the pair, inserting a started row if there is none."""
    existing = await get_progress(db, profile_id, activity_id)
    if existing is not None:
        return existing

    stmt = (
        conflict_tolerant_insert(db, ActivityProgress)
        .values(profile_id=profile_id, activity_id=activity_id, started_at=utcnow())
        .on_conflict_do_nothing(index_elements=["profile_id", "activity_id"])
        .returning(ActivityProgress.id)
    )
    inserted_id = (await db.execute(stmt)).scalar_one_or_none()
    if inserted_id is None:
        logger.warning("progress.insert_race_lost", profile_id=profile_id, activity_id=activity_id)
    else:
        logger.info("progress.started", profile_id=profile_id, activity_id=activity_id)

    progress = await get_progress(db, profile_id, activity_id, fresh=True)
    if progress is None:  # pragma: no cover - the row exists once the insert returned
        raise LookupError(f"Progress for profile {profile_id} on activity {activity_id} vanished")
    return progress


async def mark_completed(
    db: AsyncSession,
    profile_id: int,
    activity_id: int,
    notes: str | None = None,
    photo_url: str | None = None,
) -> CompletionMark:
    """Stamp completed_at once. An already-completed row is returned unchanged."""
    stmt = (
        update(ActivityProgress)
        .where(
            ActivityProgress.profile_id == profile_id,
            ActivityProgress.activity_id == activity_id,
            ActivityProgress.completed_at.is_(None),
        )
        .values(completed_at=utcnow(), notes=notes, photo_url=photo_url)
        .returning(ActivityProgress)
        .execution_options(populate_existing=True, synchronize_session=False)
    )
    completed = (await db.execute(stmt)).scalar_one_or_none()
    if completed is not None:
        logger.info("progress.completed", profile_id=profile_id, activity_id=activity_id)
        return CompletionMark(progress=completed, newly_completed=True)

    existing = await get_progress(db, profile_id, activity_id, fresh=True)
    if existing is None:
        await ensure_started(db, profile_id, activity_id)
        return await mark_completed(db, profile_id, activity_id, notes, photo_url)
    return CompletionMark(progress=existing, newly_completed=False)


async def ensure_batch(db: AsyncSession, profile_ids: list[int], activity_id: int) -> BatchProgress:
    """Make sure every profile has a progress row for the activity."""
    batch = BatchProgress()
    wanted = list(dict.fromkeys(profile_ids))
    if not wanted:
        return batch

    existing = await db.execute(
        select(ActivityProgress.profile_id, ActivityProgress.id).where(
            ActivityProgress.activity_id == activity_id,
            ActivityProgress.profile_id.in_(wanted),
        )
    )
    batch.progress_ids.update({profile_id: progress_id for profile_id, progress_id in existing.all()})

    missing = [pid for pid in wanted if pid not in batch.progress_ids]
    if not missing:
        return batch

    now = utcnow()
    stmt = (
        conflict_tolerant_insert(db, ActivityProgress)
        .values([
            {"profile_id": pid, "activity_id": activity_id, "started_at": now, "created_at": now}
            for pid in missing
        ])
        .on_conflict_do_nothing(index_elements=["profile_id", "activity_id"])
        .returning(ActivityProgress.profile_id, ActivityProgress.id)
    )
    for profile_id, progress_id in (await db.execute(stmt)).all():
        batch.progress_ids[profile_id] = progress_id
        batch.created.add(profile_id)

    raced = [pid for pid in missing if pid not in batch.progress_ids]
    if raced:
        logger.warning("progress.batch_insert_race_lost", activity_id=activity_id, profile_ids=raced)
        winners = await db.execute(
            select(ActivityProgress.profile_id, ActivityProgress.id).where(
                ActivityProgress.activity_id == activity_id,
                ActivityProgress.profile_id.in_(raced),
            )
        )
        batch.progress_ids.update({profile_id: progress_id for profile_id, progress_id in winners.all()})

    logger.info(
        "progress.batch_ensured",
        activity_id=activity_id,
        profiles=len(wanted),
        created=len(batch.created),
    )
    return batch


async def record_photo_submissions(db: AsyncSession, submissions: list[PhotoSubmission]) -> int:
    """Queue completion photos for review. Resubmitting the same photo is a no-op."""
    if not submissions:
        return 0
    stmt = (
        conflict_tolerant_insert(db, ActivityPhoto)
        .values([
            {
                "profile_id": s.profile_id,
                "progress_id": s.progress_id,
                "activity_id": s.activity_id,
                "photo_url": s.photo_url,
                "status": PhotoStatus.PENDING_REVIEW.value,
                "created_at": utcnow(),
            }
            for s in submissions
        ])
        .on_conflict_do_nothing(index_elements=["progress_id", "photo_url"])
        .returning(ActivityPhoto.id)
    )
    inserted = len((await db.execute(stmt)).all())
    logger.info("progress.photos_recorded", submitted=len(submissions), inserted=inserted)
    return inserted


async def get_recent_completed(db: AsyncSession, profile_id: int, limit: int = 8) -> list[dict]:
    result = await db.execute(
        select(ActivityProgress, Activity)
        .join(Activity, Activity.id == ActivityProgress.activity_id)
        .where(
            ActivityProgress.profile_id == profile_id,
            ActivityProgress.completed_at.is_not(None),
        )
        .order_by(ActivityProgress.completed_at.desc(), ActivityProgress.id.desc())
        .limit(limit)
    )
    return [
        {
            "id": progress.id,
            "activity_id": activity.id,
            "title": activity.title,
            "xp": activity.xp,
            "completed_at": progress.completed_at,
        }
        for progress, activity in result.all()
    ]


async def get_pack_completion(db: AsyncSession, profile_id: int, pack_id: int) -> int:
    """Percentage (0-100, rounded) of a pack's activities the profile has completed."""
    pack_activity_ids = select(PackActivity.activity_id).where(
        PackActivity.pack_id == pack_id, PackActivity.is_deleted.is_(False)
    )
    total = (
        await db.execute(select(func.count()).select_from(pack_activity_ids.subquery()))
    ).scalar_one()
    if not total:
        return 0

    completed = (
        await db.execute(
            select(func.count(ActivityProgress.id)).where(
                ActivityProgress.profile_id == profile_id,
                ActivityProgress.completed_at.is_not(None),
                ActivityProgress.activity_id.in_(pack_activity_ids),
            )
        )
    ).scalar_one()
    return round(completed * 100 / total)


async def get_activity_or_raise(db: AsyncSession, activity_id: int) -> Activity:
    result = await db.execute(
        select(Activity).where(Activity.id == activity_id, Activity.is_deleted.is_(False))
    )
    activity = result.scalar_one_or_none()
    if activity is None:
        raise ActivityNotFound(activity_id)
    return activity
