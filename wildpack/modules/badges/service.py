"""Badge evaluator: stat computation, threshold checks, idempotent awards."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wildpack.core.database import conflict_tolerant_insert
from wildpack.models.base import utcnow
from wildpack.models.catalog import Activity, Badge, Pack, PackActivity
from wildpack.models.enums import BadgeCategory, BadgeRequirement
from wildpack.models.profiles import Profile, Team
from wildpack.models.progress import ActivityProgress
from wildpack.models.rewards import UserBadge
from wildpack.modules.teams.service import team_share

logger = structlog.get_logger()

_BADGE_CATALOG = [
    {"name": "First Steps", "icon": "🏃", "category": BadgeCategory.XP.value,
     "requirement_type": BadgeRequirement.ACTIVITIES_COMPLETED_COUNT.value, "requirement_value": 1,
     "description": "Complete your first activity and earn your first XP!"},
    {"name": "Explorer", "icon": "🗺️", "category": BadgeCategory.XP.value,
     "requirement_type": BadgeRequirement.XP_GAINED.value, "requirement_value": 50,
     "description": "Earn 50 XP through completing activities."},
    {"name": "Adventure Master", "icon": "🏆", "category": BadgeCategory.XP.value,
     "requirement_type": BadgeRequirement.XP_GAINED.value, "requirement_value": 100,
     "description": "Earn 100 XP through completing activities."},
    {"name": "Pack Pioneer", "icon": "📦", "category": BadgeCategory.PACK.value,
     "requirement_type": BadgeRequirement.PACKS_COMPLETED.value, "requirement_value": 1,
     "description": "Complete your first pack of activities."},
    {"name": "Team Player", "icon": "👥", "category": BadgeCategory.TEAM.value,
     "requirement_type": BadgeRequirement.TEAM_CONTRIBUTION.value, "requirement_value": 25,
     "description": "Contribute 25 XP to your team."},
    {"name": "Nature Enthusiast", "icon": "🌿", "category": BadgeCategory.SPECIAL.value,
     "requirement_type": BadgeRequirement.ACTIVITIES_COMPLETED_COUNT.value, "requirement_value": 10,
     "description": "Complete 10 activities."},
    {"name": "Bird Watcher", "icon": "🐦", "category": BadgeCategory.SPECIAL.value,
     "requirement_type": BadgeRequirement.CATEGORY_COUNT.value, "requirement_value": 5,
     "requirement_category": "bird",
     "description": "Complete 5 bird spotting activities."},
    {"name": "Photography Pro", "icon": "📸", "category": BadgeCategory.SPECIAL.value,
     "requirement_type": BadgeRequirement.CATEGORY_COUNT.value, "requirement_value": 8,
     "requirement_category": "photography",
     "description": "Complete 8 photography activities."},
    {"name": "Outdoor Explorer", "icon": "🏕️", "category": BadgeCategory.SPECIAL.value,
     "requirement_type": BadgeRequirement.CATEGORY_COUNT.value, "requirement_value": 6,
     "requirement_category": "outdoor",
     "description": "Complete 6 outdoor exploration activities."},
]


@dataclass
class PlayerStats:
    activities_completed: int = 0
    xp_gained: int = 0
    team_contribution: int = 0
    team_xp: int = 0
    packs_completed: int = 0
    category_counts: Counter = field(default_factory=Counter)

    def value_for(self, badge: Badge) -> int | None:
        """The stat a badge's threshold is measured against; None for unknown types."""
        try:
            requirement = BadgeRequirement(badge.requirement_type)
        except ValueError:
            return None
        if requirement is BadgeRequirement.ACTIVITIES_COMPLETED_COUNT:
            return self.activities_completed
        if requirement is BadgeRequirement.CATEGORY_COUNT:
            if not badge.requirement_category:
                return None
            return self.category_counts[badge.requirement_category.lower()]
        if requirement is BadgeRequirement.XP_GAINED:
            return self.xp_gained
        if requirement is BadgeRequirement.TEAM_CONTRIBUTION:
            return self.team_contribution
        if requirement is BadgeRequirement.TEAM_XP:
            return self.team_xp
        return self.packs_completed


async def seed_badges(db: AsyncSession) -> None:
    """Insert catalog badges missing by name (run at startup); existing rows keep admin edits."""
    for badge_data in _BADGE_CATALOG:
        stmt = (
            conflict_tolerant_insert(db, Badge)
            .values(**badge_data)
            .on_conflict_do_nothing(index_elements=["name"])
        )
        await db.execute(stmt)
    await db.commit()
    logger.info("badges.seeded", count=len(_BADGE_CATALOG))


async def compute_player_stats(db: AsyncSession, profile_id: int) -> PlayerStats:
    """Aggregate stats from completed progress rows, not from cached counters."""
    stats = PlayerStats()

    completed = await db.execute(
        select(Activity.id, Activity.xp, Activity.categories)
        .join(ActivityProgress, ActivityProgress.activity_id == Activity.id)
        .where(
            ActivityProgress.profile_id == profile_id,
            ActivityProgress.completed_at.is_not(None),
        )
    )
    completed_ids: set[int] = set()
    for activity_id, xp, categories in completed.all():
        completed_ids.add(activity_id)
        stats.xp_gained += xp or 0
        stats.team_contribution += team_share(xp or 0)
        for tag in {str(c).lower() for c in categories or []}:
            stats.category_counts[tag] += 1
    stats.activities_completed = len(completed_ids)

    if completed_ids:
        pack_rows = await db.execute(
            select(PackActivity.pack_id, PackActivity.activity_id)
            .join(Pack, Pack.id == PackActivity.pack_id)
            .where(
                Pack.is_deleted.is_(False),
                PackActivity.is_deleted.is_(False),
                PackActivity.pack_id.in_(
                    select(PackActivity.pack_id).where(PackActivity.activity_id.in_(completed_ids))
                ),
            )
        )
        pack_members: dict[int, set[int]] = {}
        for pack_id, activity_id in pack_rows.all():
            pack_members.setdefault(pack_id, set()).add(activity_id)
        stats.packs_completed = sum(
            1 for members in pack_members.values() if members <= completed_ids
        )

    team_xp = await db.execute(
        select(Team.team_xp)
        .join(Profile, Profile.team_id == Team.id)
        .where(Profile.id == profile_id)
    )
    stats.team_xp = team_xp.scalar_one_or_none() or 0
    return stats


async def get_unheld_badges(db: AsyncSession, profile_id: int) -> list[Badge]:
    """Catalog badges the profile does not hold yet, in catalog order."""
    held = (
        select(UserBadge.id)
        .where(UserBadge.profile_id == profile_id, UserBadge.badge_id == Badge.id)
        .exists()
    )
    result = await db.execute(
        select(Badge).where(Badge.is_deleted.is_(False), ~held).order_by(Badge.id)
    )
    return list(result.scalars().all())


async def evaluate_new_badges(db: AsyncSession, profile_id: int) -> list[Badge]:
    """Badges whose threshold is now met and that the profile does not hold. Writes nothing."""
    stats = await compute_player_stats(db, profile_id)
    qualifying: list[Badge] = []
    for badge in await get_unheld_badges(db, profile_id):
        value = stats.value_for(badge)
        if value is None:
            logger.warning(
                "badge.unknown_requirement",
                badge_id=badge.id,
                requirement_type=badge.requirement_type,
            )
            continue
        if value >= badge.requirement_value:
            qualifying.append(badge)
    return qualifying


async def award_badge(
    db: AsyncSession, profile_id: int, team_id: int | None, badge: Badge
) -> tuple[UserBadge, bool]:
    """Insert the UserBadge unless one exists. Returns the row and whether it was created."""
    stmt = (
        conflict_tolerant_insert(db, UserBadge)
        .values(profile_id=profile_id, badge_id=badge.id, team_id=team_id, earned_at=utcnow())
        .on_conflict_do_nothing(index_elements=["profile_id", "badge_id"])
        .returning(UserBadge.id)
    )
    inserted_id = (await db.execute(stmt)).scalar_one_or_none()

    result = await db.execute(
        select(UserBadge).where(UserBadge.profile_id == profile_id, UserBadge.badge_id == badge.id)
    )
    user_badge = result.scalar_one()
    if inserted_id is None:
        logger.warning("badge.award_race_lost", badge_id=badge.id, profile_id=profile_id)
        return user_badge, False
    logger.info("badge.awarded", badge_id=badge.id, name=badge.name, profile_id=profile_id)
    return user_badge, True


async def get_user_badges(db: AsyncSession, profile_id: int) -> list[dict]:
    result = await db.execute(
        select(UserBadge, Badge)
        .join(Badge, UserBadge.badge_id == Badge.id)
        .where(UserBadge.profile_id == profile_id)
        .order_by(UserBadge.earned_at.desc(), UserBadge.id.desc())
    )
    return [
        {
            "id": ub.id,
            "badge_id": b.id,
            "name": b.name,
            "icon": b.icon,
            "description": b.description,
            "category": b.category,
            "earned_at": ub.earned_at,
        }
        for ub, b in result.all()
    ]


async def get_badge_progress(db: AsyncSession, profile_id: int) -> dict[int, float]:
    """Percent (capped at 100) towards every catalog badge."""
    stats = await compute_player_stats(db, profile_id)
    result = await db.execute(select(Badge).where(Badge.is_deleted.is_(False)).order_by(Badge.id))
    progress: dict[int, float] = {}
    for badge in result.scalars().all():
        value = stats.value_for(badge) or 0
        if badge.requirement_value <= 0:
            progress[badge.id] = 100.0
            continue
        progress[badge.id] = round(min(value * 100 / badge.requirement_value, 100.0), 1)
    return progress


async def list_badges(db: AsyncSession) -> list[Badge]:
    result = await db.execute(select(Badge).where(Badge.is_deleted.is_(False)).order_by(Badge.id))
    return list(result.scalars().all())
