"""SQLAlchemy models package: import all models so Base.metadata is populated."""

from wildpack.models.base import BaseModel, ModelMixin, TimestampedModel
from wildpack.models.catalog import Activity, Badge, Pack, PackActivity
from wildpack.models.enums import (
    ActivityStatus,
    BadgeCategory,
    BadgeRequirement,
    LedgerSource,
    PhotoStatus,
    ReactionType,
)
from wildpack.models.profiles import Profile, Team
from wildpack.models.progress import ActivityPhoto, ActivityProgress, ActivityReaction
from wildpack.models.rewards import UserAchievement, UserBadge

__all__ = [
    "Activity",
    "ActivityPhoto",
    "ActivityProgress",
    "ActivityReaction",
    "ActivityStatus",
    "Badge",
    "BadgeCategory",
    "BadgeRequirement",
    "BaseModel",
    "LedgerSource",
    "ModelMixin",
    "Pack",
    "PackActivity",
    "PhotoStatus",
    "Profile",
    "ReactionType",
    "Team",
    "TimestampedModel",
    "UserAchievement",
    "UserBadge",
]
