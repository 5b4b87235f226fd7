"""Enums shared by models, services and schemas."""

import enum


# ── Progress ─────────────────────────────────────────────────────────────────


class ActivityStatus(str, enum.Enum):
    """Derived progress state; NOT_STARTED is the absence of a progress row."""

    NOT_STARTED = "not_started"
    STARTED = "started"
    COMPLETED = "completed"


class PhotoStatus(str, enum.Enum):
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    DENIED = "denied"


# ── Badges ───────────────────────────────────────────────────────────────────


class BadgeCategory(str, enum.Enum):
    XP = "xp"
    PACK = "pack"
    TEAM = "team"
    SPECIAL = "special"


class BadgeRequirement(str, enum.Enum):
    ACTIVITIES_COMPLETED_COUNT = "activities_completed_count"
    CATEGORY_COUNT = "category_count"
    XP_GAINED = "xp_gained"
    TEAM_CONTRIBUTION = "team_contribution"
    TEAM_XP = "team_xp"
    PACKS_COMPLETED = "packs_completed"


# ── Reward ledger ────────────────────────────────────────────────────────────


class LedgerSource(str, enum.Enum):
    MISSION = "mission"
    BADGE = "badge"


# ── Team feed ────────────────────────────────────────────────────────────────


class ReactionType(str, enum.Enum):
    """Declaration order is the order reactions are listed in."""

    HIGH_FIVE = "high_five"
    LIKE = "like"
    CELEBRATE = "celebrate"
    AWESOME = "awesome"
    GREAT_JOB = "great_job"
