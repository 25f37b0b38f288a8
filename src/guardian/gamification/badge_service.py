"""Badge evaluation and awarding with duplicate-safe inserts.

Badges are permanent: a UserBadge row is inserted once and never updated or
removed. Awarding a badge also credits its bonus points to the ledger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.clock import utcnow
from guardian.db.models import Badge, User, UserBadge
from guardian.db.upsert import dialect_insert
from guardian.progress.ledger import add_points, get_or_create_progress, get_progress
from guardian.redis_client import publish_event
from guardian.referrals.queries import count_completed_referrals

logger = logging.getLogger(__name__)


class RequirementType(str, Enum):
    MISSIONS_COMPLETED = "missions_completed"
    CO2_SAVED = "co2_saved"
    STREAK = "streak"
    REFERRALS = "referrals"
    SPECIAL = "special"
    PREMIUM = "premium"


# Granted by direct hooks (signup, subscription), never by threshold scans
HOOK_GRANTED = frozenset({RequirementType.SPECIAL, RequirementType.PREMIUM})


@dataclass(frozen=True)
class BadgeStatsSnapshot:
    """Post-transition totals a badge scan is evaluated against.

    `streak` is the current streak, not the longest.
    """

    co2_saved: float = 0.0
    missions_completed: int = 0
    streak: int = 0
    referral_count: int = 0


@dataclass(frozen=True)
class EarnedBadge:
    id: int
    slug: str
    name: str
    description: str
    icon: str
    points: int

    @classmethod
    def from_badge(cls, badge: Badge) -> EarnedBadge:
        return cls(
            id=badge.id,
            slug=badge.slug,
            name=badge.name,
            description=badge.description,
            icon=badge.icon,
            points=badge.points,
        )


def progress_for(requirement_type: RequirementType, stats: BadgeStatsSnapshot) -> float | None:
    """The stat a threshold badge is measured against; None for hook-granted badges."""
    match requirement_type:
        case RequirementType.MISSIONS_COMPLETED:
            return stats.missions_completed
        case RequirementType.CO2_SAVED:
            return stats.co2_saved
        case RequirementType.STREAK:
            return stats.streak
        case RequirementType.REFERRALS:
            return stats.referral_count
        case RequirementType.SPECIAL | RequirementType.PREMIUM:
            return None


def qualifies(badge: Badge, stats: BadgeStatsSnapshot) -> bool:
    try:
        requirement = RequirementType(badge.requirement_type)
    except ValueError:
        logger.warning("Badge %s has unknown requirement type %r", badge.slug, badge.requirement_type)
        return False
    current = progress_for(requirement, stats)
    return current is not None and current >= badge.requirement_value


async def get_badge_by_slug(db: AsyncSession, slug: str) -> Badge | None:
    result = await db.execute(select(Badge).where(Badge.slug == slug))
    return result.scalar_one_or_none()


async def get_earned_badge_ids(db: AsyncSession, user_id: int) -> set[int]:
    result = await db.execute(select(UserBadge.badge_id).where(UserBadge.user_id == user_id))
    return set(result.scalars())


async def snapshot_from_ledger(db: AsyncSession, user_id: int) -> BadgeStatsSnapshot:
    """Build a snapshot from the stored ledger plus completed referrals."""
    progress = await get_progress(db, user_id)
    referral_count = await count_completed_referrals(db, user_id)
    if progress is None:
        return BadgeStatsSnapshot(referral_count=referral_count)
    return BadgeStatsSnapshot(
        co2_saved=progress.total_co2_saved,
        missions_completed=progress.total_missions_completed,
        streak=progress.current_streak,
        referral_count=referral_count,
    )


async def award_badge(
    db: AsyncSession,
    redis: object,
    user_id: int,
    badge: Badge,
    now: datetime | None = None,
) -> bool:
    """Award one badge. Returns True if awarded, False if the user already had it.

    1. INSERT user_badges ON CONFLICT DO NOTHING (a concurrent award is a no-op)
    2. Credit badge points to the ledger and recompute level
    3. Commit, then publish badge_earned (and level_up if the bonus crossed a level)
    """
    now = now or utcnow()
    stmt = (
        dialect_insert(db, UserBadge)
        .values(user_id=user_id, badge_id=badge.id, earned_at=now)
        .on_conflict_do_nothing(index_elements=["user_id", "badge_id"])
        .returning(UserBadge.id)
    )
    inserted_id = (await db.execute(stmt)).scalar_one_or_none()
    if inserted_id is None:
        return False

    progress = await get_or_create_progress(db, user_id, for_update=True)
    old_level, new_level = add_points(progress, badge.points, now)
    await db.commit()

    logger.info("User %d earned badge %s (+%d points)", user_id, badge.slug, badge.points)
    await publish_event(redis, "pubsub:badge_earned", {
        "user_id": user_id,
        "badge_slug": badge.slug,
        "badge_name": badge.name,
        "points": badge.points,
    })
    if new_level > old_level:
        await publish_event(redis, "pubsub:level_up", {
            "user_id": user_id,
            "old_level": old_level,
            "new_level": new_level,
        })
    return True


async def evaluate_badges(
    db: AsyncSession,
    redis: object,
    user_id: int,
    stats: BadgeStatsSnapshot | None = None,
) -> list[EarnedBadge]:
    """Scan active threshold badges the user lacks and award every one now met.

    Returns the newly earned badges. Special/premium badges are skipped here.
    """
    if stats is None:
        stats = await snapshot_from_ledger(db, user_id)

    result = await db.execute(
        select(Badge).where(Badge.is_active.is_(True)).order_by(Badge.sort_order, Badge.id)
    )
    badges = list(result.scalars())
    earned_ids = await get_earned_badge_ids(db, user_id)

    newly_earned: list[EarnedBadge] = []
    for badge in badges:
        if badge.id in earned_ids or not qualifies(badge, stats):
            continue
        if await award_badge(db, redis, user_id, badge):
            newly_earned.append(EarnedBadge.from_badge(badge))
    return newly_earned


async def award_special_badge(
    db: AsyncSession,
    redis: object,
    user_id: int,
    requirement_type: RequirementType,
) -> list[EarnedBadge]:
    """Grant every active badge of a hook-granted type (signup, premium purchase)."""
    if requirement_type not in HOOK_GRANTED:
        msg = f"{requirement_type.value} badges are threshold-evaluated, not hook-granted"
        raise ValueError(msg)

    result = await db.execute(
        select(Badge).where(
            Badge.is_active.is_(True),
            Badge.requirement_type == requirement_type.value,
        ).order_by(Badge.sort_order, Badge.id)
    )
    awarded: list[EarnedBadge] = []
    for badge in result.scalars().all():
        if await award_badge(db, redis, user_id, badge):
            awarded.append(EarnedBadge.from_badge(badge))
    return awarded


async def grant_premium(db: AsyncSession, redis: object, user: User) -> list[EarnedBadge]:
    """Subscription hook: flag the account premium and grant premium badges."""
    user.is_premium = True
    user.updated_at = utcnow()
    await db.commit()
    return await award_special_badge(db, redis, user.id, RequirementType.PREMIUM)
