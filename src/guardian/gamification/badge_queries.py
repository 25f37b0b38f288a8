"""Badge read models: catalog with per-user progress, detail, earned list, sharing."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.config import get_settings
from guardian.db.models import Badge, User, UserBadge
from guardian.exceptions import BadgeNotEarned, BadgeNotFound
from guardian.gamification.badge_service import (
    BadgeStatsSnapshot,
    RequirementType,
    get_badge_by_slug,
    progress_for,
)
from guardian.progress.ledger import get_progress
from guardian.referrals.queries import count_completed_referrals


def _badge_dict(badge: Badge) -> dict:
    return {
        "id": badge.id,
        "slug": badge.slug,
        "name": badge.name,
        "description": badge.description,
        "icon": badge.icon,
        "category": badge.category,
        "points": badge.points,
        "requirement_type": badge.requirement_type,
        "requirement_value": badge.requirement_value,
    }


def display_progress(badge: Badge, stats: BadgeStatsSnapshot, earned: bool) -> dict:
    """Progress-bar data for one badge.

    `stats.streak` here is the longest streak; evaluation uses the current one.
    Hook-granted badges show as complete once earned and empty otherwise.
    """
    try:
        requirement = RequirementType(badge.requirement_type)
    except ValueError:
        current: float = 0
    else:
        value = progress_for(requirement, stats)
        if value is None:
            current = badge.requirement_value if earned else 0
        else:
            current = value
    target = badge.requirement_value
    percentage = min(100, round(current / target * 100)) if target > 0 else (100 if earned else 0)
    return {"current": current, "target": target, "percentage": percentage}


async def _display_stats(db: AsyncSession, user_id: int) -> BadgeStatsSnapshot:
    progress = await get_progress(db, user_id)
    referrals = await count_completed_referrals(db, user_id)
    if progress is None:
        return BadgeStatsSnapshot(referral_count=referrals)
    return BadgeStatsSnapshot(
        co2_saved=progress.total_co2_saved,
        missions_completed=progress.total_missions_completed,
        streak=progress.longest_streak,
        referral_count=referrals,
    )


async def _earned_map(db: AsyncSession, user_id: int) -> dict[int, UserBadge]:
    result = await db.execute(select(UserBadge).where(UserBadge.user_id == user_id))
    return {ub.badge_id: ub for ub in result.unique().scalars()}


async def list_badges_with_progress(db: AsyncSession, user_id: int) -> dict:
    """All active badges with earned flag and progress, grouped by category."""
    result = await db.execute(
        select(Badge)
        .where(Badge.is_active.is_(True))
        .order_by(Badge.category, Badge.requirement_value, Badge.id)
    )
    badges = list(result.scalars())
    earned = await _earned_map(db, user_id)
    stats = await _display_stats(db, user_id)

    items = []
    by_category: dict[str, list[dict]] = {}
    for badge in badges:
        user_badge = earned.get(badge.id)
        item = _badge_dict(badge)
        item["earned"] = user_badge is not None
        item["earned_at"] = user_badge.earned_at if user_badge else None
        item["progress"] = display_progress(badge, stats, user_badge is not None)
        items.append(item)
        by_category.setdefault(badge.category, []).append(item)

    earned_items = [item for item in items if item["earned"]]
    return {
        "badges": items,
        "by_category": by_category,
        "summary": {
            "total": len(items),
            "earned": len(earned_items),
            "total_points": sum(item["points"] for item in earned_items),
        },
    }


async def get_earned_badges(db: AsyncSession, user_id: int) -> dict:
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.desc(), UserBadge.id.desc())
    )
    rows = list(result.unique().scalars())
    items = []
    for ub in rows:
        item = _badge_dict(ub.badge)
        item["earned"] = True
        item["earned_at"] = ub.earned_at
        items.append(item)
    return {
        "badges": items,
        "count": len(items),
        "total_points": sum(item["points"] for item in items),
    }


async def get_badge_detail(db: AsyncSession, user_id: int, slug: str) -> dict:
    """One badge with the user's earned state and its rarity across all users."""
    badge = await get_badge_by_slug(db, slug)
    if badge is None:
        raise BadgeNotFound(slug)

    user_badge = (await db.execute(
        select(UserBadge).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge.id)
    )).unique().scalar_one_or_none()
    earners = (await db.execute(
        select(func.count(UserBadge.id)).where(UserBadge.badge_id == badge.id)
    )).scalar_one()
    total_users = (await db.execute(select(func.count(User.id)))).scalar_one()

    item = _badge_dict(badge)
    item["earned"] = user_badge is not None
    item["earned_at"] = user_badge.earned_at if user_badge else None
    return {
        "badge": item,
        "rarity": {
            "earners_count": int(earners),
            "total_users": int(total_users),
            "percentage": round(earners / total_users * 100) if total_users else 0,
        },
    }


async def build_share_payload(db: AsyncSession, user_id: int, slug: str) -> dict:
    """Share text for an earned badge.

    Raises BadgeNotFound for unknown slugs and BadgeNotEarned if the user lacks it.
    """
    badge = await get_badge_by_slug(db, slug)
    if badge is None:
        raise BadgeNotFound(slug)
    held = (await db.execute(
        select(UserBadge.id).where(UserBadge.user_id == user_id, UserBadge.badge_id == badge.id)
    )).scalar_one_or_none()
    if held is None:
        raise BadgeNotEarned(slug)

    base_url = get_settings().frontend_base_url
    return {
        "title": f'I earned the "{badge.name}" badge!',
        "text": (
            f'{badge.icon} I just earned the "{badge.name}" badge on Climate Guardian! '
            f"{badge.description}"
        ),
        "url": f"{base_url}/badges/{badge.slug}",
    }
