"""Referral reward hook and referral read models.

A signup carrying a valid code records a completed Referral, plants a tree
for the referrer and re-runs the referrer's badge scan. Unknown codes are a
normal outcome, not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

from sqlalchemy import case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.clock import utcnow
from guardian.config import get_settings
from guardian.db.models import Referral, User, UserProgress
from guardian.db.upsert import dialect_insert
from guardian.gamification.badge_service import EarnedBadge, evaluate_badges
from guardian.progress.ledger import get_or_create_progress, get_progress
from guardian.redis_client import publish_event
from guardian.referrals.codes import get_user_by_referral_code
from guardian.users.privacy import display_name, mask_email

logger = logging.getLogger(__name__)

TREES_PER_REFERRAL = 1

REWARD_MILESTONES: list[dict] = [
    {"referrals": 1, "reward": "Tree Planter Badge", "icon": "\U0001f332"},
    {"referrals": 5, "reward": "Community Builder Badge + 1 Month Premium", "icon": "\U0001f465"},
    {"referrals": 10, "reward": "Influencer Badge + 3 Months Premium", "icon": "\U0001f4e3"},
    {"referrals": 25, "reward": "Ambassador Status + 1 Year Premium", "icon": "\U0001f31f"},
]


class ReferralStatus(str, Enum):
    APPLIED = "applied"
    UNKNOWN_CODE = "unknown_code"
    SELF_REFERRAL = "self_referral"
    ALREADY_REFERRED = "already_referred"


class SharePlatform(str, Enum):
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    WHATSAPP = "whatsapp"
    EMAIL = "email"
    COPY = "copy"


@dataclass(frozen=True)
class ReferralOutcome:
    status: ReferralStatus
    referrer_id: int | None = None
    referral_id: int | None = None
    new_badges: list[EarnedBadge] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return self.status is ReferralStatus.APPLIED


async def apply_referral(
    db: AsyncSession,
    redis: object,
    referrer_code: str,
    new_user_id: int,
) -> ReferralOutcome:
    """Credit the owner of `referrer_code` for the signup of `new_user_id`."""
    referrer = await get_user_by_referral_code(db, referrer_code)
    if referrer is None:
        logger.info("Ignoring unknown referral code for user %d", new_user_id)
        return ReferralOutcome(status=ReferralStatus.UNKNOWN_CODE)
    referrer_id = referrer.id
    if referrer_id == new_user_id:
        return ReferralOutcome(status=ReferralStatus.SELF_REFERRAL, referrer_id=referrer_id)

    now = utcnow()
    try:
        stmt = (
            dialect_insert(db, Referral)
            .values(
                referrer_id=referrer_id,
                referred_id=new_user_id,
                status="completed",
                reward_given=True,
                created_at=now,
                completed_at=now,
            )
            .on_conflict_do_nothing(index_elements=["referred_id"])
            .returning(Referral.id)
        )
        referral_id = (await db.execute(stmt)).scalar_one_or_none()
        if referral_id is None:
            await db.commit()
            return ReferralOutcome(status=ReferralStatus.ALREADY_REFERRED, referrer_id=referrer_id)

        await db.execute(update(User).where(User.id == new_user_id).values(referred_by=referrer_id))
        progress = await get_or_create_progress(db, referrer_id, for_update=True)
        progress.trees_planted += TREES_PER_REFERRAL
        progress.updated_at = now
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Referral %d: user %d referred user %d", referral_id, referrer_id, new_user_id)
    await publish_event(redis, "pubsub:referral_completed", {
        "referrer_id": referrer_id,
        "referred_id": new_user_id,
    })

    new_badges = await evaluate_badges(db, redis, referrer_id)
    return ReferralOutcome(
        status=ReferralStatus.APPLIED,
        referrer_id=referrer_id,
        referral_id=referral_id,
        new_badges=new_badges,
    )


async def validate_referral_code(db: AsyncSession, code: str) -> dict | None:
    """Public preview of a referral code's owner, or None if the code is unknown."""
    referrer = await get_user_by_referral_code(db, code)
    if referrer is None:
        return None
    progress = await get_progress(db, referrer.id)
    name = display_name(referrer.name)
    return {
        "name": name,
        "trees_planted": progress.trees_planted if progress else 0,
        "co2_saved": progress.total_co2_saved if progress else 0.0,
        "message": (
            f"Join {name} in saving the planet! "
            "A tree will be planted when you sign up."
        ),
    }


async def get_referral_info(db: AsyncSession, user: User) -> dict:
    """Referral code, share link, totals, recent referrals and reward tiers."""
    progress = await get_progress(db, user.id)

    totals = (await db.execute(
        select(
            func.count(Referral.id),
            func.coalesce(func.sum(case((Referral.status == "completed", 1), else_=0)), 0),
            func.coalesce(func.sum(case((Referral.status == "pending", 1), else_=0)), 0),
        ).where(Referral.referrer_id == user.id)
    )).one()

    recent = await db.execute(
        select(Referral, User)
        .join(User, Referral.referred_id == User.id)
        .where(Referral.referrer_id == user.id)
        .order_by(Referral.created_at.desc(), Referral.id.desc())
        .limit(10)
    )

    base_url = get_settings().frontend_base_url
    return {
        "referral_code": user.referral_code,
        "referral_link": f"{base_url}/join/{user.referral_code}",
        "stats": {
            "total_referrals": int(totals[0]),
            "completed_referrals": int(totals[1]),
            "pending_referrals": int(totals[2]),
            "trees_planted": progress.trees_planted if progress else 0,
        },
        "recent_referrals": [
            {
                "id": row.Referral.id,
                "name": display_name(row.User.name),
                "email": mask_email(row.User.email),
                "status": row.Referral.status,
                "created_at": row.Referral.created_at,
                "completed_at": row.Referral.completed_at,
            }
            for row in recent
        ],
        "rewards": {
            "per_referral": {
                "trees": TREES_PER_REFERRAL,
                "description": "Plant 1 tree for each friend who joins",
            },
            "milestones": REWARD_MILESTONES,
        },
    }


async def get_referral_stats(db: AsyncSession, user_id: int, today: date) -> dict:
    """Monthly referral counts over the last 12 months plus referred users' combined impact."""
    since = today - timedelta(days=365)
    created = await db.execute(
        select(Referral.created_at).where(Referral.referrer_id == user_id)
    )
    monthly: dict[str, int] = {}
    for (created_at,) in created:
        if created_at is None or created_at.date() < since:
            continue
        month = created_at.strftime("%Y-%m")
        monthly[month] = monthly.get(month, 0) + 1

    impact = (await db.execute(
        select(
            func.coalesce(func.sum(UserProgress.total_co2_saved), 0.0),
            func.coalesce(func.sum(UserProgress.total_missions_completed), 0),
        )
        .select_from(Referral)
        .join(UserProgress, Referral.referred_id == UserProgress.user_id)
        .where(Referral.referrer_id == user_id, Referral.status == "completed")
    )).one()

    return {
        "monthly_stats": [
            {"month": month, "count": count}
            for month, count in sorted(monthly.items(), reverse=True)
        ],
        "referred_impact": {
            "total_co2_saved": float(impact[0]),
            "total_missions_completed": int(impact[1]),
        },
    }


async def track_referral_share(redis: object, user_id: int, platform: SharePlatform) -> None:
    """Record that a user shared their referral link. Nothing is persisted."""
    logger.info("User %d shared referral link via %s", user_id, platform.value)
    await publish_event(redis, "pubsub:referral_shared", {
        "user_id": user_id,
        "platform": platform.value,
    })
