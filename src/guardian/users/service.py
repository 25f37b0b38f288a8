"""Account lifecycle: signup wiring, profile and settings updates, account deletion.

Signup creates the zeroed ledger, grants the early-adopter badge when that
campaign is enabled, credits a referrer if a code was supplied and assigns
the first daily mission.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.clock import today_utc, utcnow
from guardian.config import get_settings
from guardian.db.models import (
    ProgressLog,
    Referral,
    User,
    UserBadge,
    UserMission,
    UserProgress,
)
from guardian.exceptions import NoMissionsAvailable, UserNotFound
from guardian.gamification.badge_service import EarnedBadge, RequirementType, award_special_badge
from guardian.missions.assigner import get_today_assignment
from guardian.progress.ledger import create_progress
from guardian.referrals.codes import generate_unique_referral_code
from guardian.referrals.service import ReferralOutcome, apply_referral

logger = logging.getLogger(__name__)


@dataclass
class SignupResult:
    user: User
    badges: list[EarnedBadge] = field(default_factory=list)
    referral: ReferralOutcome | None = None
    first_assignment_id: str | None = None


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    redis: object,
    email: str,
    name: str | None = None,
    referral_code: str | None = None,
    today: date | None = None,
) -> SignupResult:
    """Register an account and run the signup hooks.

    Raises ValueError if the email is already registered. An unknown
    referral code does not fail the signup.
    """
    email = email.strip().lower()
    if await get_user_by_email(db, email) is not None:
        raise ValueError("Email already registered")

    user = User(
        email=email,
        name=name,
        referral_code=await generate_unique_referral_code(db),
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    db.add(user)
    await db.flush()
    await create_progress(db, user.id)
    await db.commit()
    user_id = user.id

    logger.info("Created user %d", user_id)
    result = SignupResult(user=user)

    if get_settings().early_adopter_enabled:
        result.badges.extend(await award_special_badge(db, redis, user_id, RequirementType.SPECIAL))

    if referral_code:
        result.referral = await apply_referral(db, redis, referral_code, user_id)

    try:
        assignment = await get_today_assignment(db, user_id, today or today_utc())
    except NoMissionsAvailable:
        logger.warning("No active missions; user %d starts without an assignment", user_id)
    else:
        result.first_assignment_id = assignment.id

    await db.refresh(user)
    return result


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Delete an account and every row that belongs to it.

    Child rows go first and other users' referred_by pointers are cleared, so
    the delete never leans on ON DELETE CASCADE.
    """
    if await get_user_by_id(db, user_id) is None:
        raise UserNotFound(user_id)
    try:
        await db.execute(delete(UserMission).where(UserMission.user_id == user_id))
        await db.execute(delete(ProgressLog).where(ProgressLog.user_id == user_id))
        await db.execute(delete(UserBadge).where(UserBadge.user_id == user_id))
        await db.execute(
            delete(Referral).where(or_(Referral.referrer_id == user_id, Referral.referred_id == user_id))
        )
        await db.execute(delete(UserProgress).where(UserProgress.user_id == user_id))
        await db.execute(update(User).where(User.referred_by == user_id).values(referred_by=None))
        await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    db.expunge_all()
    logger.info("Deleted user %d", user_id)


async def update_profile(
    db: AsyncSession,
    user: User,
    name: str | None = None,
    zip_code: str | None = None,
    country: str | None = None,
    timezone: str | None = None,
) -> User:
    """Set the given profile fields.

    Raises:
        ValueError: If no field was supplied.
    """
    changes = {
        "name": name,
        "zip_code": zip_code,
        "country": country.upper() if country is not None else None,
        "timezone": timezone,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        raise ValueError("No fields to update")
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    await db.flush()
    logger.info("Updated profile fields %s for user %d", sorted(changes), user.id)
    return user


async def update_settings(
    db: AsyncSession,
    user: User,
    notification_email: bool | None = None,
    notification_push: bool | None = None,
    notification_time: str | None = None,
    theme: str | None = None,
    units: str | None = None,
) -> User:
    """Set the given notification and display preferences.

    Raises:
        ValueError: If no setting was supplied.
    """
    changes = {
        "notification_email": notification_email,
        "notification_push": notification_push,
        "notification_time": notification_time,
        "theme": theme,
        "units": units,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        raise ValueError("No settings to update")
    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_at = utcnow()
    await db.flush()
    return user
