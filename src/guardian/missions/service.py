"""Mission completion/skip transitions and mission history.

pending -> completed and pending -> skipped are the only transitions; both are
terminal. Each transition runs in one transaction that holds the user's ledger
row lock, so concurrent requests for the same user are serialized.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.clock import utcnow
from guardian.db.models import UserMission
from guardian.exceptions import AlreadyCompleted, AssignmentNotFound, InvalidTransition
from guardian.gamification.badge_service import BadgeStatsSnapshot, EarnedBadge, evaluate_badges
from guardian.progress.ledger import (
    LedgerSnapshot,
    apply_completion,
    apply_skip,
    get_or_create_progress,
    get_progress,
)
from guardian.redis_client import publish_event
from guardian.referrals.queries import count_completed_referrals

logger = logging.getLogger(__name__)

MISSION_STATUSES = ("pending", "completed", "skipped")


@dataclass(frozen=True)
class CompletionResult:
    assignment_id: str
    co2_saved: float
    points_earned: int
    streak: int
    leveled_up: bool
    progress: LedgerSnapshot
    new_badges: list[EarnedBadge] = field(default_factory=list)


@dataclass(frozen=True)
class SkipResult:
    assignment_id: str
    previous_streak: int
    streak_lost: bool = True


async def _locked_assignment(db: AsyncSession, assignment_id: str, user_id: int) -> UserMission:
    result = await db.execute(
        select(UserMission)
        .where(UserMission.id == assignment_id, UserMission.user_id == user_id)
        .with_for_update(of=UserMission)
        .execution_options(populate_existing=True)
    )
    assignment = result.unique().scalar_one_or_none()
    if assignment is None:
        raise AssignmentNotFound(assignment_id)
    return assignment


async def complete_assignment(
    db: AsyncSession,
    redis: object,
    assignment_id: str,
    user_id: int,
    today: date,
) -> CompletionResult:
    """Complete a pending assignment and run the badge scan.

    The ledger transition is all-or-nothing. Badge awards happen afterwards in
    their own transactions; they are duplicate-safe, so a retry never
    double-awards.
    """
    now = utcnow()
    try:
        progress = await get_or_create_progress(db, user_id, for_update=True)
        assignment = await _locked_assignment(db, assignment_id, user_id)
        if assignment.status == "completed":
            raise AlreadyCompleted(assignment_id)
        if assignment.status != "pending":
            raise InvalidTransition(assignment_id, assignment.status, "completed")

        assignment.status = "completed"
        assignment.completed_at = now
        transition = await apply_completion(db, progress, assignment.mission, today, now)
        stats = BadgeStatsSnapshot(
            co2_saved=progress.total_co2_saved,
            missions_completed=progress.total_missions_completed,
            streak=progress.current_streak,
            referral_count=await count_completed_referrals(db, user_id),
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "User %d completed mission %s: streak %d -> %d, +%d points",
        user_id, assignment.mission.slug, transition.previous_streak, transition.new_streak,
        transition.points_earned,
    )
    if transition.leveled_up:
        await publish_event(redis, "pubsub:level_up", {
            "user_id": user_id,
            "old_level": transition.old_level,
            "new_level": transition.new_level,
        })
    await publish_event(redis, "pubsub:streak_update", {
        "user_id": user_id,
        "event": transition.streak_event.value,
        "streak_length": transition.new_streak,
    })

    new_badges = await evaluate_badges(db, redis, user_id, stats)

    final = await get_progress(db, user_id, for_update=False)
    return CompletionResult(
        assignment_id=assignment_id,
        co2_saved=transition.co2_saved,
        points_earned=transition.points_earned,
        streak=transition.new_streak,
        leveled_up=transition.leveled_up or (final is not None and final.level > transition.old_level),
        progress=LedgerSnapshot.of(final if final is not None else progress),
        new_badges=new_badges,
    )


async def skip_assignment(
    db: AsyncSession,
    redis: object,
    assignment_id: str,
    user_id: int,
) -> SkipResult:
    """Skip a pending assignment. Resets the current streak to 0; no badge scan."""
    now = utcnow()
    try:
        progress = await get_or_create_progress(db, user_id, for_update=True)
        assignment = await _locked_assignment(db, assignment_id, user_id)
        if assignment.status != "pending":
            raise InvalidTransition(assignment_id, assignment.status, "skipped")

        assignment.status = "skipped"
        assignment.skipped_at = now
        previous_streak = apply_skip(progress, now)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("User %d skipped assignment %s, lost a %d-day streak", user_id, assignment_id, previous_streak)
    if previous_streak > 0:
        await publish_event(redis, "pubsub:streak_update", {
            "user_id": user_id,
            "event": "streak_broken",
            "streak_length": previous_streak,
        })
    return SkipResult(assignment_id=assignment_id, previous_streak=previous_streak)


async def get_mission_history(
    db: AsyncSession,
    user_id: int,
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[UserMission], int]:
    """Page through a user's assignments, newest first. Returns (rows, total)."""
    if status is not None and status not in MISSION_STATUSES:
        raise ValueError(f"Unknown mission status: {status}")

    filters = [UserMission.user_id == user_id]
    if status is not None:
        filters.append(UserMission.status == status)

    total = (await db.execute(select(func.count(UserMission.id)).where(*filters))).scalar_one()
    result = await db.execute(
        select(UserMission)
        .where(*filters)
        .order_by(UserMission.assigned_date.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    return list(result.unique().scalars()), int(total)
