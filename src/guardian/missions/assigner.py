"""Daily mission assignment with a trailing-window anti-repeat rule."""

from __future__ import annotations

import logging
import random
from collections.abc import Collection, Sequence
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.clock import days_ago, utcnow
from guardian.config import get_settings
from guardian.db.models import Mission, UserMission
from guardian.db.upsert import dialect_insert
from guardian.exceptions import NoMissionsAvailable

logger = logging.getLogger(__name__)


def pick_mission(
    candidates: Sequence[Mission],
    recent_ids: Collection[int],
    rng: random.Random | None = None,
) -> Mission:
    """Pick uniformly among missions not in recent_ids.

    Falls back to a uniform pick over every candidate when the recent window
    has exhausted the catalog. Raises NoMissionsAvailable when there are none.
    """
    if not candidates:
        raise NoMissionsAvailable
    chooser = rng or random
    fresh = [m for m in candidates if m.id not in recent_ids]
    return chooser.choice(fresh or list(candidates))


async def get_assignment_for_day(db: AsyncSession, user_id: int, day: date) -> UserMission | None:
    result = await db.execute(
        select(UserMission).where(
            UserMission.user_id == user_id,
            UserMission.assigned_date == day,
        )
    )
    return result.scalar_one_or_none()


async def get_recent_mission_ids(db: AsyncSession, user_id: int, today: date, window_days: int) -> set[int]:
    """Mission ids assigned to the user in [today - window_days, today]."""
    result = await db.execute(
        select(UserMission.mission_id).where(
            UserMission.user_id == user_id,
            UserMission.assigned_date >= days_ago(today, window_days),
            UserMission.assigned_date <= today,
        )
    )
    return set(result.scalars())


async def get_today_assignment(
    db: AsyncSession,
    user_id: int,
    today: date,
    rng: random.Random | None = None,
) -> UserMission:
    """Return the user's assignment for `today`, creating it if absent.

    Idempotent within a day. The insert is ON CONFLICT DO NOTHING against
    UNIQUE(user_id, assigned_date): if a concurrent request got there first,
    the row it created is re-read and returned.
    """
    existing = await get_assignment_for_day(db, user_id, today)
    if existing is not None:
        return existing

    result = await db.execute(select(Mission).where(Mission.is_active.is_(True)).order_by(Mission.id))
    active = list(result.scalars())

    window = get_settings().mission_repeat_window_days
    recent = await get_recent_mission_ids(db, user_id, today, window)
    mission = pick_mission(active, recent, rng)

    stmt = (
        dialect_insert(db, UserMission)
        .values(
            user_id=user_id,
            mission_id=mission.id,
            assigned_date=today,
            status="pending",
            created_at=utcnow(),
        )
        .on_conflict_do_nothing(index_elements=["user_id", "assigned_date"])
        .returning(UserMission.id)
    )
    inserted_id = (await db.execute(stmt)).scalar_one_or_none()
    await db.commit()

    if inserted_id is None:
        logger.info("Assignment race for user %d on %s: returning existing row", user_id, today)
    else:
        logger.info("Assigned mission %s to user %d for %s", mission.slug, user_id, today)

    assignment = await get_assignment_for_day(db, user_id, today)
    if assignment is None:  # pragma: no cover - the row exists after either branch
        msg = f"Assignment for user {user_id} on {today} vanished after insert"
        raise RuntimeError(msg)
    return assignment
