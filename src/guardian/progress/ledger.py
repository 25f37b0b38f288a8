"""Progress ledger: per-user accumulators and the daily progress log.

Only this module mutates UserProgress counters and ProgressLog rows. Callers
hold the ledger row lock (get_progress(..., for_update=True)) for the whole
transition, which serializes concurrent completions/skips for one user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.clock import utcnow
from guardian.db.models import Mission, ProgressLog, UserProgress
from guardian.db.upsert import dialect_insert
from guardian.progress.levels import level_from_points
from guardian.progress.streak import StreakEvent, longest_after, next_streak, streak_after_skip, streak_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionTransition:
    """What a completion changed on the ledger."""

    co2_saved: float
    points_earned: int
    previous_streak: int
    new_streak: int
    old_level: int
    new_level: int
    streak_event: StreakEvent

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


async def create_progress(db: AsyncSession, user_id: int) -> UserProgress:
    """Create the zeroed ledger row for a new account."""
    progress = UserProgress(
        user_id=user_id,
        total_co2_saved=0.0,
        total_missions_completed=0,
        total_missions_skipped=0,
        current_streak=0,
        longest_streak=0,
        streak_last_date=None,
        total_points=0,
        level=1,
        trees_planted=0,
        created_at=utcnow(),
        updated_at=utcnow(),
    )
    db.add(progress)
    await db.flush()
    return progress


async def get_progress(
    db: AsyncSession,
    user_id: int,
    *,
    for_update: bool = False,
) -> UserProgress | None:
    """Fetch a user's ledger row, optionally locking it for the current transaction."""
    stmt = select(UserProgress).where(UserProgress.user_id == user_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_or_create_progress(db: AsyncSession, user_id: int, *, for_update: bool = False) -> UserProgress:
    progress = await get_progress(db, user_id, for_update=for_update)
    if progress is None:
        progress = await create_progress(db, user_id)
    return progress


def add_points(progress: UserProgress, amount: int, now: datetime | None = None) -> tuple[int, int]:
    """Add points and recompute the level. Returns (old_level, new_level)."""
    old_level = progress.level
    progress.total_points += amount
    progress.level = level_from_points(progress.total_points)
    progress.updated_at = now or utcnow()
    return old_level, progress.level


async def apply_completion(
    db: AsyncSession,
    progress: UserProgress,
    mission: Mission,
    today: date,
    now: datetime | None = None,
) -> CompletionTransition:
    """Apply a mission completion on `today` to a locked ledger row.

    Streak, longest streak, totals, level, streak_last_date and the daily log
    are all updated in the caller's transaction.
    """
    now = now or utcnow()
    event = streak_event(progress.streak_last_date, today)
    previous_streak = progress.current_streak
    new_streak = next_streak(progress.streak_last_date, progress.current_streak, today)

    progress.current_streak = new_streak
    progress.longest_streak = longest_after(progress.longest_streak, new_streak)
    progress.total_co2_saved += mission.co2_impact
    progress.total_missions_completed += 1
    old_level, new_level = add_points(progress, mission.points, now)
    progress.streak_last_date = today

    await upsert_daily_log(db, progress.user_id, today, mission.co2_impact, mission.points)
    await db.flush()

    return CompletionTransition(
        co2_saved=mission.co2_impact,
        points_earned=mission.points,
        previous_streak=previous_streak,
        new_streak=new_streak,
        old_level=old_level,
        new_level=new_level,
        streak_event=event,
    )


def apply_skip(progress: UserProgress, now: datetime | None = None) -> int:
    """Apply a skip to a locked ledger row. Returns the streak that was lost.

    longest_streak and streak_last_date are left alone; no points or CO2.
    """
    previous_streak = progress.current_streak
    progress.total_missions_skipped += 1
    progress.current_streak = streak_after_skip()
    progress.updated_at = now or utcnow()
    return previous_streak


async def upsert_daily_log(
    db: AsyncSession,
    user_id: int,
    day: date,
    co2_saved: float,
    points_earned: int,
) -> None:
    """Create the (user_id, day) log row or add to it."""
    table = ProgressLog.__table__
    stmt = dialect_insert(db, table).values(
        user_id=user_id,
        date=day,
        co2_saved=co2_saved,
        missions_completed=1,
        points_earned=points_earned,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_id", "date"],
        set_={
            "co2_saved": table.c.co2_saved + stmt.excluded.co2_saved,
            "missions_completed": table.c.missions_completed + 1,
            "points_earned": table.c.points_earned + stmt.excluded.points_earned,
        },
    )
    await db.execute(stmt)


def format_co2(kg: float) -> str:
    """Human-readable CO2 amount: '2.5kg' below a tonne, '1.2t' from there up."""
    if kg >= 1000:
        return f"{kg / 1000:.1f}t"
    return f"{kg:.1f}kg"


@dataclass(frozen=True)
class LedgerSnapshot:
    """Read-only copy of a ledger row, safe to hand to callers."""

    total_co2_saved: float
    total_missions_completed: int
    total_missions_skipped: int
    current_streak: int
    longest_streak: int
    streak_last_date: date | None
    total_points: int
    level: int
    trees_planted: int

    @classmethod
    def of(cls, progress: UserProgress) -> LedgerSnapshot:
        return cls(
            total_co2_saved=progress.total_co2_saved,
            total_missions_completed=progress.total_missions_completed,
            total_missions_skipped=progress.total_missions_skipped,
            current_streak=progress.current_streak,
            longest_streak=progress.longest_streak,
            streak_last_date=progress.streak_last_date,
            total_points=progress.total_points,
            level=progress.level,
            trees_planted=progress.trees_planted,
        )
