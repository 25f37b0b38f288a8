"""Read-side progress views: summary, period stats, leaderboard and milestones.

Nothing here mutates the ledger.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.clock import period_start
from guardian.db.models import Badge, Mission, ProgressLog, User, UserBadge, UserMission, UserProgress
from guardian.progress.ledger import format_co2, get_progress
from guardian.progress.levels import compute_level_progress, points_for_next_level
from guardian.users.privacy import display_name, mask_email

# kg CO2 per unit of each everyday equivalent
CO2_PER_TREE_YEAR = 21.0
CO2_PER_CAR_MILE = 0.411
CO2_PER_FLIGHT_MILE = 0.255
CO2_PER_SMARTPHONE_CHARGE = 0.008

LEADERBOARD_FIELDS = {
    "co2": UserProgress.total_co2_saved,
    "points": UserProgress.total_points,
    "streak": UserProgress.longest_streak,
    "missions": UserProgress.total_missions_completed,
}

# (name, target, stat, icon)
MILESTONES: list[tuple[str, int, str, str]] = [
    ("First Mission", 1, "missions", "\U0001f331"),
    ("10 Missions", 10, "missions", "\U0001f4cb"),
    ("50 Missions", 50, "missions", "\U0001f3af"),
    ("100 Missions", 100, "missions", "⭐"),
    ("10kg CO2 Saved", 10, "co2", "✂️"),
    ("100kg CO2 Saved", 100, "co2", "\U0001f333"),
    ("500kg CO2 Saved", 500, "co2", "\U0001f3c6"),
    ("7-Day Streak", 7, "streak", "\U0001f525"),
    ("30-Day Streak", 30, "streak", "⚡"),
    ("Level 5", 5, "level", "\U0001f396️"),
    ("Level 10", 10, "level", "\U0001f451"),
]


def completion_rate(completed: int, skipped: int) -> int:
    """Percentage of resolved assignments that were completed (0 when none resolved)."""
    resolved = completed + skipped
    if resolved == 0:
        return 0
    return round(completed / resolved * 100)


def co2_equivalents(co2_saved: float) -> dict[str, int]:
    return {
        "trees_absorbed": round(co2_saved / CO2_PER_TREE_YEAR),
        "car_miles": round(co2_saved / CO2_PER_CAR_MILE),
        "flight_miles": round(co2_saved / CO2_PER_FLIGHT_MILE),
        "smartphone_charges": round(co2_saved / CO2_PER_SMARTPHONE_CHARGE),
    }


async def get_progress_summary(db: AsyncSession, user_id: int) -> dict | None:
    """Ledger totals with completion rate and level progress. None if no ledger row."""
    progress = await get_progress(db, user_id)
    if progress is None:
        return None
    return {
        "total_co2_saved": progress.total_co2_saved,
        "total_co2_saved_formatted": format_co2(progress.total_co2_saved),
        "total_missions_completed": progress.total_missions_completed,
        "total_missions_skipped": progress.total_missions_skipped,
        "completion_rate": completion_rate(
            progress.total_missions_completed, progress.total_missions_skipped,
        ),
        "current_streak": progress.current_streak,
        "longest_streak": progress.longest_streak,
        "streak_last_date": progress.streak_last_date,
        "level": progress.level,
        "total_points": progress.total_points,
        "trees_planted": progress.trees_planted,
        "level_progress": compute_level_progress(progress.total_points, progress.level),
    }


async def get_period_stats(db: AsyncSession, user_id: int, period: str, today: date) -> dict:
    """Daily log rows, category breakdown and totals for week/month/year/all.

    Raises ValueError for an unknown period.
    """
    since = period_start(period, today)

    log_filters = [ProgressLog.user_id == user_id]
    if since is not None:
        log_filters.append(ProgressLog.log_date >= since)

    daily = await db.execute(
        select(ProgressLog).where(*log_filters).order_by(ProgressLog.log_date.desc())
    )
    daily_rows = list(daily.scalars())

    totals = (await db.execute(
        select(
            func.coalesce(func.sum(ProgressLog.co2_saved), 0.0),
            func.coalesce(func.sum(ProgressLog.missions_completed), 0),
            func.coalesce(func.sum(ProgressLog.points_earned), 0),
        ).where(*log_filters)
    )).one()

    category_filters = [UserMission.user_id == user_id, UserMission.status == "completed"]
    if since is not None:
        category_filters.append(UserMission.assigned_date >= since)
    co2_sum = func.sum(Mission.co2_impact).label("co2_saved")
    categories = await db.execute(
        select(
            Mission.category,
            func.count(UserMission.id).label("count"),
            co2_sum,
            func.sum(Mission.points).label("points"),
        )
        .select_from(UserMission)
        .join(Mission, UserMission.mission_id == Mission.id)
        .where(*category_filters)
        .group_by(Mission.category)
        .order_by(co2_sum.desc())
    )

    progress = await get_progress(db, user_id)
    co2_saved = float(totals[0] or 0)

    return {
        "period": period,
        "summary": {
            "total_co2_saved": co2_saved,
            "total_co2_saved_formatted": format_co2(co2_saved),
            "total_missions_completed": int(totals[1] or 0),
            "total_points_earned": int(totals[2] or 0),
        },
        "equivalents": co2_equivalents(co2_saved),
        "daily_stats": [
            {
                "date": row.log_date,
                "co2_saved": row.co2_saved,
                "missions_completed": row.missions_completed,
                "points_earned": row.points_earned,
            }
            for row in daily_rows
        ],
        "category_breakdown": [
            {
                "category": row.category,
                "count": int(row.count),
                "co2_saved": float(row.co2_saved or 0),
                "points": int(row.points or 0),
            }
            for row in categories
        ],
        "streaks": {
            "current": progress.current_streak if progress else 0,
            "longest": progress.longest_streak if progress else 0,
            "last_date": progress.streak_last_date if progress else None,
        },
    }


async def get_leaderboard(db: AsyncSession, kind: str, limit: int, user_id: int) -> dict:
    """Top users by co2 | points | streak | missions, plus the caller's rank.

    Streak ranks by longest streak. Raises ValueError for an unknown kind.
    """
    column = LEADERBOARD_FIELDS.get(kind)
    if column is None:
        raise ValueError(f"Unknown leaderboard type: {kind}")

    result = await db.execute(
        select(User, UserProgress)
        .join(UserProgress, UserProgress.user_id == User.id)
        .order_by(column.desc(), User.id)
        .limit(limit)
    )
    entries = []
    for index, row in enumerate(result, start=1):
        user, progress = row.User, row.UserProgress
        entries.append({
            "rank": index,
            "name": display_name(user.name),
            "email": mask_email(user.email),
            "co2_saved": progress.total_co2_saved,
            "co2_saved_formatted": format_co2(progress.total_co2_saved),
            "points": progress.total_points,
            "longest_streak": progress.longest_streak,
            "missions_completed": progress.total_missions_completed,
            "level": progress.level,
            "is_current_user": user.id == user_id,
        })

    own_value = (await db.execute(
        select(column).where(UserProgress.user_id == user_id)
    )).scalar_one_or_none() or 0
    ahead = (await db.execute(
        select(func.count()).select_from(UserProgress).where(column > own_value)
    )).scalar_one()
    total_users = (await db.execute(select(func.count(User.id)))).scalar_one()

    rank = int(ahead) + 1
    percentile = round((1 - rank / total_users) * 100) if total_users else 0
    return {
        "type": kind,
        "leaderboard": entries,
        "current_user": {
            "rank": rank,
            "total_users": int(total_users),
            "percentile": percentile,
        },
    }


async def get_achievements(db: AsyncSession, user_id: int) -> dict:
    """Earned badges plus the fixed milestone ladder."""
    progress = await get_progress(db, user_id)
    earned = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.desc(), UserBadge.id.desc())
    )
    earned_rows = list(earned.unique().scalars())
    total_badges = (await db.execute(
        select(func.count(Badge.id)).where(Badge.is_active.is_(True))
    )).scalar_one()

    stats = {
        "missions": progress.total_missions_completed if progress else 0,
        "co2": progress.total_co2_saved if progress else 0.0,
        "streak": progress.longest_streak if progress else 0,
        "level": progress.level if progress else 1,
    }
    level = stats["level"]

    return {
        "badges": {
            "earned": [
                {
                    "id": ub.badge.id,
                    "slug": ub.badge.slug,
                    "name": ub.badge.name,
                    "description": ub.badge.description,
                    "icon": ub.badge.icon,
                    "category": ub.badge.category,
                    "points": ub.badge.points,
                    "earned_at": ub.earned_at,
                }
                for ub in earned_rows
            ],
            "total": int(total_badges),
            "percentage": round(len(earned_rows) / total_badges * 100) if total_badges else 0,
        },
        "milestones": [
            {
                "name": name,
                "target": target,
                "current": stats[stat],
                "type": stat,
                "icon": icon,
                "completed": stats[stat] >= target,
                "progress": min(100, round(stats[stat] / target * 100)),
            }
            for name, target, stat, icon in MILESTONES
        ],
        "level": {
            "current": level,
            "points": progress.total_points if progress else 0,
            "next_level_at": points_for_next_level(level),
        },
    }
