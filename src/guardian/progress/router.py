"""Progress endpoints: ledger summary, period stats, leaderboard, achievements, level lookup."""

from __future__ import annotations

from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.auth.dependencies import get_current_user
from guardian.clock import get_today
from guardian.config import get_settings
from guardian.database import get_session
from guardian.db.models import User
from guardian.progress.levels import compute_level_progress
from guardian.progress.schemas import (
    AchievementsResponse,
    LeaderboardResponse,
    LevelProgress,
    ProgressResponse,
    StatsResponse,
)
from guardian.progress.stats_service import (
    get_achievements,
    get_leaderboard,
    get_period_stats,
    get_progress_summary,
)

router = APIRouter(prefix="/api/v1/progress", tags=["Progress"])


@router.get("", response_model=ProgressResponse)
async def my_progress(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProgressResponse:
    summary = await get_progress_summary(db, user.id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Progress not found")
    return ProgressResponse.model_validate(summary)


@router.get("/stats", response_model=StatsResponse)
async def my_stats(
    period: Literal["week", "month", "year", "all"] = Query("month"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    today: date = Depends(get_today),
) -> StatsResponse:
    """Totals, daily log and category breakdown for a trailing period."""
    return StatsResponse.model_validate(await get_period_stats(db, user.id, period, today))


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    type: Literal["co2", "points", "streak", "missions"] = Query("co2"),  # noqa: A002
    limit: int = Query(20, ge=1),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> LeaderboardResponse:
    """Top users by the chosen metric plus the caller's rank."""
    limit = min(limit, get_settings().leaderboard_max_limit)
    return LeaderboardResponse.model_validate(await get_leaderboard(db, type, limit, user.id))


@router.get("/achievements", response_model=AchievementsResponse)
async def achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> AchievementsResponse:
    return AchievementsResponse.model_validate(await get_achievements(db, user.id))


@router.get("/levels/{points}", response_model=LevelProgress)
async def level_for_points(points: int) -> LevelProgress:
    """Level and progress-bar data for an arbitrary points total."""
    if points < 0:
        raise HTTPException(status_code=400, detail="Points must be non-negative")
    return LevelProgress.model_validate(compute_level_progress(points))
