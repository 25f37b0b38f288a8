"""Mission endpoints: today's assignment, complete, skip, history, catalog."""

from __future__ import annotations

import math
from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.auth.dependencies import get_current_user
from guardian.clock import get_today
from guardian.database import get_session
from guardian.db.models import User, UserMission
from guardian.dependencies import get_redis_dep
from guardian.exceptions import (
    AlreadyCompleted,
    AssignmentNotFound,
    InvalidTransition,
    NoMissionsAvailable,
)
from guardian.gamification.schemas import EarnedBadgeResponse
from guardian.missions.assigner import get_today_assignment
from guardian.missions.catalog import list_active_missions
from guardian.missions.schemas import (
    AssignmentResponse,
    CatalogResponse,
    CompleteResponse,
    HistoryResponse,
    LedgerSummary,
    MissionResponse,
    SkipResponse,
    TodayResponse,
)
from guardian.missions.service import complete_assignment, get_mission_history, skip_assignment
from guardian.progress.ledger import get_or_create_progress

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/missions", tags=["Missions"])


def _assignment_response(assignment: UserMission) -> AssignmentResponse:
    return AssignmentResponse(
        id=assignment.id,
        assigned_date=assignment.assigned_date,
        status=assignment.status,
        completed_at=assignment.completed_at,
        skipped_at=assignment.skipped_at,
        mission=MissionResponse.model_validate(assignment.mission),
    )


@router.get("/today", response_model=TodayResponse)
async def today_mission(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    today: date = Depends(get_today),
) -> TodayResponse:
    """Get (or create) today's assignment."""
    user_id = user.id
    try:
        assignment = await get_today_assignment(db, user_id, today)
    except NoMissionsAvailable as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    progress = await get_or_create_progress(db, user_id)
    return TodayResponse(
        assignment=_assignment_response(assignment),
        current_streak=progress.current_streak,
        level=progress.level,
        total_points=progress.total_points,
    )


@router.post("/{assignment_id}/complete", response_model=CompleteResponse)
async def complete_mission(
    assignment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    today: date = Depends(get_today),
) -> CompleteResponse:
    """Complete a pending assignment."""
    user_id = user.id
    try:
        result = await complete_assignment(db, redis, assignment_id, user_id, today)
    except AssignmentNotFound as e:
        raise HTTPException(status_code=404, detail="Mission not found") from e
    except AlreadyCompleted as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except InvalidTransition as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    p = result.progress
    return CompleteResponse(
        assignment_id=result.assignment_id,
        co2_saved=result.co2_saved,
        points_earned=result.points_earned,
        streak=result.streak,
        leveled_up=result.leveled_up,
        new_badges=[EarnedBadgeResponse.model_validate(b) for b in result.new_badges],
        progress=LedgerSummary(
            total_co2_saved=p.total_co2_saved,
            total_missions_completed=p.total_missions_completed,
            total_missions_skipped=p.total_missions_skipped,
            current_streak=p.current_streak,
            longest_streak=p.longest_streak,
            total_points=p.total_points,
            level=p.level,
            trees_planted=p.trees_planted,
        ),
    )


@router.post("/{assignment_id}/skip", response_model=SkipResponse)
async def skip_mission(
    assignment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
) -> SkipResponse:
    """Skip a pending assignment. The current streak resets to 0."""
    user_id = user.id
    try:
        result = await skip_assignment(db, redis, assignment_id, user_id)
    except AssignmentNotFound as e:
        raise HTTPException(status_code=404, detail="Mission not found") from e
    except InvalidTransition as e:
        raise HTTPException(status_code=400, detail="Mission already processed") from e

    return SkipResponse(
        assignment_id=result.assignment_id,
        streak_lost=result.streak_lost,
        previous_streak=result.previous_streak,
    )


@router.get("/history", response_model=HistoryResponse)
async def mission_history(
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> HistoryResponse:
    """Paginated assignment history, newest first."""
    try:
        rows, total = await get_mission_history(db, user.id, status=status, page=page, limit=limit)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return HistoryResponse(
        missions=[_assignment_response(r) for r in rows],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0,
    )


@router.get("/all", response_model=CatalogResponse)
async def mission_catalog(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> CatalogResponse:
    """Full active catalog grouped by category."""
    missions = [MissionResponse.model_validate(m) for m in await list_active_missions(db)]
    by_category: dict[str, list[MissionResponse]] = {}
    for m in missions:
        by_category.setdefault(m.category.value, []).append(m)
    return CatalogResponse(missions=missions, by_category=by_category, total=len(missions))
