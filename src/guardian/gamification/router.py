"""Badge endpoints: catalog with progress, earned list, detail, share, evaluate."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.auth.dependencies import get_current_user
from guardian.database import get_session
from guardian.db.models import User
from guardian.dependencies import get_redis_dep
from guardian.exceptions import BadgeNotEarned, BadgeNotFound
from guardian.gamification.badge_queries import (
    build_share_payload,
    get_badge_detail,
    get_earned_badges,
    list_badges_with_progress,
)
from guardian.gamification.badge_service import evaluate_badges
from guardian.gamification.schemas import (
    BadgeDetailResponse,
    BadgeListResponse,
    EarnedBadgeResponse,
    EarnedBadgesResponse,
    EvaluateResponse,
    ShareData,
    ShareResponse,
)

router = APIRouter(prefix="/api/v1/badges", tags=["Badges"])


@router.get("", response_model=BadgeListResponse)
async def list_badges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BadgeListResponse:
    """All active badges with the caller's earned state and progress."""
    return BadgeListResponse.model_validate(await list_badges_with_progress(db, user.id))


@router.get("/earned", response_model=EarnedBadgesResponse)
async def earned_badges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> EarnedBadgesResponse:
    return EarnedBadgesResponse.model_validate(await get_earned_badges(db, user.id))


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
) -> EvaluateResponse:
    """Re-run the threshold badge scan against the stored ledger."""
    awarded = await evaluate_badges(db, redis, user.id)
    return EvaluateResponse(
        new_badges=[EarnedBadgeResponse.model_validate(b) for b in awarded],
        count=len(awarded),
    )


@router.get("/{slug}", response_model=BadgeDetailResponse)
async def badge_detail(
    slug: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> BadgeDetailResponse:
    try:
        detail = await get_badge_detail(db, user.id, slug)
    except BadgeNotFound as e:
        raise HTTPException(status_code=404, detail="Badge not found") from e
    return BadgeDetailResponse.model_validate(detail)


@router.post("/{slug}/share", response_model=ShareResponse)
async def share_badge(
    slug: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ShareResponse:
    """Share text for a badge the caller has earned."""
    try:
        payload = await build_share_payload(db, user.id, slug)
    except BadgeNotFound as e:
        raise HTTPException(status_code=404, detail="Badge not found") from e
    except BadgeNotEarned as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    return ShareResponse(share_data=ShareData(**payload))
