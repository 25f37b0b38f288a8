"""Referral endpoints: own referral info, stats, share tracking and public code validation."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.auth.dependencies import get_current_user
from guardian.clock import get_today
from guardian.database import get_session
from guardian.db.models import User
from guardian.dependencies import get_redis_dep
from guardian.referrals.schemas import (
    ReferralInfoResponse,
    ReferralStatsResponse,
    ReferrerPreview,
    ShareRequest,
    ShareResponse,
    ValidateRequest,
    ValidateResponse,
)
from guardian.referrals.service import (
    get_referral_info,
    get_referral_stats,
    track_referral_share,
    validate_referral_code,
)

router = APIRouter(prefix="/api/v1/referrals", tags=["Referrals"])


@router.get("", response_model=ReferralInfoResponse)
async def referral_info(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ReferralInfoResponse:
    """Referral code, share link, totals and reward tiers."""
    return ReferralInfoResponse.model_validate(await get_referral_info(db, user))


@router.get("/stats", response_model=ReferralStatsResponse)
async def referral_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    today: date = Depends(get_today),
) -> ReferralStatsResponse:
    return ReferralStatsResponse.model_validate(await get_referral_stats(db, user.id, today))


@router.post("/share", response_model=ShareResponse)
async def share_link(
    body: ShareRequest,
    user: User = Depends(get_current_user),
    redis: object = Depends(get_redis_dep),
) -> ShareResponse:
    await track_referral_share(redis, user.id, body.platform)
    return ShareResponse()


@router.post("/validate", response_model=ValidateResponse)
async def validate_code(
    body: ValidateRequest,
    db: AsyncSession = Depends(get_session),
) -> ValidateResponse:
    """Public: check a code before signup and preview its owner."""
    preview = await validate_referral_code(db, body.code)
    if preview is None:
        raise HTTPException(status_code=404, detail="Invalid referral code")
    return ValidateResponse(
        referrer=ReferrerPreview(
            name=preview["name"],
            trees_planted=preview["trees_planted"],
            co2_saved=preview["co2_saved"],
        ),
        message=preview["message"],
    )
