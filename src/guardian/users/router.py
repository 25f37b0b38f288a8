"""Account endpoints: signup, profile, settings, deletion and the premium hook."""

from __future__ import annotations

from datetime import date

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from guardian.auth.dependencies import get_current_user
from guardian.auth.jwt import create_access_token
from guardian.clock import get_today
from guardian.database import get_session
from guardian.db.models import User, UserBadge
from guardian.dependencies import get_redis_dep
from guardian.gamification.badge_service import grant_premium
from guardian.gamification.schemas import EarnedBadgeResponse
from guardian.missions.schemas import LedgerSummary
from guardian.progress.ledger import get_progress
from guardian.referrals.queries import count_completed_referrals
from guardian.users.schemas import (
    PremiumResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    SettingsResponse,
    SettingsUpdateRequest,
    SignupRequest,
    SignupResponse,
    UserResponse,
    UserStats,
)
from guardian.users.service import create_user, delete_user, update_profile, update_settings

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


@router.post("", response_model=SignupResponse, status_code=201)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    today: date = Depends(get_today),
) -> SignupResponse:
    """Create an account and run the signup hooks (ledger, early-adopter badge, referral, first mission)."""
    try:
        result = await create_user(
            db, redis, body.email, name=body.name, referral_code=body.referral_code, today=today,
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    user = result.user
    logger.info("user_signed_up", user_id=user.id, referral=result.referral.status.value if result.referral else None)
    return SignupResponse(
        user=UserResponse.model_validate(user),
        access_token=create_access_token(user.id, user.email),
        badges=[EarnedBadgeResponse.model_validate(b) for b in result.badges],
        referral_status=result.referral.status.value if result.referral else None,
        first_assignment_id=result.first_assignment_id,
    )


@router.get("/me", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Own account, ledger totals, badge and referral counts."""
    progress = await get_progress(db, user.id)
    badges_earned = (await db.execute(
        select(func.count(UserBadge.id)).where(UserBadge.user_id == user.id)
    )).scalar_one()
    return ProfileResponse(
        user=UserResponse.model_validate(user),
        progress=LedgerSummary(
            total_co2_saved=progress.total_co2_saved,
            total_missions_completed=progress.total_missions_completed,
            total_missions_skipped=progress.total_missions_skipped,
            current_streak=progress.current_streak,
            longest_streak=progress.longest_streak,
            total_points=progress.total_points,
            level=progress.level,
            trees_planted=progress.trees_planted,
        ) if progress else None,
        stats=UserStats(
            badges_earned=int(badges_earned),
            friends_referred=await count_completed_referrals(db, user.id),
        ),
    )


@router.patch("/me", response_model=UserResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Update profile (name, zip_code, country, timezone)."""
    try:
        user = await update_profile(
            db,
            user,
            name=body.name,
            zip_code=body.zip_code,
            country=body.country,
            timezone=body.timezone,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return UserResponse.model_validate(user)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@router.get("/me/settings", response_model=SettingsResponse)
async def get_my_settings(user: User = Depends(get_current_user)) -> SettingsResponse:
    return SettingsResponse.model_validate(user)


@router.patch("/me/settings", response_model=SettingsResponse)
async def update_my_settings(
    body: SettingsUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> SettingsResponse:
    """Update notification and display preferences."""
    try:
        user = await update_settings(
            db,
            user,
            notification_email=body.notification_email,
            notification_push=body.notification_push,
            notification_time=body.notification_time,
            theme=body.theme,
            units=body.units,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    await db.commit()
    return SettingsResponse.model_validate(user)


@router.delete("/me", status_code=204)
async def delete_account(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Delete the account and all of its progress, badges and referrals."""
    user_id = user.id
    await delete_user(db, user_id)
    logger.info("user_deleted", user_id=user_id)
    return Response(status_code=204)


@router.post("/me/premium", response_model=PremiumResponse)
async def activate_premium(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
) -> PremiumResponse:
    """Subscription hook: mark the account premium and grant premium badges."""
    awarded = await grant_premium(db, redis, user)
    return PremiumResponse(
        is_premium=True,
        new_badges=[EarnedBadgeResponse.model_validate(b) for b in awarded],
    )
