"""Pydantic request/response models for referral endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from guardian.referrals.service import SharePlatform


class ReferralTotals(BaseModel):
    total_referrals: int
    completed_referrals: int
    pending_referrals: int
    trees_planted: int


class RecentReferral(BaseModel):
    id: int
    name: str
    email: str
    status: str
    created_at: datetime | None = None
    completed_at: datetime | None = None


class RewardMilestone(BaseModel):
    referrals: int
    reward: str
    icon: str


class PerReferralReward(BaseModel):
    trees: int
    description: str


class RewardTiers(BaseModel):
    per_referral: PerReferralReward
    milestones: list[RewardMilestone]


class ReferralInfoResponse(BaseModel):
    referral_code: str
    referral_link: str
    stats: ReferralTotals
    recent_referrals: list[RecentReferral]
    rewards: RewardTiers


class MonthlyCount(BaseModel):
    month: str
    count: int


class ReferredImpact(BaseModel):
    total_co2_saved: float
    total_missions_completed: int


class ReferralStatsResponse(BaseModel):
    monthly_stats: list[MonthlyCount]
    referred_impact: ReferredImpact


class ValidateRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)


class ShareRequest(BaseModel):
    platform: SharePlatform


class ShareResponse(BaseModel):
    success: bool = True
    message: str = "Share tracked"


class ReferrerPreview(BaseModel):
    name: str
    trees_planted: int
    co2_saved: float


class ValidateResponse(BaseModel):
    valid: bool = True
    referrer: ReferrerPreview
    message: str
