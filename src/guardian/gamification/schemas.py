"""Pydantic response models for badge endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class EarnedBadgeResponse(BaseModel):
    """A badge awarded by the current request."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    name: str
    description: str
    icon: str
    points: int


class BadgeProgress(BaseModel):
    current: float
    target: int
    percentage: int


class BadgeResponse(BaseModel):
    id: int
    slug: str
    name: str
    description: str
    icon: str
    category: str
    points: int
    requirement_type: str
    requirement_value: int
    earned: bool = False
    earned_at: datetime | None = None
    progress: BadgeProgress | None = None


class BadgeSummary(BaseModel):
    total: int
    earned: int
    total_points: int


class BadgeListResponse(BaseModel):
    badges: list[BadgeResponse]
    by_category: dict[str, list[BadgeResponse]]
    summary: BadgeSummary


class EarnedBadgesResponse(BaseModel):
    badges: list[BadgeResponse]
    count: int
    total_points: int


class BadgeRarity(BaseModel):
    earners_count: int
    total_users: int
    percentage: int


class BadgeDetailResponse(BaseModel):
    badge: BadgeResponse
    rarity: BadgeRarity


class ShareData(BaseModel):
    title: str
    text: str
    url: str


class ShareResponse(BaseModel):
    success: bool = True
    share_data: ShareData


class EvaluateResponse(BaseModel):
    new_badges: list[EarnedBadgeResponse]
    count: int
