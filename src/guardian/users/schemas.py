"""Pydantic request/response models for account endpoints."""

from __future__ import annotations

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from guardian.gamification.schemas import EarnedBadgeResponse
from guardian.missions.schemas import LedgerSummary

_ZIP_RE = re.compile(r"^[A-Za-z0-9\s\-]+$")

Theme = Literal["light", "dark", "system"]
Units = Literal["metric", "imperial"]


class SignupRequest(BaseModel):
    email: EmailStr
    name: str | None = Field(None, max_length=128)
    referral_code: str | None = Field(None, max_length=32)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class ProfileUpdateRequest(BaseModel):
    """Partial profile update. Omitted fields are left alone."""

    name: str | None = Field(None, min_length=1, max_length=100)
    zip_code: str | None = Field(None, min_length=3, max_length=10)
    country: str | None = Field(None, min_length=2, max_length=2)
    timezone: str | None = Field(None, min_length=1, max_length=50)

    @field_validator("zip_code")
    @classmethod
    def zip_code_charset(cls, v: str | None) -> str | None:
        if v is not None and not _ZIP_RE.match(v):
            raise ValueError("Invalid zip code format")
        return v

    @field_validator("country")
    @classmethod
    def country_letters(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.isalpha() or not v.isascii():
            raise ValueError("Country must be a two-letter code")
        return v.upper()


class SettingsUpdateRequest(BaseModel):
    notification_email: bool | None = None
    notification_push: bool | None = None
    notification_time: str | None = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    theme: Theme | None = None
    units: Units | None = None


class SettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    notification_email: bool
    notification_push: bool
    notification_time: str
    theme: str
    units: str


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    zip_code: str | None = None
    country: str | None = None
    timezone: str | None = None
    referral_code: str
    is_premium: bool
    created_at: datetime | None = None


class UserStats(BaseModel):
    badges_earned: int
    friends_referred: int


class ProfileResponse(BaseModel):
    user: UserResponse
    progress: LedgerSummary | None = None
    stats: UserStats


class SignupResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    badges: list[EarnedBadgeResponse] = []
    referral_status: str | None = None
    first_assignment_id: str | None = None


class PremiumResponse(BaseModel):
    is_premium: bool
    new_badges: list[EarnedBadgeResponse]
