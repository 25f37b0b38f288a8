"""Pydantic request/response models for mission endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from guardian.gamification.schemas import EarnedBadgeResponse
from guardian.missions.catalog import Difficulty, MissionCategory


class MissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    title: str
    description: str
    category: MissionCategory
    difficulty: Difficulty
    co2_impact: float
    points: int
    icon: str | None = None
    tips: str | None = None


class AssignmentResponse(BaseModel):
    id: str
    assigned_date: date
    status: str
    completed_at: datetime | None = None
    skipped_at: datetime | None = None
    mission: MissionResponse


class TodayResponse(BaseModel):
    assignment: AssignmentResponse
    current_streak: int
    level: int
    total_points: int


class LedgerSummary(BaseModel):
    total_co2_saved: float
    total_missions_completed: int
    total_missions_skipped: int
    current_streak: int
    longest_streak: int
    total_points: int
    level: int
    trees_planted: int


class CompleteResponse(BaseModel):
    success: bool = True
    assignment_id: str
    co2_saved: float
    points_earned: int
    streak: int
    leveled_up: bool
    new_badges: list[EarnedBadgeResponse] = []
    progress: LedgerSummary


class SkipResponse(BaseModel):
    success: bool = True
    assignment_id: str
    streak_lost: bool
    previous_streak: int


class HistoryResponse(BaseModel):
    missions: list[AssignmentResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class CatalogResponse(BaseModel):
    missions: list[MissionResponse]
    by_category: dict[str, list[MissionResponse]]
    total: int
