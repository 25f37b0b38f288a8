"""Pydantic response models for progress endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class LevelProgress(BaseModel):
    level: int
    current: int
    needed: int
    percentage: int
    next_level: int
    next_level_at: int


class ProgressResponse(BaseModel):
    total_co2_saved: float
    total_co2_saved_formatted: str
    total_missions_completed: int
    total_missions_skipped: int
    completion_rate: int
    current_streak: int
    longest_streak: int
    streak_last_date: date | None = None
    level: int
    total_points: int
    trees_planted: int
    level_progress: LevelProgress


# --- Period stats ---


class PeriodSummary(BaseModel):
    total_co2_saved: float
    total_co2_saved_formatted: str
    total_missions_completed: int
    total_points_earned: int


class Equivalents(BaseModel):
    trees_absorbed: int
    car_miles: int
    flight_miles: int
    smartphone_charges: int


class DailyStat(BaseModel):
    date: date
    co2_saved: float
    missions_completed: int
    points_earned: int


class CategoryStat(BaseModel):
    category: str
    count: int
    co2_saved: float
    points: int


class StreakStats(BaseModel):
    current: int
    longest: int
    last_date: date | None = None


class StatsResponse(BaseModel):
    period: str
    summary: PeriodSummary
    equivalents: Equivalents
    daily_stats: list[DailyStat]
    category_breakdown: list[CategoryStat]
    streaks: StreakStats


# --- Leaderboard ---


class LeaderboardEntry(BaseModel):
    rank: int
    name: str
    email: str
    co2_saved: float
    co2_saved_formatted: str
    points: int
    longest_streak: int
    missions_completed: int
    level: int
    is_current_user: bool


class LeaderboardPosition(BaseModel):
    rank: int
    total_users: int
    percentile: int


class LeaderboardResponse(BaseModel):
    type: str
    leaderboard: list[LeaderboardEntry]
    current_user: LeaderboardPosition


# --- Achievements ---


class AchievementBadge(BaseModel):
    id: int
    slug: str
    name: str
    description: str
    icon: str
    category: str
    points: int
    earned_at: datetime


class AchievementBadges(BaseModel):
    earned: list[AchievementBadge]
    total: int
    percentage: int


class Milestone(BaseModel):
    name: str
    target: int
    current: float
    type: str
    icon: str
    completed: bool
    progress: int


class AchievementLevel(BaseModel):
    current: int
    points: int
    next_level_at: int


class AchievementsResponse(BaseModel):
    badges: AchievementBadges
    milestones: list[Milestone]
    level: AchievementLevel
