"""Daily streak transitions.

A completion on day D:
  - first ever completion          -> 1
  - last advance was D-1           -> current + 1
  - last advance was D             -> unchanged (no double counting)
  - gap of two or more days        -> 1 (this completion starts a new streak)

A skip always drops the streak to 0; it never starts a new one.
"""

from __future__ import annotations

from datetime import date
from enum import Enum

from guardian.clock import is_same_day, is_yesterday


class StreakEvent(str, Enum):
    STARTED = "streak_started"
    EXTENDED = "streak_extended"
    UNCHANGED = "streak_unchanged"
    RESET = "streak_reset"


def next_streak(streak_last_date: date | None, current_streak: int, today: date) -> int:
    """Streak value after a completion on `today`."""
    if streak_last_date is None:
        return 1
    if is_yesterday(streak_last_date, today):
        return current_streak + 1
    if is_same_day(streak_last_date, today):
        return current_streak
    return 1


def streak_event(streak_last_date: date | None, today: date) -> StreakEvent:
    """Which of the completion rules above applies on `today`."""
    if streak_last_date is None:
        return StreakEvent.STARTED
    if is_yesterday(streak_last_date, today):
        return StreakEvent.EXTENDED
    if is_same_day(streak_last_date, today):
        return StreakEvent.UNCHANGED
    return StreakEvent.RESET


def longest_after(longest_streak: int, new_streak: int) -> int:
    return max(longest_streak, new_streak)


def streak_after_skip() -> int:
    return 0
