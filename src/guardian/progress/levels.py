"""Level curve and level-progress computation.

level = floor(sqrt(points / 100)) + 1, so level L spans the points range
[(L-1)^2 * 100, L^2 * 100).
"""

from __future__ import annotations

import math

POINTS_PER_LEVEL_UNIT = 100


def level_from_points(total_points: int) -> int:
    """Level for a points total. Non-decreasing in points, never below 1."""
    if total_points <= 0:
        return 1
    # isqrt keeps exact boundaries (400 -> 3, 399 -> 2) without float rounding
    return math.isqrt(total_points // POINTS_PER_LEVEL_UNIT) + 1


def points_for_next_level(level: int) -> int:
    """Points at which `level` rolls over into level + 1 (level^2 * 100)."""
    return level * level * POINTS_PER_LEVEL_UNIT


def compute_level_progress(total_points: int, level: int | None = None) -> dict:
    """Progress-bar data for a points total.

    The ceiling is computed from the current level forward, the floor from
    level - 1:
      needed  = points_for_next_level(level) - points_for_next_level(level - 1)
      current = total_points - points_for_next_level(level - 1)
    """
    if level is None:
        level = level_from_points(total_points)

    next_level_points = points_for_next_level(level)
    current_level_points = points_for_next_level(level - 1)
    points_in_level = total_points - current_level_points
    points_needed = next_level_points - current_level_points

    return {
        "level": level,
        "current": points_in_level,
        "needed": points_needed,
        "percentage": round(points_in_level / points_needed * 100) if points_needed else 100,
        "next_level": level + 1,
        "next_level_at": next_level_points,
    }
