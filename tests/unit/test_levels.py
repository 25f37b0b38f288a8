"""Level curve tests: level = floor(sqrt(points / 100)) + 1."""

import pytest

from guardian.progress.levels import compute_level_progress, level_from_points, points_for_next_level


class TestLevelFromPoints:

    @pytest.mark.parametrize(
        ("points", "level"),
        [(0, 1), (99, 1), (100, 2), (399, 2), (400, 3), (899, 3), (900, 4), (10_000, 11)],
    )
    def test_boundaries(self, points, level):
        assert level_from_points(points) == level

    def test_negative_points_clamp_to_level_1(self):
        assert level_from_points(-50) == 1

    def test_non_decreasing(self):
        levels = [level_from_points(p) for p in range(0, 5000, 7)]
        assert levels == sorted(levels)


class TestPointsForNextLevel:

    def test_square_times_hundred(self):
        assert points_for_next_level(1) == 100
        assert points_for_next_level(2) == 400
        assert points_for_next_level(3) == 900

    def test_level_zero_floor(self):
        assert points_for_next_level(0) == 0

    def test_rollover_matches_level_curve(self):
        for level in range(1, 20):
            assert level_from_points(points_for_next_level(level)) == level + 1
            assert level_from_points(points_for_next_level(level) - 1) == level


class TestLevelProgress:

    def test_fresh_account(self):
        result = compute_level_progress(0)
        assert result["level"] == 1
        assert result["current"] == 0
        assert result["needed"] == 100
        assert result["percentage"] == 0
        assert result["next_level"] == 2
        assert result["next_level_at"] == 100

    def test_midway_through_level_2(self):
        result = compute_level_progress(150)
        assert result["level"] == 2
        assert result["current"] == 50  # 150 - 100
        assert result["needed"] == 300  # 400 - 100
        assert result["percentage"] == 17
        assert result["next_level_at"] == 400

    def test_exactly_at_boundary(self):
        result = compute_level_progress(400)
        assert result["level"] == 3
        assert result["current"] == 0
        assert result["needed"] == 500

    def test_explicit_level_is_respected(self):
        result = compute_level_progress(150, level=2)
        assert result["level"] == 2
        assert result["next_level"] == 3
