"""Mission selection tests (pure, no database)."""

import random

import pytest

from guardian.db.models import Mission
from guardian.exceptions import NoMissionsAvailable
from guardian.missions.assigner import pick_mission


def _missions(n: int) -> list[Mission]:
    return [Mission(id=i, slug=f"m{i}", title=f"M{i}", description="", category="energy",
                    co2_impact=1.0, points=10) for i in range(1, n + 1)]


class TestPickMission:

    def test_empty_catalog_raises(self):
        with pytest.raises(NoMissionsAvailable):
            pick_mission([], set())

    def test_avoids_recent_missions(self):
        missions = _missions(10)
        recent = {1, 2, 3, 4, 5, 6, 7, 8, 9}
        rng = random.Random(42)
        for _ in range(50):
            assert pick_mission(missions, recent, rng).id == 10

    def test_falls_back_to_whole_catalog(self):
        """When every mission was assigned recently, any mission may repeat."""
        missions = _missions(5)
        recent = {m.id for m in missions}
        picked = pick_mission(missions, recent, random.Random(1))
        assert picked in missions

    def test_uniform_over_fresh_missions(self):
        missions = _missions(4)
        rng = random.Random(7)
        seen = {pick_mission(missions, {1}, rng).id for _ in range(200)}
        assert seen == {2, 3, 4}
