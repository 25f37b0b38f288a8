"""Daily assignment: idempotence, anti-repeat window, catalog exhaustion."""

from __future__ import annotations

import asyncio
import random
from datetime import date, timedelta

import pytest
from sqlalchemy import func, select, update

from guardian.database import get_session
from guardian.db.models import Mission, UserMission
from guardian.exceptions import NoMissionsAvailable
from guardian.missions.assigner import get_recent_mission_ids, get_today_assignment

TODAY = date(2026, 3, 10)


class TestTodayAssignment:

    @pytest.mark.asyncio
    async def test_same_day_is_idempotent(self, db_session, make_user):
        uid = (await make_user()).id
        first = await get_today_assignment(db_session, uid, TODAY, rng=random.Random(1))
        second = await get_today_assignment(db_session, uid, TODAY, rng=random.Random(2))
        assert first.id == second.id
        assert first.mission_id == second.mission_id

        count = (await db_session.execute(
            select(func.count(UserMission.id)).where(UserMission.user_id == uid)
        )).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_new_assignment_is_pending(self, db_session, make_user):
        uid = (await make_user()).id
        assignment = await get_today_assignment(db_session, uid, TODAY)
        assert assignment.status == "pending"
        assert assignment.assigned_date == TODAY
        assert assignment.mission.is_active

    @pytest.mark.asyncio
    async def test_next_day_gets_a_new_row(self, db_session, make_user):
        uid = (await make_user()).id
        a = await get_today_assignment(db_session, uid, TODAY)
        b = await get_today_assignment(db_session, uid, TODAY + timedelta(days=1))
        assert a.id != b.id

    @pytest.mark.asyncio
    async def test_no_repeat_within_window(self, db_session, make_user):
        """With 20 missions and a 7-day window, 8 consecutive days are all distinct."""
        uid = (await make_user()).id
        rng = random.Random(123)
        picked = []
        for offset in range(8):
            a = await get_today_assignment(db_session, uid, TODAY + timedelta(days=offset), rng=rng)
            picked.append(a.mission_id)
        assert len(set(picked)) == 8

    @pytest.mark.asyncio
    async def test_recent_window_is_inclusive(self, db_session, make_user):
        uid = (await make_user()).id
        old = await get_today_assignment(db_session, uid, TODAY - timedelta(days=7))
        older = await get_today_assignment(db_session, uid, TODAY - timedelta(days=8))
        recent = await get_recent_mission_ids(db_session, uid, TODAY, 7)
        assert older.assigned_date < TODAY - timedelta(days=7)
        assert recent == {old.mission_id}

    @pytest.mark.asyncio
    async def test_small_catalog_falls_back_to_repeats(self, db_session, make_user):
        """Only 5 active missions: days 6 and 7 must still get a mission."""
        ids = list((await db_session.execute(select(Mission.id).order_by(Mission.id).limit(5))).scalars())
        await db_session.execute(update(Mission).where(Mission.id.notin_(ids)).values(is_active=False))
        await db_session.commit()

        uid = (await make_user()).id
        rng = random.Random(5)
        picked = []
        for offset in range(7):
            a = await get_today_assignment(db_session, uid, TODAY + timedelta(days=offset), rng=rng)
            picked.append(a.mission_id)

        assert len(picked) == 7
        assert set(picked) <= set(ids)
        assert len(set(picked[:5])) == 5

    @pytest.mark.asyncio
    async def test_empty_catalog_raises(self, db_session, make_user):
        await db_session.execute(update(Mission).values(is_active=False))
        await db_session.commit()
        uid = (await make_user()).id
        with pytest.raises(NoMissionsAvailable):
            await get_today_assignment(db_session, uid, TODAY)

    @pytest.mark.asyncio
    async def test_existing_assignment_survives_deactivation(self, db_session, make_user):
        uid = (await make_user()).id
        a = await get_today_assignment(db_session, uid, TODAY)
        await db_session.execute(update(Mission).values(is_active=False))
        await db_session.commit()
        again = await get_today_assignment(db_session, uid, TODAY)
        assert again.id == a.id


class TestInsertRace:

    @pytest.mark.asyncio
    async def test_losing_insert_returns_winners_row(self, db_session, make_user, monkeypatch):
        """A request that read 'no row' before another request inserted gets that row back."""
        import guardian.missions.assigner as assigner

        uid = (await make_user()).id
        winner = await get_today_assignment(db_session, uid, TODAY)
        winner_id, winner_mission = winner.id, winner.mission_id

        real_lookup = assigner.get_assignment_for_day
        calls = {"n": 0}

        async def _stale_first_read(db, user_id, day):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return await real_lookup(db, user_id, day)

        monkeypatch.setattr(assigner, "get_assignment_for_day", _stale_first_read)
        loser = await get_today_assignment(db_session, uid, TODAY, rng=random.Random(99))

        assert calls["n"] == 2
        assert loser.id == winner_id
        assert loser.mission_id == winner_mission
        count = (await db_session.execute(
            select(func.count(UserMission.id)).where(UserMission.user_id == uid)
        )).scalar_one()
        assert count == 1

    @pytest.mark.asyncio
    async def test_concurrent_sessions_share_one_row(self, db_session, make_user):
        uid = (await make_user()).id

        async def _assign_in_own_session() -> str:
            sessions = get_session()
            session = await sessions.__anext__()
            try:
                return (await get_today_assignment(session, uid, TODAY)).id
            finally:
                await sessions.aclose()

        ids = await asyncio.gather(*(_assign_in_own_session() for _ in range(3)))

        assert len(set(ids)) == 1
        count = (await db_session.execute(
            select(func.count(UserMission.id)).where(UserMission.user_id == uid)
        )).scalar_one()
        assert count == 1
