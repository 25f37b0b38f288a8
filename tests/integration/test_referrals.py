"""Referral reward hook and referral read models."""

from __future__ import annotations

import json
from datetime import date

import pytest
from sqlalchemy import func, select

from guardian.db.models import Referral, User
from guardian.gamification.badge_service import get_earned_badge_ids, get_badge_by_slug
from guardian.progress.ledger import get_progress
from guardian.referrals.service import (
    ReferralStatus,
    SharePlatform,
    apply_referral,
    get_referral_info,
    get_referral_stats,
    track_referral_share,
    validate_referral_code,
)

TODAY = date(2026, 3, 10)


class _RecordingRedis:
    def __init__(self) -> None:
        self.published: list[tuple[str, dict]] = []

    async def publish(self, channel: str, message: str) -> int:
        self.published.append((channel, json.loads(message)))
        return 1


async def _referral_count(db, referrer_id: int) -> int:
    result = await db.execute(select(func.count(Referral.id)).where(Referral.referrer_id == referrer_id))
    return result.scalar_one()


class TestApplyReferral:

    @pytest.mark.asyncio
    async def test_unknown_code_is_an_outcome(self, db_session, make_user):
        uid = (await make_user()).id
        outcome = await apply_referral(db_session, None, "heronotreal", uid)
        assert outcome.status is ReferralStatus.UNKNOWN_CODE
        assert not outcome.applied
        assert outcome.referrer_id is None

    @pytest.mark.asyncio
    async def test_self_referral_rejected(self, db_session, make_user):
        user = await make_user()
        uid, code = user.id, user.referral_code
        outcome = await apply_referral(db_session, None, code, uid)
        assert outcome.status is ReferralStatus.SELF_REFERRAL
        assert await _referral_count(db_session, uid) == 0

    @pytest.mark.asyncio
    async def test_applied_plants_tree_and_awards_badge(self, db_session, make_user):
        referrer = await make_user()
        referrer_id, code = referrer.id, referrer.referral_code
        new_id = (await make_user()).id

        outcome = await apply_referral(db_session, None, code, new_id)

        assert outcome.applied
        assert outcome.referrer_id == referrer_id
        assert [b.slug for b in outcome.new_badges] == ["referrals_1"]

        progress = await get_progress(db_session, referrer_id)
        assert progress.trees_planted == 1
        assert progress.total_points == 50

        referred = (await db_session.execute(
            select(User).where(User.id == new_id).execution_options(populate_existing=True)
        )).scalar_one()
        assert referred.referred_by == referrer_id

        referral = (await db_session.execute(
            select(Referral).where(Referral.referred_id == new_id)
        )).scalar_one()
        assert referral.status == "completed"
        assert referral.reward_given is True

    @pytest.mark.asyncio
    async def test_code_lookup_ignores_case(self, db_session, make_user):
        referrer = await make_user()
        code = referrer.referral_code
        new_id = (await make_user()).id
        outcome = await apply_referral(db_session, None, f"  {code.upper()} ", new_id)
        assert outcome.applied

    @pytest.mark.asyncio
    async def test_second_referral_for_same_user_ignored(self, db_session, make_user):
        first = await make_user()
        second = await make_user()
        first_id, first_code = first.id, first.referral_code
        second_id, second_code = second.id, second.referral_code
        new_id = (await make_user()).id

        assert (await apply_referral(db_session, None, first_code, new_id)).applied
        outcome = await apply_referral(db_session, None, second_code, new_id)

        assert outcome.status is ReferralStatus.ALREADY_REFERRED
        assert await _referral_count(db_session, second_id) == 0
        assert (await get_progress(db_session, second_id)).trees_planted == 0
        assert (await get_progress(db_session, first_id)).trees_planted == 1

    @pytest.mark.asyncio
    async def test_referral_badges_accumulate(self, db_session, make_user):
        referrer = await make_user()
        referrer_id, code = referrer.id, referrer.referral_code
        for _ in range(5):
            new_id = (await make_user()).id
            await apply_referral(db_session, None, code, new_id)

        earned = await get_earned_badge_ids(db_session, referrer_id)
        assert (await get_badge_by_slug(db_session, "referrals_1")).id in earned
        assert (await get_badge_by_slug(db_session, "referrals_5")).id in earned
        assert (await get_progress(db_session, referrer_id)).trees_planted == 5


class TestReferralReads:

    @pytest.mark.asyncio
    async def test_validate(self, db_session, make_user):
        referrer = await make_user(name="Ada")
        code = referrer.referral_code
        preview = await validate_referral_code(db_session, code)
        assert preview["name"] == "Ada"
        assert preview["trees_planted"] == 0
        assert "Ada" in preview["message"]
        assert await validate_referral_code(db_session, "heroxxxxxx") is None

    @pytest.mark.asyncio
    async def test_preview_message_uses_display_name(self, db_session, make_user):
        anonymous = await make_user()
        blank = await make_user(name="   ")
        for code in (anonymous.referral_code, blank.referral_code):
            preview = await validate_referral_code(db_session, code)
            assert preview["name"] == "Climate Hero"
            assert preview["message"].startswith("Join Climate Hero in saving the planet!")

    @pytest.mark.asyncio
    async def test_info(self, db_session, make_user):
        referrer = await make_user()
        code = referrer.referral_code
        new_id = (await make_user(email="friend@example.com")).id
        await apply_referral(db_session, None, code, new_id)

        info = await get_referral_info(db_session, referrer)
        assert info["referral_link"] == f"https://guardian.test/join/{code}"
        assert info["stats"] == {
            "total_referrals": 1,
            "completed_referrals": 1,
            "pending_referrals": 0,
            "trees_planted": 1,
        }
        assert info["recent_referrals"][0]["email"] == "fr***@example.com"
        assert info["recent_referrals"][0]["name"] == "Climate Hero"
        assert len(info["rewards"]["milestones"]) == 4

    @pytest.mark.asyncio
    async def test_stats(self, db_session, make_user):
        referrer = await make_user()
        referrer_id, code = referrer.id, referrer.referral_code
        friend_id = (await make_user()).id
        await apply_referral(db_session, None, code, friend_id)

        friend_progress = await get_progress(db_session, friend_id)
        friend_progress.total_co2_saved = 12.5
        friend_progress.total_missions_completed = 4
        await db_session.commit()

        stats = await get_referral_stats(db_session, referrer_id, date.today())
        assert sum(m["count"] for m in stats["monthly_stats"]) == 1
        assert stats["referred_impact"] == {"total_co2_saved": 12.5, "total_missions_completed": 4}


class TestShareTracking:

    @pytest.mark.asyncio
    async def test_publishes_share_event(self):
        redis = _RecordingRedis()
        await track_referral_share(redis, 7, SharePlatform.WHATSAPP)
        assert redis.published == [("pubsub:referral_shared", {"user_id": 7, "platform": "whatsapp"})]

    @pytest.mark.asyncio
    async def test_without_redis(self):
        await track_referral_share(None, 7, SharePlatform.COPY)

    def test_platforms(self):
        assert {p.value for p in SharePlatform} == {"twitter", "facebook", "linkedin", "whatsapp", "email", "copy"}
