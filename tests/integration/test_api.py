"""End-to-end HTTP tests through the FastAPI app."""

from __future__ import annotations

from datetime import timedelta

import pytest


async def _signup(client, email: str = "eco@example.com", **extra) -> dict:
    resp = await client.post("/api/v1/users", json={"email": email, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}
        assert resp.headers["X-Request-Id"]

    @pytest.mark.asyncio
    async def test_request_id_propagated(self, client):
        resp = await client.get("/version", headers={"X-Request-Id": "abc-123"})
        assert resp.headers["X-Request-Id"] == "abc-123"
        assert "version" in resp.json()


class TestAuth:

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        resp = await client.get("/api/v1/missions/today")
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_garbage_token(self, client):
        resp = await client.get("/api/v1/progress", headers=_bearer("not-a-jwt"))
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_token_for_unknown_user(self, client, headers_for):
        resp = await client.get("/api/v1/users/me", headers=headers_for(4242))
        assert resp.status_code == 401


class TestSignupEndpoint:

    @pytest.mark.asyncio
    async def test_signup(self, client):
        data = await _signup(client, name="Eco")
        assert data["user"]["email"] == "eco@example.com"
        assert data["token_type"] == "bearer"
        assert [b["slug"] for b in data["badges"]] == ["early_adopter"]
        assert data["first_assignment_id"]
        assert data["referral_status"] is None

    @pytest.mark.asyncio
    async def test_duplicate(self, client):
        await _signup(client)
        resp = await client.post("/api/v1/users", json={"email": "ECO@example.com"})
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_email(self, client):
        resp = await client.post("/api/v1/users", json={"email": "nope"})
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_email_normalized(self, client):
        data = await _signup(client, "Mixed.Case@Example.COM")
        assert data["user"]["email"] == "mixed.case@example.com"

    @pytest.mark.asyncio
    async def test_invalid_email_reports_field(self, client):
        for bad in ("nope", "no-domain@", "@example.com", "two@@example.com"):
            resp = await client.post("/api/v1/users", json={"email": bad})
            assert resp.status_code == 422, bad
            body = resp.json()
            assert body["detail"] == "Validation error"
            assert body["errors"][0]["loc"] == ["body", "email"]

    @pytest.mark.asyncio
    async def test_with_referral(self, client):
        referrer = await _signup(client, "ref@example.com")
        code = referrer["user"]["referral_code"]
        friend = await _signup(client, "friend@example.com", referral_code=code)
        assert friend["referral_status"] == "applied"

        info = (await client.get("/api/v1/referrals", headers=_bearer(referrer["access_token"]))).json()
        assert info["stats"]["completed_referrals"] == 1
        assert info["stats"]["trees_planted"] == 1
        assert info["recent_referrals"][0]["email"] == "fr***@example.com"


class TestMissionEndpoints:

    @pytest.mark.asyncio
    async def test_daily_flow(self, client, clock):
        signup = await _signup(client)
        headers = _bearer(signup["access_token"])

        today = (await client.get("/api/v1/missions/today", headers=headers)).json()
        assignment_id = today["assignment"]["id"]
        assert assignment_id == signup["first_assignment_id"]
        assert today["assignment"]["status"] == "pending"

        again = (await client.get("/api/v1/missions/today", headers=headers)).json()
        assert again["assignment"]["id"] == assignment_id

        resp = await client.post(f"/api/v1/missions/{assignment_id}/complete", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["streak"] == 1
        assert "first_step" in [b["slug"] for b in body["new_badges"]]
        assert body["progress"]["total_missions_completed"] == 1

        resp = await client.post(f"/api/v1/missions/{assignment_id}/complete", headers=headers)
        assert resp.status_code == 409

        resp = await client.post(f"/api/v1/missions/{assignment_id}/skip", headers=headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Mission already processed"

        clock.today = clock.today + timedelta(days=1)
        tomorrow = (await client.get("/api/v1/missions/today", headers=headers)).json()
        assert tomorrow["assignment"]["id"] != assignment_id
        assert tomorrow["current_streak"] == 1

        resp = await client.post(f"/api/v1/missions/{tomorrow['assignment']['id']}/skip", headers=headers)
        assert resp.json() == {
            "success": True,
            "assignment_id": tomorrow["assignment"]["id"],
            "streak_lost": True,
            "previous_streak": 1,
        }

        history = (await client.get("/api/v1/missions/history", headers=headers)).json()
        assert history["total"] == 2
        assert [m["status"] for m in history["missions"]] == ["skipped", "completed"]

        completed = (await client.get(
            "/api/v1/missions/history", params={"status": "completed"}, headers=headers,
        )).json()
        assert completed["total"] == 1

    @pytest.mark.asyncio
    async def test_other_users_assignment(self, client):
        owner = await _signup(client, "owner@example.com")
        intruder = await _signup(client, "intruder@example.com")
        resp = await client.post(
            f"/api/v1/missions/{owner['first_assignment_id']}/complete",
            headers=_bearer(intruder["access_token"]),
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Mission not found"

    @pytest.mark.asyncio
    async def test_catalog(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        catalog = (await client.get("/api/v1/missions/all", headers=headers)).json()
        assert catalog["total"] == len(catalog["missions"]) > 0
        assert sum(len(v) for v in catalog["by_category"].values()) == catalog["total"]


class TestProgressEndpoints:

    @pytest.mark.asyncio
    async def test_progress_views(self, client):
        headers = _bearer((await _signup(client))["access_token"])

        progress = (await client.get("/api/v1/progress", headers=headers)).json()
        assert progress["total_points"] == 100
        assert progress["level"] == 2
        assert progress["level_progress"] == {
            "level": 2, "current": 0, "needed": 300, "percentage": 0, "next_level": 3, "next_level_at": 400,
        }

        stats = await client.get("/api/v1/progress/stats", params={"period": "week"}, headers=headers)
        assert stats.status_code == 200
        assert stats.json()["period"] == "week"

        bad = await client.get("/api/v1/progress/stats", params={"period": "decade"}, headers=headers)
        assert bad.status_code == 422

        board = (await client.get(
            "/api/v1/progress/leaderboard", params={"type": "points"}, headers=headers,
        )).json()
        assert board["current_user"]["rank"] == 1
        assert board["leaderboard"][0]["is_current_user"] is True

        achievements = (await client.get("/api/v1/progress/achievements", headers=headers)).json()
        assert len(achievements["badges"]["earned"]) == 1

    @pytest.mark.asyncio
    async def test_level_lookup(self, client):
        resp = await client.get("/api/v1/progress/levels/150")
        assert resp.json()["level"] == 2
        assert resp.json()["current"] == 50
        assert resp.json()["needed"] == 300
        assert (await client.get("/api/v1/progress/levels/-1")).status_code == 400


class TestBadgeEndpoints:

    @pytest.mark.asyncio
    async def test_badge_views(self, client):
        headers = _bearer((await _signup(client))["access_token"])

        listing = (await client.get("/api/v1/badges", headers=headers)).json()
        assert listing["summary"]["earned"] == 1
        assert listing["summary"]["total"] == 17

        earned = (await client.get("/api/v1/badges/earned", headers=headers)).json()
        assert earned["count"] == 1

        detail = await client.get("/api/v1/badges/early_adopter", headers=headers)
        assert detail.json()["badge"]["earned"] is True
        assert (await client.get("/api/v1/badges/nope", headers=headers)).status_code == 404

        share = await client.post("/api/v1/badges/early_adopter/share", headers=headers)
        assert share.json()["share_data"]["url"] == "https://guardian.test/badges/early_adopter"
        assert (await client.post("/api/v1/badges/streak_7/share", headers=headers)).status_code == 403
        assert (await client.post("/api/v1/badges/nope/share", headers=headers)).status_code == 404

        evaluated = (await client.post("/api/v1/badges/evaluate", headers=headers)).json()
        assert evaluated == {"new_badges": [], "count": 0}


class TestReferralEndpoints:

    @pytest.mark.asyncio
    async def test_validate_is_public(self, client):
        code = (await _signup(client, name="Greta"))["user"]["referral_code"]
        resp = await client.post("/api/v1/referrals/validate", json={"code": code.upper()})
        assert resp.status_code == 200
        assert resp.json()["referrer"]["name"] == "Greta"

        resp = await client.post("/api/v1/referrals/validate", json={"code": "heroxxxxxx"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_stats(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        stats = (await client.get("/api/v1/referrals/stats", headers=headers)).json()
        assert stats["monthly_stats"] == []
        assert stats["referred_impact"] == {"total_co2_saved": 0.0, "total_missions_completed": 0}


class TestAccountEndpoints:

    @pytest.mark.asyncio
    async def test_profile_premium_delete(self, client):
        headers = _bearer((await _signup(client))["access_token"])

        me = (await client.get("/api/v1/users/me", headers=headers)).json()
        assert me["user"]["is_premium"] is False
        assert me["stats"] == {"badges_earned": 1, "friends_referred": 0}

        premium = (await client.post("/api/v1/users/me/premium", headers=headers)).json()
        assert premium["is_premium"] is True
        assert [b["slug"] for b in premium["new_badges"]] == ["premium_hero"]

        me = (await client.get("/api/v1/users/me", headers=headers)).json()
        assert me["user"]["is_premium"] is True
        assert me["progress"]["total_points"] == 150

        assert (await client.delete("/api/v1/users/me", headers=headers)).status_code == 204
        assert (await client.get("/api/v1/users/me", headers=headers)).status_code == 401


class TestReadiness:

    @pytest.mark.asyncio
    async def test_ready_with_seeded_catalog(self, client):
        body = (await client.get("/ready")).json()
        assert body["status"] == "ready"
        assert body["checks"]["catalog"] == "ok"
        assert body["checks"]["redis"] == "disabled"


class TestProfileEndpoints:

    @pytest.mark.asyncio
    async def test_update_profile(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        resp = await client.patch(
            "/api/v1/users/me",
            json={"name": "Wangari", "zip_code": "SW1A 1AA", "country": "gb", "timezone": "Europe/London"},
            headers=headers,
        )
        assert resp.status_code == 200, resp.text
        user = resp.json()
        assert user["name"] == "Wangari"
        assert user["zip_code"] == "SW1A 1AA"
        assert user["country"] == "GB"
        assert user["timezone"] == "Europe/London"

        me = (await client.get("/api/v1/users/me", headers=headers)).json()
        assert me["user"]["country"] == "GB"

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, client):
        headers = _bearer((await _signup(client, name="Eco"))["access_token"])
        user = (await client.patch("/api/v1/users/me", json={"timezone": "Asia/Tokyo"}, headers=headers)).json()
        assert user["name"] == "Eco"
        assert user["country"] == "US"
        assert user["timezone"] == "Asia/Tokyo"

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        resp = await client.patch("/api/v1/users/me", json={}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No fields to update"

    @pytest.mark.asyncio
    async def test_custom_validator_failure_is_json_422(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        resp = await client.patch("/api/v1/users/me", json={"zip_code": "12#45"}, headers=headers)
        assert resp.status_code == 422
        error = resp.json()["errors"][0]
        assert error["loc"] == ["body", "zip_code"]
        assert "Invalid zip code format" in error["msg"]

        resp = await client.patch("/api/v1/users/me", json={"country": "U1"}, headers=headers)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        assert (await client.patch("/api/v1/users/me", json={"name": "x"})).status_code == 401
        assert (await client.get("/api/v1/users/me/settings")).status_code == 401


class TestSettingsEndpoints:

    @pytest.mark.asyncio
    async def test_defaults(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        settings = (await client.get("/api/v1/users/me/settings", headers=headers)).json()
        assert settings == {
            "notification_email": True,
            "notification_push": True,
            "notification_time": "09:00",
            "theme": "system",
            "units": "metric",
        }

    @pytest.mark.asyncio
    async def test_update(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        resp = await client.patch(
            "/api/v1/users/me/settings",
            json={"notification_push": False, "notification_time": "18:30", "theme": "dark"},
            headers=headers,
        )
        assert resp.status_code == 200, resp.text

        settings = (await client.get("/api/v1/users/me/settings", headers=headers)).json()
        assert settings["notification_email"] is True
        assert settings["notification_push"] is False
        assert settings["notification_time"] == "18:30"
        assert settings["theme"] == "dark"
        assert settings["units"] == "metric"

    @pytest.mark.asyncio
    async def test_invalid_values(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        for body in ({"theme": "neon"}, {"units": "furlongs"}, {"notification_time": "25:00"},
                     {"notification_time": "9:00"}):
            resp = await client.patch("/api/v1/users/me/settings", json=body, headers=headers)
            assert resp.status_code == 422, body

    @pytest.mark.asyncio
    async def test_empty_update_rejected(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        resp = await client.patch("/api/v1/users/me/settings", json={}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No settings to update"


class TestReferralShareEndpoint:

    @pytest.mark.asyncio
    async def test_share_tracked(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        for platform in ("twitter", "facebook", "linkedin", "whatsapp", "email", "copy"):
            resp = await client.post("/api/v1/referrals/share", json={"platform": platform}, headers=headers)
            assert resp.status_code == 200, platform
            assert resp.json() == {"success": True, "message": "Share tracked"}

    @pytest.mark.asyncio
    async def test_unknown_platform(self, client):
        headers = _bearer((await _signup(client))["access_token"])
        resp = await client.post("/api/v1/referrals/share", json={"platform": "myspace"}, headers=headers)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        resp = await client.post("/api/v1/referrals/share", json={"platform": "copy"})
        assert resp.status_code == 401
