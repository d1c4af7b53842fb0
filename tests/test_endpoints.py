"""Endpoint tests: FastAPI app via httpx ASGITransport."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from orbitgoals.engine.local_store import UserState

ALICE = {"X-User-Id": "user-alice", "X-User-Name": "Alice", "X-User-Email": "alice@example.com"}


async def create_goal(client, title="Read", headers=ALICE):
    resp = await client.post("/orbit/goals", json={"title": title}, headers=headers)
    assert resp.status_code == 201
    return resp.json()


class TestGoalsEndpoints:
    @pytest.mark.asyncio
    async def test_create_and_list(self, client):
        goal = await create_goal(client, "Meditate")
        assert goal["title"] == "Meditate"
        assert "reminderEnabled" in goal
        resp = await client.get("/orbit/goals", headers=ALICE)
        assert [g["id"] for g in resp.json()] == [goal["id"]]

    @pytest.mark.asyncio
    async def test_blank_title_422(self, client):
        resp = await client.post("/orbit/goals", json={"title": " "}, headers=ALICE)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_delete(self, client):
        goal = await create_goal(client)
        resp = await client.delete(f"/orbit/goals/{goal['id']}", headers=ALICE)
        assert resp.status_code == 204
        resp = await client.delete(f"/orbit/goals/{goal['id']}", headers=ALICE)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_no_id_header_is_guest(self, client, store):
        await create_goal(client, headers={})
        assert len(UserState(store, "guest-user-123").goals()) == 1


class TestLogsEndpoints:
    @pytest.mark.asyncio
    async def test_toggle_returns_stats(self, client, sync):
        goal = await create_goal(client)
        resp = await client.put(f"/orbit/logs/2024-01-02/{goal['id']}", json={"status": "completed"}, headers=ALICE)
        assert resp.status_code == 200
        body = resp.json()
        assert body["pointsDelta"] == 10
        assert body["stats"]["totalPoints"] == 60
        assert body["stats"]["currentStreak"] == 1
        await sync.drain()

    @pytest.mark.asyncio
    async def test_future_date_422(self, client):
        goal = await create_goal(client)
        resp = await client.put(f"/orbit/logs/2024-01-03/{goal['id']}", json={"status": "completed"}, headers=ALICE)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_goal_404(self, client):
        resp = await client.put("/orbit/logs/2024-01-02/missing", json={"status": "completed"}, headers=ALICE)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_bad_status_422(self, client):
        goal = await create_goal(client)
        resp = await client.put(f"/orbit/logs/2024-01-02/{goal['id']}", json={"status": "done"}, headers=ALICE)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_logs_range(self, client, sync):
        goal = await create_goal(client)
        for day in ("2023-12-30", "2024-01-01", "2024-01-02"):
            await client.put(f"/orbit/logs/{day}/{goal['id']}", json={"status": "skipped"}, headers=ALICE)
        resp = await client.get("/orbit/logs?from=2024-01-01&to=2024-01-02", headers=ALICE)
        assert list(resp.json()) == ["2024-01-01", "2024-01-02"]
        resp = await client.get("/orbit/logs?from=nope", headers=ALICE)
        assert resp.status_code == 422


class TestStatsEndpoints:
    @pytest.mark.asyncio
    async def test_stats_shape(self, client, sync):
        goal = await create_goal(client)
        await client.put(f"/orbit/logs/2024-01-02/{goal['id']}", json={"status": "completed"}, headers=ALICE)
        await sync.drain()
        body = (await client.get("/orbit/stats", headers=ALICE)).json()
        assert body["stats"]["totalCompleted"] == 1
        assert body["levelProgress"]["nextLevelPoints"] == 200
        assert body["longestStreak"] == 1
        assert body["tier"] == {"name": "Bronze", "color": "#cd7f32", "nextTierLevel": 5}
        assert body["achievements"] == ["rookie"]

    @pytest.mark.asyncio
    async def test_achievements_board(self, client):
        rows = (await client.get("/orbit/achievements", headers=ALICE)).json()
        assert len(rows) == 5
        assert not any(r["unlocked"] for r in rows)

    @pytest.mark.asyncio
    async def test_tiers_and_templates(self, client):
        tiers = (await client.get("/orbit/tiers")).json()
        assert [t["name"] for t in tiers] == ["Bronze", "Silver", "Gold", "Diamond"]
        templates = (await client.get("/orbit/templates")).json()
        assert templates and "title" in templates[0]


class TestProfileEndpoint:
    @pytest.mark.asyncio
    async def test_set_country(self, client, store):
        resp = await client.put("/orbit/profile", json={"country": "np"}, headers=ALICE)
        assert resp.json() == {"userId": "user-alice", "country": "NP"}
        assert UserState(store, "user-alice").country() == "NP"

    @pytest.mark.asyncio
    async def test_global_any_case(self, client, store):
        resp = await client.put("/orbit/profile", json={"country": "global"}, headers=ALICE)
        assert resp.status_code == 200
        assert resp.json()["country"] == "Global"
        assert UserState(store, "user-alice").country() == "Global"

    @pytest.mark.asyncio
    async def test_unknown_country(self, client):
        resp = await client.put("/orbit/profile", json={"country": "XX"}, headers=ALICE)
        assert resp.status_code == 422


class TestLeaderboardEndpoint:
    @pytest.mark.asyncio
    async def test_demo_with_user(self, client):
        resp = await client.get("/orbit/leaderboard?period=weekly", headers=ALICE)
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 8
        assert [e["rank"] for e in data] == list(range(1, 9))
        assert data[-1]["userId"] == "user-alice"

    @pytest.mark.asyncio
    async def test_friends_scope(self, client):
        data = (await client.get("/orbit/leaderboard?scope=friends", headers=ALICE)).json()
        assert [e["userId"] for e in data] == ["m2", "m4", "user-alice"]

    @pytest.mark.asyncio
    async def test_country_scope(self, client):
        data = (await client.get("/orbit/leaderboard?scope=country&country=US", headers=ALICE)).json()
        assert [e["userId"] for e in data] == ["m1", "m6"]

    @pytest.mark.asyncio
    async def test_country_scope_global_lowercase(self, client):
        data = (await client.get("/orbit/leaderboard?scope=country&country=global", headers=ALICE)).json()
        assert len(data) == 8
        assert data[-1]["userId"] == "user-alice"

    @pytest.mark.asyncio
    async def test_bad_scope_422(self, client):
        resp = await client.get("/orbit/leaderboard?scope=planet", headers=ALICE)
        assert resp.status_code == 422


class TestRewardsEndpoints:
    @pytest.mark.asyncio
    async def test_purchase_flow(self, client, store):
        UserState(store, "user-alice").set_coins(500)
        resp = await client.post("/orbit/shop/purchase/theme_sunset", headers=ALICE)
        assert resp.json()["wallet"]["coins"] == 0
        resp = await client.post("/orbit/shop/purchase/theme_sunset", headers=ALICE)
        assert resp.status_code == 409
        resp = await client.post("/orbit/shop/purchase/frame_gold", headers=ALICE)
        assert resp.status_code == 402

    @pytest.mark.asyncio
    async def test_premium_opens_payment(self, client, sync):
        # Empty fake DB: no pending request, insert succeeds
        resp = await client.post("/orbit/shop/purchase/premium_lifetime", headers=ALICE)
        payment = resp.json()["payment"]
        assert payment["status"] == "pending"
        assert payment["userId"] == "user-alice"

    @pytest.mark.asyncio
    async def test_spin_once(self, client):
        first = await client.post("/orbit/spin", headers=ALICE)
        assert first.status_code == 200
        assert first.json()["bonusPoints"] == first.json()["value"]
        second = await client.post("/orbit/spin", headers=ALICE)
        assert second.status_code == 409

    @pytest.mark.asyncio
    async def test_shop_items(self, client):
        items = (await client.get("/orbit/shop/items?type=theme")).json()
        assert {i["id"] for i in items} == {"theme_sunset", "theme_cyber", "theme_forest"}

    @pytest.mark.asyncio
    async def test_admin_unknown_payment(self, client):
        resp = await client.post("/orbit/admin/payments/missing/approve")
        assert resp.status_code == 404


class TestCoachEndpoints:
    @pytest.mark.asyncio
    async def test_analysis_without_key(self, client):
        body = (await client.get("/orbit/coach/analysis?month=2024-01", headers=ALICE)).json()
        assert body["score"] == 0
        assert "motivationalQuote" in body

    @pytest.mark.asyncio
    async def test_bad_month(self, client):
        resp = await client.get("/orbit/coach/analysis?month=January", headers=ALICE)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_chat_fallback(self, client):
        resp = await client.post("/orbit/coach/chat", json={"message": "hello"}, headers=ALICE)
        assert resp.json() == {"sender": "ai", "text": "I'm feeling a bit disconnected. Let's try again later."}

    @pytest.mark.asyncio
    async def test_quote(self, client):
        body = (await client.get("/orbit/coach/quote")).json()
        assert set(body) == {"text", "author"}


class TestApiKey:
    @pytest.mark.asyncio
    async def test_open_when_unset(self, client):
        resp = await client.get("/orbit/tiers")
        assert resp.status_code == 200

    @pytest.mark.asyncio
    async def test_required_when_set(self, client):
        with patch("orbitgoals.auth.settings.orbit_api_key", "s3cret"):
            assert (await client.get("/orbit/tiers")).status_code == 401
            ok = await client.get("/orbit/tiers", headers={"X-API-Key": "s3cret"})
            assert ok.status_code == 200
            bearer = await client.get("/orbit/tiers", headers={"Authorization": "Bearer s3cret"})
            assert bearer.status_code == 200


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
