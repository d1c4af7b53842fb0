"""Tests for the per-user local stores and typed state accessors."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from orbitgoals.engine.local_store import JsonFileLocalStore, MemoryLocalStore, UserState
from orbitgoals.engine.models import CompletionStatus
from tests.conftest import make_goal


@pytest.fixture(params=["memory", "file"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return MemoryLocalStore()
    return JsonFileLocalStore(tmp_path / "store")


class TestStores:
    def test_missing_key_default(self, any_store):
        assert any_store.get("u1", "goals") is None
        assert any_store.get("u1", "coins", 0) == 0

    def test_users_are_isolated(self, any_store):
        any_store.set("u1", "coins", 5)
        assert any_store.get("u2", "coins") is None

    def test_memory_returns_copies(self):
        store = MemoryLocalStore()
        items = ["a"]
        store.set("u1", "unlocked_items", items)
        items.append("b")
        assert store.get("u1", "unlocked_items") == ["a"]

    def test_file_layout(self, tmp_path):
        store = JsonFileLocalStore(tmp_path)
        store.set("user/../x", "coins", 3)
        files = [p.name for p in tmp_path.iterdir()]
        assert files == ["user_user_.._x.json"]
        assert json.loads((tmp_path / files[0]).read_text(encoding="utf-8")) == {"coins": 3}

    def test_file_survives_reopen(self, tmp_path):
        JsonFileLocalStore(tmp_path).set("u1", "country", "NP")
        assert JsonFileLocalStore(tmp_path).get("u1", "country") == "NP"

    def test_corrupt_file_reads_empty(self, tmp_path):
        (tmp_path / "user_u1.json").write_text("{not json", encoding="utf-8")
        assert JsonFileLocalStore(tmp_path).get("u1", "coins", 0) == 0


class TestUserState:
    def test_goals_round_trip(self, any_store):
        state = UserState(any_store, "u1")
        state.save_goals([make_goal("g1", "Read"), make_goal("g2", "Run")])
        assert [g.title for g in state.goals()] == ["Read", "Run"]

    def test_goals_stored_camel_case(self):
        store = MemoryLocalStore()
        UserState(store, "u1").save_goals([make_goal("g1")])
        assert "reminderEnabled" in store.get("u1", "goals")[0]

    def test_malformed_entries_skipped(self):
        store = MemoryLocalStore()
        store.set("u1", "goals", [{"title": "no color"}, make_goal("ok").model_dump(mode="json")])
        store.set("u1", "logs", {"2024-01-01": {"ok": "completed", "x": "exploded"}, "bad": "nope"})
        state = UserState(store, "u1")
        assert [g.id for g in state.goals()] == ["ok"]
        assert state.logs() == {"2024-01-01": {"ok": CompletionStatus.completed}}

    def test_logs_saved_as_strings(self):
        store = MemoryLocalStore()
        UserState(store, "u1").save_logs({"2024-01-01": {"g1": CompletionStatus.skipped}})
        assert store.get("u1", "logs") == {"2024-01-01": {"g1": "skipped"}}

    def test_coins_never_negative(self):
        state = UserState(MemoryLocalStore(), "u1")
        state.set_coins(-40)
        assert state.coins() == 0

    def test_numeric_garbage_is_zero(self):
        store = MemoryLocalStore()
        store.set("u1", "bonus_points", "lots")
        assert UserState(store, "u1").bonus_points() == 0

    def test_booster_window(self):
        state = UserState(MemoryLocalStore(), "u1")
        now = datetime(2024, 1, 2, 12, tzinfo=timezone.utc)
        assert not state.booster_active(now)
        state.set_booster_expiry(now + timedelta(hours=1))
        assert state.booster_active(now)
        assert not state.booster_active(now + timedelta(hours=2))

    def test_country_and_pro(self):
        state = UserState(MemoryLocalStore(), "u1")
        assert state.country() is None
        state.set_country("IN")
        state.set_pro(True)
        assert state.country() == "IN"
        assert state.is_pro()
