"""Shared fixtures for the test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, timedelta
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from orbitgoals.engine.coach import Coach
from orbitgoals.engine.local_store import MemoryLocalStore
from orbitgoals.engine.models import CompletionStatus, Goal, Identity
from orbitgoals.engine.payments import PaymentService
from orbitgoals.engine.shop import Shop
from orbitgoals.engine.sync import CircuitBreaker, RemoteSyncAdapter
from orbitgoals.engine.tracker import HabitTracker
from orbitgoals.main import app
from orbitgoals.services import get_coach, get_payments, get_shop, get_store, get_sync, get_tracker

TODAY = date(2024, 1, 2)


# ---------------------------------------------------------------------------
# Fake DB session (no real Postgres needed)
# ---------------------------------------------------------------------------

class FakeResult:
    def __init__(self, rows: list[dict[str, Any]]):
        self._rows = rows
        self._keys = list(rows[0].keys()) if rows else []

    def keys(self):
        return self._keys

    def fetchall(self):
        return [tuple(r[k] for k in self._keys) for r in self._rows]

    def fetchone(self):
        rows = self.fetchall()
        return rows[0] if rows else None

    def scalar(self):
        row = self.fetchone()
        return row[0] if row else None


class FakeSession:
    """Minimal stand-in for AsyncSession; records every statement it sees.

    `handler(sql, params)` returns the rows for a statement. `error`, when
    set, is raised by every execute.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        error: BaseException | None = None,
        handler: Callable[[str, dict], list[dict[str, Any]]] | None = None,
    ):
        self._rows = rows or []
        self.error = error
        self.handler = handler
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.commits = 0

    async def execute(self, stmt, params=None):
        sql = str(stmt)
        self.executed.append((sql, dict(params or {})))
        if self.error is not None:
            raise self.error
        if self.handler is not None:
            return FakeResult(self.handler(sql, dict(params or {})))
        return FakeResult(self._rows)

    async def commit(self):
        self.commits += 1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        pass

    def increments(self) -> list[dict[str, Any]]:
        return [p for sql, p in self.executed if sql.startswith("INSERT INTO leaderboard_entries")]


class FakeSessionFactory:
    """Callable like async_sessionmaker; hands out one shared FakeSession."""

    def __init__(self, session: FakeSession):
        self.session = session
        self.opened = 0

    def __call__(self):
        self.opened += 1
        return self.session


def backend_missing() -> OperationalError:
    return OperationalError("INSERT INTO leaderboard_entries", {}, ConnectionRefusedError("connection refused"))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def store():
    return MemoryLocalStore()


@pytest.fixture()
def fake_session():
    return FakeSession()


@pytest.fixture()
def session_factory(fake_session):
    return FakeSessionFactory(fake_session)


@pytest.fixture()
def breaker():
    return CircuitBreaker()


@pytest.fixture()
def sync(session_factory, store, breaker):
    return RemoteSyncAdapter(session_factory, store, breaker, friends=("m2", "m4"), today=lambda: TODAY)


@pytest.fixture()
def tracker(store, sync):
    return HabitTracker(store, sync, today=lambda: TODAY)


@pytest.fixture()
def alice():
    return Identity(id="user-alice", name="Alice", email="alice@example.com")


@pytest.fixture()
def guest():
    return Identity(id="guest-user-123", name="Guest")


@pytest.fixture()
def override_services(store, sync, tracker):
    """Point every service dependency at the per-test fakes."""
    shop = Shop(store, today=lambda: TODAY)
    payments = PaymentService(sync, store)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_sync] = lambda: sync
    app.dependency_overrides[get_tracker] = lambda: tracker
    app.dependency_overrides[get_shop] = lambda: shop
    app.dependency_overrides[get_payments] = lambda: payments
    app.dependency_overrides[get_coach] = lambda: Coach(api_key=None)
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(override_services):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def make_goal(goal_id: str, title: str | None = None) -> Goal:
    """Helper to build a Goal with a fixed id."""
    return Goal(id=goal_id, title=title or goal_id, color="bg-blue-500", icon="🎯")


def completed_days(goal_id: str, end: date, count: int) -> dict[str, dict[str, CompletionStatus]]:
    """Logs with `goal_id` completed on `count` consecutive days ending at `end`."""
    return {
        (end - timedelta(days=i)).isoformat(): {goal_id: CompletionStatus.completed}
        for i in range(count)
    }
