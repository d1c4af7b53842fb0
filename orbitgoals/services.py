"""Process-wide service singletons, built from settings on first use.

Routers depend on the getters below; tests swap them through
app.dependency_overrides.
"""

from __future__ import annotations

from functools import lru_cache

from orbitgoals.config import settings
from orbitgoals.db import async_session
from orbitgoals.engine.coach import Coach
from orbitgoals.engine.local_store import JsonFileLocalStore, LocalStore, MemoryLocalStore
from orbitgoals.engine.payments import PaymentService
from orbitgoals.engine.shop import Shop
from orbitgoals.engine.sync import RemoteSyncAdapter
from orbitgoals.engine.tracker import HabitTracker


@lru_cache
def get_store() -> LocalStore:
    if settings.local_store_dir:
        return JsonFileLocalStore(settings.local_store_dir)
    return MemoryLocalStore()


@lru_cache
def get_sync() -> RemoteSyncAdapter:
    return RemoteSyncAdapter(
        async_session,
        get_store(),
        guest_user_id=settings.guest_user_id,
        limit=settings.leaderboard_limit,
        friends=settings.friends_allow_list,
    )


@lru_cache
def get_tracker() -> HabitTracker:
    return HabitTracker(get_store(), get_sync())


@lru_cache
def get_shop() -> Shop:
    return Shop(get_store())


@lru_cache
def get_payments() -> PaymentService:
    return PaymentService(get_sync(), get_store(), amount=settings.payment_amount)


@lru_cache
def get_coach() -> Coach:
    return Coach(api_key=settings.gemini_api_key, model=settings.gemini_model)
