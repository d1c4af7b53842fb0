"""Remote leaderboard sync with a session-long circuit breaker.

Every completion toggle pushes a points/tasks delta to three rolling buckets
(daily, weekly, monthly). Pushes are fire-and-forget: the caller never waits
and never sees an error. The first failure that says the backend is unusable
(unreachable, missing table, permission denied) opens the breaker, after
which nothing in this process talks to the remote store again and reads are
served from the demo dataset plus local stats.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import date, datetime, timezone
from enum import Enum

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from orbitgoals.engine import remote_store
from orbitgoals.engine.buckets import all_buckets, bucket_id
from orbitgoals.engine.leaderboard import LeaderboardFilter, assemble, current_user_entry, demo_entries
from orbitgoals.engine.local_store import LocalStore, UserState
from orbitgoals.engine.models import Identity, LeaderboardEntry, Period

logger = logging.getLogger(__name__)

DEFAULT_GUEST_ID = "guest-user-123"
GUEST_PREFIX = "guest-"


class BreakerStatus(str, Enum):
    available = "available"
    unavailable = "unavailable"


class CircuitBreaker:
    """Latch: AVAILABLE until tripped, then UNAVAILABLE for the process lifetime."""

    def __init__(self) -> None:
        self.status = BreakerStatus.available
        self.reason: str | None = None

    @property
    def is_open(self) -> bool:
        return self.status == BreakerStatus.unavailable

    def trip(self, reason: str) -> None:
        if self.is_open:
            return
        self.status = BreakerStatus.unavailable
        self.reason = reason
        logger.warning("Remote store disabled for this session: %s", reason)

    def reset(self) -> None:
        self.status = BreakerStatus.available
        self.reason = None


def is_backend_unavailable(exc: BaseException) -> bool:
    """True for failures meaning "this backend is not usable", not "try again"."""
    if isinstance(exc, (OperationalError, InterfaceError, ProgrammingError)):
        return True
    if isinstance(exc, (OSError, ModuleNotFoundError)):
        return True
    if isinstance(exc, DBAPIError):
        message = str(exc).lower()
        return any(m in message for m in ("permission denied", "does not exist", "not found"))
    return False


def is_guest(user_id: str | None, guest_user_id: str = DEFAULT_GUEST_ID) -> bool:
    return not user_id or user_id == guest_user_id or user_id.startswith(GUEST_PREFIX)


class RemoteSyncAdapter:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None,
        store: LocalStore,
        breaker: CircuitBreaker | None = None,
        *,
        guest_user_id: str = DEFAULT_GUEST_ID,
        limit: int = 20,
        friends: Iterable[str] = (),
        today: Callable[[], date] = date.today,
    ) -> None:
        self.session_factory = session_factory
        self.store = store
        self.breaker = breaker or CircuitBreaker()
        self.guest_user_id = guest_user_id
        self.limit = limit
        self.friends = tuple(friends)
        self.today = today
        self._pending: set[asyncio.Task] = set()
        self._push_lock = asyncio.Lock()
        if session_factory is None:
            self.breaker.trip("no remote store configured")

    def remote_enabled(self, user_id: str | None = None, *, allow_anonymous: bool = False) -> bool:
        if self.session_factory is None or self.breaker.is_open:
            return False
        if user_id is None and allow_anonymous:
            return True
        return not is_guest(user_id, self.guest_user_id)

    def absorb(self, exc: BaseException, action: str) -> None:
        """Swallow a remote failure, tripping the breaker when the backend is unusable."""
        if is_backend_unavailable(exc):
            self.breaker.trip(f"{action}: {exc.__class__.__name__}: {exc}")
        else:
            logger.info("%s skipped (remote error): %s", action, exc)

    # -- writes -------------------------------------------------------------

    def record_delta(
        self,
        user: Identity,
        points_delta: int,
        tasks_delta: int,
        country: str | None = None,
    ) -> None:
        """Schedule a bucket increment and return immediately. Never raises."""
        if points_delta == 0 and tasks_delta == 0:
            return
        if not self.remote_enabled(user.id):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, leaderboard delta for %s dropped", user.id)
            return
        task = loop.create_task(self.push_delta(user, points_delta, tasks_delta, country))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def push_delta(
        self,
        user: Identity,
        points_delta: int,
        tasks_delta: int,
        country: str | None = None,
    ) -> bool:
        """Increment daily/weekly/monthly buckets. Returns False when skipped or failed."""
        if not self.remote_enabled(user.id):
            return False
        day = self.today()
        now = datetime.now(timezone.utc)
        # One push at a time: a burst queued behind a failing push sees the tripped breaker
        async with self._push_lock:
            if not self.remote_enabled(user.id):
                return False
            try:
                async with self.session_factory() as session:
                    for bucket in all_buckets(day):
                        if self.breaker.is_open:
                            return False
                        await remote_store.increment_entry(
                            session,
                            bucket,
                            user.id,
                            user.name,
                            points_delta,
                            tasks_delta,
                            now,
                            photo_url=user.photo_url,
                            country=country,
                        )
                    await session.commit()
            except Exception as exc:
                self.absorb(exc, "leaderboard update")
                return False
        return True

    async def drain(self) -> None:
        """Wait for in-flight pushes (shutdown, tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # -- reads --------------------------------------------------------------

    async def fetch_bucket(self, period: Period | str, user: Identity | None = None) -> list[LeaderboardEntry]:
        """Raw top-N entries for the current bucket, or the demo dataset."""
        if not self.remote_enabled(user.id if user else None, allow_anonymous=True):
            return demo_entries()
        try:
            async with self.session_factory() as session:
                rows = await remote_store.fetch_top(session, bucket_id(period, self.today()), self.limit)
        except Exception as exc:
            self.absorb(exc, "leaderboard fetch")
            return demo_entries()
        if not rows:
            return demo_entries()
        return [
            LeaderboardEntry(
                user_id=row["user_id"],
                display_name=row.get("display_name") or "Anonymous",
                photo_url=row.get("photo_url"),
                country=row.get("country"),
                points=int(row.get("points") or 0),
                tasks_completed=int(row.get("tasks_completed") or 0),
            )
            for row in rows
        ]

    async def fetch_ranked(
        self,
        period: Period | str,
        user: Identity | None = None,
        board_filter: LeaderboardFilter = LeaderboardFilter(),
    ) -> list[LeaderboardEntry]:
        """Filtered, user-merged, ranked leaderboard. Never raises."""
        entries = await self.fetch_bucket(period, user)
        current = None
        if user is not None:
            current = current_user_entry(user, UserState(self.store, user.id), self.today())
        return assemble(entries, current, board_filter, self.friends)
