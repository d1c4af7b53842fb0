"""Remote aggregate store: async access to leaderboard_entries, payment_requests, user_configs.

leaderboard_entries: bucket_id, user_id, display_name, photo_url, country,
points, tasks_completed, last_updated. Primary key (bucket_id, user_id).
bucket_id embeds the window: daily_YYYY-MM-DD, weekly_YYYY-Www, monthly_YYYY-MM.
Numeric fields are only ever changed by additive increments so concurrent
writers (other devices, tabs) never clobber each other.

payment_requests: id, user_id, user_name, user_email, amount, status, date,
transaction_id.

user_configs: user_id, is_pro, pro_since.

Functions here run plain SQL and let driver errors propagate; callers decide
how to degrade. Writers do not commit.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


def _rows(result) -> list[dict[str, Any]]:
    columns = result.keys()
    return [dict(zip(columns, r)) for r in result.fetchall()]


async def increment_entry(
    session: AsyncSession,
    bucket_id: str,
    user_id: str,
    display_name: str,
    points: int,
    tasks: int,
    updated_at: datetime,
    photo_url: str | None = None,
    country: str | None = None,
) -> None:
    """Upsert a leaderboard row, adding points/tasks to whatever is stored."""
    query = (
        "INSERT INTO leaderboard_entries "
        "(bucket_id, user_id, display_name, photo_url, country, points, tasks_completed, last_updated) "
        "VALUES (:bucket_id, :user_id, :display_name, :photo_url, :country, :points, :tasks, :updated_at) "
        "ON CONFLICT (bucket_id, user_id) DO UPDATE SET "
        "points = leaderboard_entries.points + excluded.points, "
        "tasks_completed = leaderboard_entries.tasks_completed + excluded.tasks_completed, "
        "display_name = excluded.display_name, "
        "photo_url = excluded.photo_url, "
        "country = COALESCE(excluded.country, leaderboard_entries.country), "
        "last_updated = excluded.last_updated"
    )
    params = {
        "bucket_id": bucket_id,
        "user_id": user_id,
        "display_name": display_name,
        "photo_url": photo_url,
        "country": country,
        "points": points,
        "tasks": tasks,
        "updated_at": updated_at,
    }
    await session.execute(text(query), params)


async def fetch_top(session: AsyncSession, bucket_id: str, limit: int = 20) -> list[dict[str, Any]]:
    """Top `limit` rows of a bucket ordered by points DESC. Empty list when none."""
    query = (
        "SELECT user_id, display_name, photo_url, country, points, tasks_completed "
        "FROM leaderboard_entries "
        "WHERE bucket_id = :bucket_id "
        "ORDER BY points DESC LIMIT :limit"
    )
    result = await session.execute(text(query), {"bucket_id": bucket_id, "limit": limit})
    return _rows(result)


async def count_bucket_users(session: AsyncSession, bucket_id: str) -> int:
    result = await session.execute(
        text("SELECT COUNT(*) FROM leaderboard_entries WHERE bucket_id = :bucket_id"),
        {"bucket_id": bucket_id},
    )
    return int(result.scalar() or 0)


# ---------------------------------------------------------------------------
# Payment requests
# ---------------------------------------------------------------------------

_PAYMENT_COLUMNS = "id, user_id, user_name, user_email, amount, status, date, transaction_id"


async def find_pending_payment(session: AsyncSession, user_id: str) -> dict[str, Any] | None:
    query = (
        f"SELECT {_PAYMENT_COLUMNS} FROM payment_requests "
        "WHERE user_id = :user_id AND status = 'pending' "
        "ORDER BY date DESC LIMIT 1"
    )
    rows = _rows(await session.execute(text(query), {"user_id": user_id}))
    return rows[0] if rows else None


async def insert_payment(session: AsyncSession, payment: dict[str, Any]) -> None:
    query = (
        f"INSERT INTO payment_requests ({_PAYMENT_COLUMNS}) "
        "VALUES (:id, :user_id, :user_name, :user_email, :amount, :status, :date, :transaction_id)"
    )
    await session.execute(text(query), payment)


async def get_payment(session: AsyncSession, request_id: str) -> dict[str, Any] | None:
    query = f"SELECT {_PAYMENT_COLUMNS} FROM payment_requests WHERE id = :id"
    rows = _rows(await session.execute(text(query), {"id": request_id}))
    return rows[0] if rows else None


async def list_payments(session: AsyncSession) -> list[dict[str, Any]]:
    query = f"SELECT {_PAYMENT_COLUMNS} FROM payment_requests ORDER BY date DESC"
    return _rows(await session.execute(text(query)))


async def update_payment_status(session: AsyncSession, request_id: str, status: str) -> None:
    await session.execute(
        text("UPDATE payment_requests SET status = :status WHERE id = :id"),
        {"id": request_id, "status": status},
    )


async def count_payments(session: AsyncSession, status: str) -> int:
    result = await session.execute(
        text("SELECT COUNT(*) FROM payment_requests WHERE status = :status"),
        {"status": status},
    )
    return int(result.scalar() or 0)


# ---------------------------------------------------------------------------
# User configs
# ---------------------------------------------------------------------------

async def set_user_pro(session: AsyncSession, user_id: str, since: datetime) -> None:
    query = (
        "INSERT INTO user_configs (user_id, is_pro, pro_since) VALUES (:user_id, TRUE, :since) "
        "ON CONFLICT (user_id) DO UPDATE SET is_pro = TRUE, pro_since = excluded.pro_since"
    )
    await session.execute(text(query), {"user_id": user_id, "since": since})


async def fetch_is_pro(session: AsyncSession, user_id: str) -> bool:
    result = await session.execute(
        text("SELECT is_pro FROM user_configs WHERE user_id = :user_id"),
        {"user_id": user_id},
    )
    row = result.fetchone()
    return bool(row[0]) if row is not None else False
