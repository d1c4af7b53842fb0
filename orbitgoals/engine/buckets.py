"""Leaderboard bucket ids: one aggregate document set per time window."""

from __future__ import annotations

from datetime import date

from orbitgoals.engine.models import Period


def daily_bucket(day: date) -> str:
    return f"daily_{day.isoformat()}"


def weekly_bucket(day: date) -> str:
    """ISO week bucket, e.g. weekly_2024-W01 (ISO year, not calendar year)."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"weekly_{iso_year:04d}-W{iso_week:02d}"


def monthly_bucket(day: date) -> str:
    return f"monthly_{day.year:04d}-{day.month:02d}"


def bucket_id(period: Period | str, day: date) -> str:
    period = Period(period)
    if period == Period.daily:
        return daily_bucket(day)
    if period == Period.weekly:
        return weekly_bucket(day)
    return monthly_bucket(day)


def all_buckets(day: date) -> list[str]:
    """Daily, weekly and monthly bucket ids for one calendar date."""
    return [daily_bucket(day), weekly_bucket(day), monthly_bucket(day)]
