"""Pure stateless stats functions: math only, never raises."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta

from orbitgoals.engine.models import CompletionStatus, DailyLogs, Goal, LevelProgress, UserStats

POINTS_PER_COMPLETION = 10
POINTS_PER_PERFECT_DAY = 50
POINTS_PER_LEVEL = 200
STREAK_WINDOW_DAYS = 365


def _is_completed(status: CompletionStatus | str | None) -> bool:
    return status == CompletionStatus.completed


def goal_streak(goal_id: str, logs: DailyLogs, today: date) -> int:
    """Consecutive completed days for one goal, ending today or yesterday.

    Today only counts when already completed; a pending today never breaks
    the chain. The walk covers at most STREAK_WINDOW_DAYS calendar days.
    """
    streak = 0
    if _is_completed(logs.get(today.isoformat(), {}).get(goal_id)):
        streak = 1
    for offset in range(1, STREAK_WINDOW_DAYS):
        day = (today - timedelta(days=offset)).isoformat()
        if not _is_completed(logs.get(day, {}).get(goal_id)):
            break
        streak += 1
    return streak


def level_for_points(total_points: int) -> int:
    return max(total_points, 0) // POINTS_PER_LEVEL + 1


def compute_stats(
    goals: Sequence[Goal],
    logs: DailyLogs,
    bonus_points: int = 0,
    today: date | None = None,
) -> UserStats:
    """Derive totals, streak, perfect days, points and level.

    Completions are counted across every logged goal id, including goals
    deleted since. Perfect days compare against the *current* goal count.
    """
    today = today or date.today()
    total_completed = 0
    perfect_days = 0

    for day_log in logs.values():
        day_completed = sum(1 for status in day_log.values() if _is_completed(status))
        total_completed += day_completed
        # Zero goals would otherwise make every empty day "perfect"
        if goals and day_completed == len(goals):
            perfect_days += 1

    current_streak = max((goal_streak(g.id, logs, today) for g in goals), default=0)

    total_points = (
        total_completed * POINTS_PER_COMPLETION
        + perfect_days * POINTS_PER_PERFECT_DAY
        + bonus_points
    )

    return UserStats(
        total_completed=total_completed,
        current_streak=current_streak,
        perfect_days=perfect_days,
        total_points=total_points,
        level=level_for_points(total_points),
    )


def level_progress(stats: UserStats) -> LevelProgress:
    """Progress toward the next level. Capped at 100%."""
    next_level_points = stats.level * POINTS_PER_LEVEL
    pct = min(100.0, (max(stats.total_points, 0) / next_level_points) * 100.0)
    return LevelProgress(level=stats.level, next_level_points=next_level_points, progress_pct=round(pct, 1))


def longest_streak(logs: DailyLogs) -> int:
    """Longest all-time run of consecutive days with at least one completion."""
    days: list[date] = []
    for day_str, day_log in logs.items():
        if not any(_is_completed(s) for s in day_log.values()):
            continue
        try:
            days.append(date.fromisoformat(day_str))
        except ValueError:
            continue
    if not days:
        return 0

    days.sort()
    best = current = 1
    for prev, cur in zip(days, days[1:]):
        gap = (cur - prev).days
        if gap == 1:
            current += 1
        elif gap > 1:
            current = 1
        best = max(best, current)
    return best


def status_delta(
    previous: CompletionStatus,
    new: CompletionStatus,
) -> tuple[int, int]:
    """Signed (points, tasks) delta for one log transition.

    Only transitions into or out of `completed` move the leaderboard.
    """
    was_done = _is_completed(previous)
    is_done = _is_completed(new)
    if is_done and not was_done:
        return POINTS_PER_COMPLETION, 1
    if was_done and not is_done:
        return -POINTS_PER_COMPLETION, -1
    return 0, 0


def goal_summaries(goals: Sequence[Goal], logs: DailyLogs) -> list[dict[str, int | str]]:
    """Per-goal completed/skipped counts over all logged days."""
    summaries: list[dict[str, int | str]] = []
    for goal in goals:
        completed = skipped = 0
        for day_log in logs.values():
            status = day_log.get(goal.id)
            if status == CompletionStatus.completed:
                completed += 1
            elif status == CompletionStatus.skipped:
                skipped += 1
        summaries.append({"title": goal.title, "completed": completed, "skipped": skipped})
    return summaries
