"""Static achievements catalog: threshold predicates over UserStats.

Each AchievementDefinition ties a UserStats metric to a threshold. Nothing
is stored: unlocked badges are recomputed from the current stats on every
call, so they re-lock if totals drop (e.g. after a log is undone).
"""

from __future__ import annotations

from dataclasses import dataclass

from orbitgoals.engine.models import UserStats


@dataclass(frozen=True, slots=True)
class AchievementDefinition:
    id: str
    title: str
    description: str
    metric: str  # "total_completed" | "current_streak" | "perfect_days"
    threshold: int
    icon: str = ""


ACHIEVEMENTS: tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        id="rookie",
        title="Rookie Orbit",
        description="Complete your first habit.",
        metric="total_completed",
        threshold=1,
        icon="🚀",
    ),
    AchievementDefinition(
        id="streak_3",
        title="Ignition",
        description="Maintain a 3-day streak.",
        metric="current_streak",
        threshold=3,
        icon="🔥",
    ),
    AchievementDefinition(
        id="streak_7",
        title="Velocity",
        description="Reach a 7-day streak.",
        metric="current_streak",
        threshold=7,
        icon="⚡",
    ),
    AchievementDefinition(
        id="perfect_week",
        title="Perfect Alignment",
        description="Achieve 7 perfect days.",
        metric="perfect_days",
        threshold=7,
        icon="🌟",
    ),
    AchievementDefinition(
        id="master",
        title="Orbit Master",
        description="Complete 100 habits total.",
        metric="total_completed",
        threshold=100,
        icon="👑",
    ),
)


def list_achievements() -> list[AchievementDefinition]:
    return list(ACHIEVEMENTS)


def get_achievement(achievement_id: str) -> AchievementDefinition | None:
    return next((a for a in ACHIEVEMENTS if a.id == achievement_id), None)


def is_unlocked(achievement: AchievementDefinition, stats: UserStats) -> bool:
    return getattr(stats, achievement.metric) >= achievement.threshold


def unlocked_achievement_ids(stats: UserStats) -> set[str]:
    return {a.id for a in ACHIEVEMENTS if is_unlocked(a, stats)}


def achievement_board(stats: UserStats) -> list[dict]:
    """Catalog in display order, each with its unlocked flag."""
    return [
        {
            "id": a.id,
            "title": a.title,
            "description": a.description,
            "icon": a.icon,
            "metric": a.metric,
            "threshold": a.threshold,
            "unlocked": is_unlocked(a, stats),
        }
        for a in ACHIEVEMENTS
    ]
