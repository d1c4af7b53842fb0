"""Habits HTTP router: goals, daily logs, stats & achievements."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel

from orbitgoals.auth import current_user, verify_api_key
from orbitgoals.engine.achievements import achievement_board, unlocked_achievement_ids
from orbitgoals.engine.errors import OrbitError, status_code_for
from orbitgoals.engine.leaderboard import GLOBAL_COUNTRY
from orbitgoals.engine.models import DailyLogs, Goal, GoalCreate, Identity, LogUpdate, ToggleResult
from orbitgoals.engine.stats import level_progress, longest_streak
from orbitgoals.engine.templates import COUNTRIES, list_templates
from orbitgoals.engine.tiers import list_tiers, tier_of
from orbitgoals.engine.tracker import HabitTracker
from orbitgoals.services import get_tracker

router = APIRouter(prefix="/orbit", tags=["habits"], dependencies=[Depends(verify_api_key)])


class ProfileUpdate(BaseModel):
    country: str | None = None


def _parse_date(value: str, name: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid date for '{name}': {value}")


# ---------------------------------------------------------------------------
# /orbit/goals
# ---------------------------------------------------------------------------


@router.get("/goals", response_model=list[Goal])
async def goals_list(
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
) -> list[Goal]:
    return tracker.list_goals(user)


@router.post("/goals", response_model=Goal, status_code=201)
async def goal_create(
    body: GoalCreate,
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
) -> Goal:
    return tracker.create_goal(user, body)


@router.delete("/goals/{goal_id}", status_code=204)
async def goal_delete(
    goal_id: str,
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
) -> Response:
    try:
        tracker.delete_goal(user, goal_id)
    except OrbitError as exc:
        raise HTTPException(status_code=status_code_for(exc), detail=f"Unknown goal: {goal_id}")
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# /orbit/logs
# ---------------------------------------------------------------------------


@router.get("/logs")
async def logs_list(
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
    from_date: str | None = Query(default=None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: str | None = Query(default=None, alias="to", description="End date (YYYY-MM-DD)"),
) -> DailyLogs:
    logs = tracker.state(user).logs()
    start = _parse_date(from_date, "from").isoformat() if from_date else None
    end = _parse_date(to_date, "to").isoformat() if to_date else None
    return {
        day: entries
        for day, entries in sorted(logs.items())
        if (start is None or day >= start) and (end is None or day <= end)
    }


@router.put("/logs/{day}/{goal_id}", response_model=ToggleResult)
async def log_set(
    day: str,
    goal_id: str,
    body: LogUpdate,
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
) -> ToggleResult:
    try:
        return tracker.set_status(user, day, goal_id, body.status)
    except OrbitError as exc:
        raise HTTPException(status_code=status_code_for(exc), detail=str(exc))


# ---------------------------------------------------------------------------
# /orbit/stats, /orbit/achievements, /orbit/tiers
# ---------------------------------------------------------------------------


@router.get("/stats")
async def stats_detail(
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
) -> dict:
    stats = tracker.stats(user)
    tier = tier_of(stats.level)
    return {
        "stats": stats.model_dump(by_alias=True),
        "levelProgress": level_progress(stats).model_dump(by_alias=True),
        "longestStreak": longest_streak(tracker.state(user).logs()),
        "tier": {"name": tier.name, "color": tier.color, "nextTierLevel": tier.next_tier_level},
        "achievements": sorted(unlocked_achievement_ids(stats)),
    }


@router.get("/achievements")
async def achievements_list(
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
) -> list[dict]:
    return achievement_board(tracker.stats(user))


@router.get("/tiers")
async def tiers_list() -> list[dict]:
    return [
        {"name": t.name, "color": t.color, "minLevel": t.min_level, "nextTierLevel": t.next_tier_level}
        for t in list_tiers()
    ]


@router.get("/templates")
async def templates_list() -> list[dict]:
    return [{"title": t.title, "icon": t.icon, "color": t.color} for t in list_templates()]


# ---------------------------------------------------------------------------
# /orbit/profile
# ---------------------------------------------------------------------------


@router.put("/profile")
async def profile_update(
    body: ProfileUpdate,
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
) -> dict:
    country = body.country.upper() if body.country else body.country
    if country == GLOBAL_COUNTRY.upper():
        country = GLOBAL_COUNTRY
    if country is not None and country not in COUNTRIES:
        raise HTTPException(status_code=422, detail=f"Unknown country: {body.country}")
    tracker.state(user).set_country(country)
    return {"userId": user.id, "country": country}
