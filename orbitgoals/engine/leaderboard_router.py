"""Leaderboard endpoint: ranked entries per period bucket."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from orbitgoals.auth import current_user, verify_api_key
from orbitgoals.engine.leaderboard import LeaderboardFilter
from orbitgoals.engine.models import Identity, LeaderboardEntry, Period
from orbitgoals.engine.sync import RemoteSyncAdapter
from orbitgoals.services import get_sync

router = APIRouter(prefix="/orbit", tags=["leaderboard"], dependencies=[Depends(verify_api_key)])


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(
    user: Identity = Depends(current_user),
    sync: RemoteSyncAdapter = Depends(get_sync),
    period: Period = Query(default=Period.daily),
    scope: str = Query(default="global", pattern="^(global|country|friends)$"),
    country: str | None = Query(default=None, description="ISO code, used with scope=country"),
) -> list[LeaderboardEntry]:
    """Top entries for the current bucket; the caller is always present unless filtered out."""
    return await sync.fetch_ranked(period, user, LeaderboardFilter.parse(scope, country))
