"""AI coach endpoints: always answer, canned when the model is unavailable."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from orbitgoals.auth import current_user, verify_api_key
from orbitgoals.engine.coach import Coach, daily_quote
from orbitgoals.engine.models import AIAnalysisResult, HabitSuggestion, Identity, WeeklyReview
from orbitgoals.engine.tracker import HabitTracker
from orbitgoals.services import get_coach, get_tracker

router = APIRouter(prefix="/orbit/coach", tags=["coach"], dependencies=[Depends(verify_api_key)])


class SuggestionRequest(BaseModel):
    bio: str = ""


class ChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=2000)


@router.get("/analysis", response_model=AIAnalysisResult)
async def analysis(
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
    coach: Coach = Depends(get_coach),
    month: str | None = Query(default=None, description="Month (YYYY-MM), default current"),
) -> AIAnalysisResult:
    target = tracker.today()
    if month:
        try:
            target = date.fromisoformat(f"{month}-01")
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Invalid month: {month}")
    state = tracker.state(user)
    return await coach.analyze_progress(state.goals(), state.logs(), target)


@router.post("/suggestions", response_model=list[HabitSuggestion])
async def suggestions(
    body: SuggestionRequest,
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
    coach: Coach = Depends(get_coach),
) -> list[HabitSuggestion]:
    titles = [g.title for g in tracker.list_goals(user)]
    return await coach.suggest_habits(body.bio, titles)


@router.get("/weekly-review", response_model=WeeklyReview)
async def weekly_review(
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
    coach: Coach = Depends(get_coach),
    week_start: date | None = Query(default=None, description="First day of the week, default Monday"),
) -> WeeklyReview:
    today = tracker.today()
    start = week_start or date.fromordinal(today.toordinal() - today.weekday())
    state = tracker.state(user)
    return await coach.weekly_review(state.goals(), state.logs(), start)


@router.get("/motivation")
async def motivation(
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
    coach: Coach = Depends(get_coach),
) -> dict:
    state = tracker.state(user)
    return {"message": await coach.motivation(state.goals(), state.logs(), tracker.today())}


@router.post("/chat")
async def chat(
    body: ChatRequest,
    user: Identity = Depends(current_user),
    tracker: HabitTracker = Depends(get_tracker),
    coach: Coach = Depends(get_coach),
) -> dict:
    if not body.message.strip():
        raise HTTPException(status_code=422, detail="Empty message")
    state = tracker.state(user)
    reply = await coach.chat_reply(state.goals(), state.logs(), body.message, tracker.today())
    return {"sender": "ai", "text": reply}


@router.get("/quote")
async def quote() -> dict:
    q = daily_quote()
    return {"text": q.text, "author": q.author}
