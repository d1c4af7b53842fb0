"""AI coach: prompts over goals/logs sent to the generative text service.

Every entry point has a canned answer. It is returned when no API key is
configured, when the call fails, and when the reply does not validate, so
callers always get a well-formed result.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from google import genai
from google.genai import types
from pydantic import TypeAdapter, ValidationError

from orbitgoals.engine.models import (
    AIAnalysisResult,
    CompletionStatus,
    DailyLogs,
    Goal,
    HabitSuggestion,
    WeeklyReview,
)
from orbitgoals.engine.stats import goal_summaries

logger = logging.getLogger(__name__)

COACH_PERSONA = (
    "You are Orbit, a friendly and motivational habit coaching AI. "
    "Keep responses concise (under 3 sentences usually). "
    "Be encouraging but practical."
)

NO_KEY_ANALYSIS = AIAnalysisResult(
    summary="API Key is missing. Please provide a valid API Key to use the AI Coach.",
    score=0,
    tips=["Check your environment variables."],
    motivational_quote="The journey of a thousand miles begins with a single step.",
)

FALLBACK_ANALYSIS = AIAnalysisResult(
    summary="Unable to analyze data at the moment. Keep going!",
    score=50,
    tips=["Consistency is key.", "Try setting reminders.", "Reflect on your 'why'."],
    motivational_quote="Fall seven times, stand up eight.",
)

FALLBACK_SUGGESTIONS: tuple[HabitSuggestion, ...] = (
    HabitSuggestion(title="Drink 2L Water", reason="Hydration lifts energy and focus.",
                    icon="💧", color="bg-blue-500", difficulty="Easy"),
    HabitSuggestion(title="Read 15 Mins", reason="A small daily dose compounds into many books a year.",
                    icon="📚", color="bg-purple-500", time="21:00", difficulty="Easy"),
    HabitSuggestion(title="Morning Jog", reason="Starting the day moving sets a productive tone.",
                    icon="🏃", color="bg-emerald-500", time="07:00", difficulty="Medium"),
)

FALLBACK_REVIEW = WeeklyReview(
    week_score=50,
    summary="Every logged day is data. Keep showing up and the pattern will follow.",
    best_day="Not enough data",
    focus_area="Consistency",
    action_item="Pick one habit and complete it every day this week.",
)

FALLBACK_MOTIVATION = "Small habits, repeated daily, create massive results. Keep going!"
FALLBACK_CHAT = "I'm feeling a bit disconnected. Let's try again later."


@dataclass(frozen=True, slots=True)
class Quote:
    text: str
    author: str


QUOTES: tuple[Quote, ...] = (
    Quote("Small habits, repeated daily, create massive results.", "James Clear"),
    Quote("Consistency is the DNA of mastery.", "Robin Sharma"),
    Quote("Your future is found in your daily routine.", "John C. Maxwell"),
    Quote("Don't break the chain.", "Jerry Seinfeld"),
    Quote("Success is the sum of small efforts, repeated day in and day out.", "Robert Collier"),
    Quote("It does not matter how slowly you go as long as you do not stop.", "Confucius"),
    Quote("We are what we repeatedly do. Excellence, then, is not an act, but a habit.", "Aristotle"),
    Quote("The secret of your future is hidden in your daily routine.", "Mike Murdock"),
    Quote("Motivation is what gets you started. Habit is what keeps you going.", "Jim Ryun"),
    Quote("First we make our habits, then our habits make us.", "John Dryden"),
    Quote("You will never change your life until you change something you do daily.", "John C. Maxwell"),
    Quote("Discipline is choosing between what you want now and what you want most.", "Abraham Lincoln"),
    Quote("The only way to do great work is to love what you do.", "Steve Jobs"),
    Quote("Believe you can and you're halfway there.", "Theodore Roosevelt"),
    Quote("Start where you are. Use what you have. Do what you can.", "Arthur Ashe"),
)

_SUGGESTIONS = TypeAdapter(list[HabitSuggestion])


def daily_quote(today: date | None = None) -> Quote:
    """Deterministic quote of the day (cycles by day of year)."""
    today = today or date.today()
    return QUOTES[today.timetuple().tm_yday % len(QUOTES)]


def _summary_lines(goals: Sequence[Goal], logs: DailyLogs) -> str:
    lines = [f"{s['title']}: {s['completed']} completed, {s['skipped']} skipped" for s in goal_summaries(goals, logs)]
    return "\n".join(lines) or "No goals set yet."


def _week_logs(logs: DailyLogs, week_start: date) -> DailyLogs:
    days = {(week_start + timedelta(days=i)).isoformat() for i in range(7)}
    return {d: entries for d, entries in logs.items() if d in days}


class Coach:
    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.5-flash",
        client: genai.Client | None = None,
    ) -> None:
        self.model = model
        if client is None and api_key:
            client = genai.Client(api_key=api_key)
        self.client = client

    @property
    def enabled(self) -> bool:
        return self.client is not None

    async def _generate(self, prompt: str, *, json_mode: bool = False, system: str | None = None) -> str | None:
        """Raw reply text, or None when disabled or failed."""
        if self.client is None:
            return None
        config = types.GenerateContentConfig(
            temperature=0.7,
            response_mime_type="application/json" if json_mode else "text/plain",
            system_instruction=system,
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model, contents=prompt, config=config
            )
        except Exception as exc:
            logger.error("AI request failed: %s", exc)
            return None
        return response.text or None

    async def analyze_progress(self, goals: Sequence[Goal], logs: DailyLogs, month: date) -> AIAnalysisResult:
        if not self.enabled:
            return NO_KEY_ANALYSIS
        month_logs = {d: e for d, e in logs.items() if d.startswith(f"{month.year:04d}-{month.month:02d}")}
        prompt = (
            f"Analyze the following habit tracking data for the month of {month.strftime('%B %Y')}.\n\n"
            f"Goals Summary:\n{_summary_lines(goals, month_logs)}\n\n"
            f"Total Logged Days: {len(month_logs)}\n\n"
            "Provide a JSON object with keys: summary (max 2 sentences), score (integer 0-100 "
            "based on consistency), tips (three actionable tips), motivationalQuote."
        )
        text = await self._generate(prompt, json_mode=True)
        if text is None:
            return FALLBACK_ANALYSIS
        try:
            return AIAnalysisResult.model_validate_json(text)
        except ValidationError as exc:
            logger.warning("Discarding malformed AI analysis: %s", exc)
            return FALLBACK_ANALYSIS

    async def suggest_habits(self, bio: str, existing_titles: Sequence[str]) -> list[HabitSuggestion]:
        prompt = (
            f"User bio: {bio or 'Not provided'}\n"
            f"Existing habits: {', '.join(existing_titles) or 'None'}\n\n"
            "Suggest 3 new habits that complement the existing ones. Respond with a JSON array of objects "
            "with keys: title, reason, icon (one emoji), color (a Tailwind bg-*-500 class), "
            "time (optional HH:MM), difficulty (Easy, Medium or Hard)."
        )
        text = await self._generate(prompt, json_mode=True)
        if text is None:
            return list(FALLBACK_SUGGESTIONS)
        try:
            suggestions = _SUGGESTIONS.validate_json(text)
        except ValidationError as exc:
            logger.warning("Discarding malformed habit suggestions: %s", exc)
            return list(FALLBACK_SUGGESTIONS)
        existing = {t.strip().lower() for t in existing_titles}
        fresh = [s for s in suggestions if s.title.strip().lower() not in existing]
        return fresh or list(FALLBACK_SUGGESTIONS)

    async def weekly_review(self, goals: Sequence[Goal], logs: DailyLogs, week_start: date) -> WeeklyReview:
        week = _week_logs(logs, week_start)
        per_day = "\n".join(
            f"{d}: {sum(1 for s in entries.values() if s == CompletionStatus.completed)} completed"
            for d, entries in sorted(week.items())
        )
        prompt = (
            f"Weekly review for the week starting {week_start.isoformat()}.\n"
            f"Goals Summary:\n{_summary_lines(goals, week)}\n"
            f"Per day:\n{per_day or 'No logs'}\n\n"
            "Respond with a JSON object with keys: weekScore (integer 0-100), summary, bestDay, "
            "focusArea, actionItem."
        )
        text = await self._generate(prompt, json_mode=True)
        if text is None:
            return FALLBACK_REVIEW
        try:
            return WeeklyReview.model_validate_json(text)
        except ValidationError as exc:
            logger.warning("Discarding malformed weekly review: %s", exc)
            return FALLBACK_REVIEW

    async def motivation(self, goals: Sequence[Goal], logs: DailyLogs, today: date) -> str:
        day_log = logs.get(today.isoformat(), {})
        done = sum(1 for g in goals if day_log.get(g.id) == CompletionStatus.completed)
        prompt = (
            f"The user completed {done} of {len(goals)} habits today.\n"
            f"Goals Summary:\n{_summary_lines(goals, logs)}\n\n"
            "Write one short motivational message (max 2 sentences)."
        )
        return (await self._generate(prompt, system=COACH_PERSONA)) or FALLBACK_MOTIVATION

    async def chat_reply(self, goals: Sequence[Goal], logs: DailyLogs, message: str, today: date) -> str:
        day_log = logs.get(today.isoformat(), {})
        context = "\n".join(
            f"- {g.title}: Status today is {CompletionStatus(day_log.get(g.id, 'pending')).value}" for g in goals
        )
        system = f"{COACH_PERSONA}\n\nThe user has the following goals:\n{context or 'No goals set yet.'}"
        return (await self._generate(message, system=system)) or FALLBACK_CHAT
