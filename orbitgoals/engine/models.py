"""OrbitGoals contract: Pydantic v2 models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CompletionStatus(str, Enum):
    completed = "completed"
    skipped = "skipped"
    pending = "pending"


class Period(str, Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class PaymentStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# Map of date string (YYYY-MM-DD) -> {goal_id: status}
DailyLogs = dict[str, dict[str, CompletionStatus]]


class CamelModel(BaseModel):
    """Serializes with camelCase aliases, accepts either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Identity(BaseModel):
    id: str
    name: str = "Guest"
    email: str = ""
    photo_url: str | None = None


class Goal(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str
    color: str
    icon: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    time: str | None = None  # "HH:MM"
    reminder_enabled: bool = False


class GoalCreate(CamelModel):
    title: str = Field(min_length=1, max_length=120)
    color: str | None = None
    icon: str | None = None
    time: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    reminder_enabled: bool = False

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be blank")
        return value


class LogUpdate(CamelModel):
    status: CompletionStatus


class UserStats(CamelModel):
    total_completed: int = 0
    current_streak: int = 0  # Highest current streak among all goals
    perfect_days: int = 0
    total_points: int = 0
    level: int = 1


class LevelProgress(CamelModel):
    level: int
    next_level_points: int
    progress_pct: float


class ToggleResult(CamelModel):
    date: str
    goal_id: str
    previous: CompletionStatus
    status: CompletionStatus
    points_delta: int = 0
    tasks_delta: int = 0
    coins: int = 0
    stats: UserStats


class LeaderboardEntry(CamelModel):
    user_id: str
    display_name: str
    photo_url: str | None = None
    points: int = 0
    tasks_completed: int = 0
    rank: int | None = None
    country: str | None = None
    tier: str | None = None
    avatar_frame: str | None = None


class PaymentRequest(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    user_name: str
    user_email: str
    amount: int
    status: PaymentStatus = PaymentStatus.pending
    date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    transaction_id: str | None = None


class AdminStats(CamelModel):
    total_users: int = 0
    revenue: int = 0
    active_subs: int = 0


class AIAnalysisResult(CamelModel):
    summary: str
    score: int = Field(ge=0, le=100)
    tips: list[str] = Field(default_factory=list)
    motivational_quote: str


class HabitSuggestion(CamelModel):
    title: str
    reason: str
    icon: str
    color: str
    time: str | None = None
    difficulty: str = Field(pattern=r"^(Easy|Medium|Hard)$")


class WeeklyReview(CamelModel):
    week_score: int = Field(ge=0, le=100)
    summary: str
    best_day: str
    focus_area: str
    action_item: str


class SpinResult(CamelModel):
    label: str
    value: int
    bonus_points: int
    boosted: bool = False


class Wallet(CamelModel):
    coins: int = 0
    bonus_points: int = 0
    unlocked_items: list[str] = Field(default_factory=list)
    active_avatar_frame: str | None = None
    booster_expiry: datetime | None = None
    booster_active: bool = False
    is_pro: bool = False
