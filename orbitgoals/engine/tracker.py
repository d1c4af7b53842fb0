"""Habit tracking service: goals, daily logs and the toggle data flow.

A toggle updates the local log first (the optimistic, authoritative state),
then derives the signed delta and hands it to the sync adapter without
waiting for it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from orbitgoals.engine.errors import GoalNotFoundError, InvalidLogDateError
from orbitgoals.engine.local_store import LocalStore, UserState
from orbitgoals.engine.models import CompletionStatus, Goal, GoalCreate, Identity, ToggleResult, UserStats
from orbitgoals.engine.stats import compute_stats, status_delta
from orbitgoals.engine.sync import RemoteSyncAdapter
from orbitgoals.engine.templates import COLORS, ICONS

logger = logging.getLogger(__name__)


class HabitTracker:
    def __init__(
        self,
        store: LocalStore,
        sync: RemoteSyncAdapter,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.sync = sync
        self.today = today

    def state(self, user: Identity) -> UserState:
        return UserState(self.store, user.id)

    # -- goals --------------------------------------------------------------

    def list_goals(self, user: Identity) -> list[Goal]:
        return self.state(user).goals()

    def create_goal(self, user: Identity, data: GoalCreate) -> Goal:
        state = self.state(user)
        goal = Goal(
            title=data.title,
            color=data.color or COLORS[0],
            icon=data.icon or ICONS[0],
            time=data.time,
            reminder_enabled=data.reminder_enabled,
        )
        state.save_goals([*state.goals(), goal])
        logger.info("Goal %s created for %s", goal.id, user.id)
        return goal

    def delete_goal(self, user: Identity, goal_id: str) -> None:
        """Drop the goal from the active list. Logs keyed by its id are kept."""
        state = self.state(user)
        goals = state.goals()
        remaining = [g for g in goals if g.id != goal_id]
        if len(remaining) == len(goals):
            raise GoalNotFoundError(goal_id)
        state.save_goals(remaining)

    # -- logs ---------------------------------------------------------------

    def _parse_day(self, day: str) -> date:
        try:
            parsed = date.fromisoformat(day)
        except ValueError:
            raise InvalidLogDateError(f"Invalid date: {day}")
        if parsed.isoformat() != day:
            raise InvalidLogDateError(f"Date must be YYYY-MM-DD: {day}")
        if parsed > self.today():
            raise InvalidLogDateError(f"Cannot log a future date: {day}")
        return parsed

    def set_status(
        self,
        user: Identity,
        day: str,
        goal_id: str,
        status: CompletionStatus,
    ) -> ToggleResult:
        self._parse_day(day)
        state = self.state(user)
        goals = state.goals()
        if not any(g.id == goal_id for g in goals):
            raise GoalNotFoundError(goal_id)

        logs = state.logs()
        day_log = logs.setdefault(day, {})
        previous = day_log.get(goal_id, CompletionStatus.pending)
        day_log[goal_id] = status
        state.save_logs(logs)

        points_delta, tasks_delta = status_delta(previous, status)
        coins = state.coins()
        if points_delta:
            multiplier = 2 if state.booster_active() else 1
            coins = max(coins + points_delta * multiplier, 0)
            state.set_coins(coins)
            self.sync.record_delta(user, points_delta, tasks_delta, country=state.country())

        return ToggleResult(
            date=day,
            goal_id=goal_id,
            previous=previous,
            status=status,
            points_delta=points_delta,
            tasks_delta=tasks_delta,
            coins=coins,
            stats=compute_stats(goals, logs, state.bonus_points(), self.today()),
        )

    # -- derived ------------------------------------------------------------

    def stats(self, user: Identity) -> UserStats:
        state = self.state(user)
        return compute_stats(state.goals(), state.logs(), state.bonus_points(), self.today())
