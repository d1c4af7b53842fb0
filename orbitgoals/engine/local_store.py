"""Local durable key-value storage, namespaced per user.

The store is the source of truth for a single user's goals, logs and
wallet. Values are plain JSON-compatible data; readers default missing keys
to empty/zero and skip malformed entries, since stored shapes carry no
version field.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from orbitgoals.engine.models import CompletionStatus, DailyLogs, Goal

logger = logging.getLogger(__name__)

GOALS = "goals"
LOGS = "logs"
BONUS_POINTS = "bonus_points"
COINS = "coins"
UNLOCKED_ITEMS = "unlocked_items"
ACTIVE_AVATAR_FRAME = "active_avatar_frame"
BOOSTER_EXPIRY = "booster_expiry"
IS_PRO = "is_pro"
COUNTRY = "country"
LAST_SPIN_DATE = "last_spin_date"
PAYMENT_REQUESTS = "payment_requests"


class LocalStore(Protocol):
    def get(self, user_id: str, key: str, default: Any = None) -> Any: ...

    def set(self, user_id: str, key: str, value: Any) -> None: ...


class MemoryLocalStore:
    """Dict-backed store; state lives as long as the process."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}

    def get(self, user_id: str, key: str, default: Any = None) -> Any:
        return self._data.get(user_id, {}).get(key, default)

    def set(self, user_id: str, key: str, value: Any) -> None:
        # Round-trip through JSON so callers never share mutable state with the store
        self._data.setdefault(user_id, {})[key] = json.loads(json.dumps(value))


class JsonFileLocalStore:
    """One JSON document per user under `root`."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _user_file(self, user_id: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in user_id)
        return self.root / f"user_{safe}.json"

    def _load(self, user_id: str) -> dict[str, Any]:
        path = self._user_file(user_id)
        if not path.exists():
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable local store %s, starting empty: %s", path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, user_id: str, key: str, default: Any = None) -> Any:
        return self._load(user_id).get(key, default)

    def set(self, user_id: str, key: str, value: Any) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        data = self._load(user_id)
        data[key] = value
        fd, tmp = tempfile.mkstemp(dir=self.root, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self._user_file(user_id))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class UserState:
    """Typed accessors over one user's namespace in a LocalStore."""

    def __init__(self, store: LocalStore, user_id: str) -> None:
        self.store = store
        self.user_id = user_id

    def _get(self, key: str, default: Any = None) -> Any:
        return self.store.get(self.user_id, key, default)

    def _set(self, key: str, value: Any) -> None:
        self.store.set(self.user_id, key, value)

    # -- goals & logs -------------------------------------------------------

    def goals(self) -> list[Goal]:
        goals: list[Goal] = []
        for raw in self._get(GOALS) or []:
            try:
                goals.append(Goal.model_validate(raw))
            except ValidationError:
                logger.debug("Skipping malformed goal for %s: %r", self.user_id, raw)
        return goals

    def save_goals(self, goals: list[Goal]) -> None:
        self._set(GOALS, [g.model_dump(mode="json", by_alias=True) for g in goals])

    def logs(self) -> DailyLogs:
        raw = self._get(LOGS) or {}
        logs: DailyLogs = {}
        if not isinstance(raw, dict):
            return logs
        for day, day_log in raw.items():
            if not isinstance(day_log, dict):
                continue
            parsed: dict[str, CompletionStatus] = {}
            for goal_id, status in day_log.items():
                try:
                    parsed[goal_id] = CompletionStatus(status)
                except ValueError:
                    continue
            logs[day] = parsed
        return logs

    def save_logs(self, logs: DailyLogs) -> None:
        self._set(LOGS, {day: {gid: CompletionStatus(s).value for gid, s in entries.items()}
                         for day, entries in logs.items()})

    # -- wallet -------------------------------------------------------------

    def bonus_points(self) -> int:
        return _as_int(self._get(BONUS_POINTS, 0))

    def set_bonus_points(self, value: int) -> None:
        self._set(BONUS_POINTS, int(value))

    def coins(self) -> int:
        return max(_as_int(self._get(COINS, 0)), 0)

    def set_coins(self, value: int) -> None:
        self._set(COINS, max(int(value), 0))

    def unlocked_items(self) -> list[str]:
        items = self._get(UNLOCKED_ITEMS) or []
        return [i for i in items if isinstance(i, str)] if isinstance(items, list) else []

    def set_unlocked_items(self, items: list[str]) -> None:
        self._set(UNLOCKED_ITEMS, list(items))

    def active_avatar_frame(self) -> str | None:
        value = self._get(ACTIVE_AVATAR_FRAME)
        return value if isinstance(value, str) else None

    def set_active_avatar_frame(self, item_id: str | None) -> None:
        self._set(ACTIVE_AVATAR_FRAME, item_id)

    def booster_expiry(self) -> datetime | None:
        value = self._get(BOOSTER_EXPIRY)
        if not value:
            return None
        try:
            expiry = datetime.fromisoformat(value)
        except (TypeError, ValueError):
            return None
        return expiry if expiry.tzinfo else expiry.replace(tzinfo=timezone.utc)

    def set_booster_expiry(self, expiry: datetime | None) -> None:
        self._set(BOOSTER_EXPIRY, expiry.isoformat() if expiry else None)

    def booster_active(self, now: datetime | None = None) -> bool:
        expiry = self.booster_expiry()
        return expiry is not None and expiry > (now or datetime.now(timezone.utc))

    def is_pro(self) -> bool:
        return bool(self._get(IS_PRO, False))

    def set_pro(self, value: bool) -> None:
        self._set(IS_PRO, bool(value))

    # -- profile ------------------------------------------------------------

    def country(self) -> str | None:
        value = self._get(COUNTRY)
        return value if isinstance(value, str) and value else None

    def set_country(self, code: str | None) -> None:
        self._set(COUNTRY, code)

    def last_spin_date(self) -> date | None:
        value = self._get(LAST_SPIN_DATE)
        try:
            return date.fromisoformat(value) if value else None
        except (TypeError, ValueError):
            return None

    def set_last_spin_date(self, day: date) -> None:
        self._set(LAST_SPIN_DATE, day.isoformat())

    def payment_requests(self) -> list[dict[str, Any]]:
        items = self._get(PAYMENT_REQUESTS) or []
        return [i for i in items if isinstance(i, dict)] if isinstance(items, list) else []

    def set_payment_requests(self, items: list[dict[str, Any]]) -> None:
        self._set(PAYMENT_REQUESTS, items)
