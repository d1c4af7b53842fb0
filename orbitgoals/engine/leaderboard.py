"""Leaderboard assembly: filter, merge the current user, rank.

Rank is a presentation value: it is recomputed here on every read and any
rank carried by an input entry is ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from orbitgoals.engine.local_store import UserState
from orbitgoals.engine.models import Identity, LeaderboardEntry
from orbitgoals.engine.stats import compute_stats
from orbitgoals.engine.tiers import tier_of

GLOBAL_COUNTRY = "Global"

# Shown whenever the remote bucket is empty or unreachable.
DEMO_LEADERBOARD: tuple[LeaderboardEntry, ...] = (
    LeaderboardEntry(user_id="m1", display_name="Cosmic Voyager", points=2450, tasks_completed=45, country="US"),
    LeaderboardEntry(user_id="m2", display_name="Star Walker", points=1980, tasks_completed=38, country="IN"),
    LeaderboardEntry(user_id="m3", display_name="Nebula Surfer", points=1850, tasks_completed=32, country="JP"),
    LeaderboardEntry(user_id="m4", display_name="Orbit Pilot", points=1720, tasks_completed=28, country="GB"),
    LeaderboardEntry(user_id="m5", display_name="Lunar Lander", points=1640, tasks_completed=25, country="DE"),
    LeaderboardEntry(user_id="m6", display_name="Solar Sailor", points=1500, tasks_completed=22, country="US"),
    LeaderboardEntry(user_id="m7", display_name="Comet Chaser", points=1350, tasks_completed=20, country="BR"),
)


@dataclass(frozen=True, slots=True)
class LeaderboardFilter:
    kind: str = "global"  # "global" | "country" | "friends"
    country: str | None = None

    @classmethod
    def parse(cls, scope: str | None, country: str | None = None) -> "LeaderboardFilter":
        scope = (scope or "global").lower()
        if scope == "friends":
            return cls(kind="friends")
        if scope == "country" and country and country.upper() != GLOBAL_COUNTRY.upper():
            return cls(kind="country", country=country.upper())
        return cls()

    def admits(self, entry: LeaderboardEntry, friends: Iterable[str] = ()) -> bool:
        if self.kind == "country":
            return (entry.country or "").upper() == self.country
        if self.kind == "friends":
            return entry.user_id in set(friends)
        return True


def demo_entries() -> list[LeaderboardEntry]:
    return [e.model_copy() for e in DEMO_LEADERBOARD]


def apply_filter(
    entries: Sequence[LeaderboardEntry],
    board_filter: LeaderboardFilter,
    friends: Iterable[str] = (),
) -> list[LeaderboardEntry]:
    friends = set(friends)
    return [e for e in entries if board_filter.admits(e, friends)]


def merge_current_user(
    entries: Sequence[LeaderboardEntry],
    current: LeaderboardEntry | None,
    board_filter: LeaderboardFilter = LeaderboardFilter(),
) -> list[LeaderboardEntry]:
    """Append `current` when absent, unless the active filter excludes it.

    A country view that does not match the user still gets the user when the
    list would otherwise be empty. A friends view always includes the user.
    """
    merged = list(entries)
    if current is None or any(e.user_id == current.user_id for e in merged):
        return merged
    if board_filter.kind == "country" and merged and not board_filter.admits(current):
        return merged
    merged.append(current)
    return merged


def rank_entries(entries: Iterable[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """Stable sort by points DESC and assign ranks 1..N."""
    ordered = sorted(entries, key=lambda e: e.points, reverse=True)
    return [e.model_copy(update={"rank": i}) for i, e in enumerate(ordered, start=1)]


def assemble(
    entries: Sequence[LeaderboardEntry],
    current: LeaderboardEntry | None,
    board_filter: LeaderboardFilter = LeaderboardFilter(),
    friends: Iterable[str] = (),
) -> list[LeaderboardEntry]:
    friends = set(friends)
    if current is not None:
        friends.add(current.user_id)
    filtered = apply_filter(entries, board_filter, friends)
    return rank_entries(merge_current_user(filtered, current, board_filter))


def current_user_entry(
    user: Identity,
    state: UserState,
    today: date | None = None,
) -> LeaderboardEntry:
    """Entry synthesized from locally computed stats."""
    stats = compute_stats(state.goals(), state.logs(), state.bonus_points(), today)
    return LeaderboardEntry(
        user_id=user.id,
        display_name=user.name,
        photo_url=user.photo_url,
        points=stats.total_points,
        tasks_completed=stats.total_completed,
        country=state.country(),
        tier=tier_of(stats.level).name,
        avatar_frame=state.active_avatar_frame(),
    )
