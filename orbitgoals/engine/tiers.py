"""Hardcoded tier bands over level: configuration only."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Tier:
    name: str
    color: str
    min_level: int
    next_tier_level: int | None = None


TIERS: tuple[Tier, ...] = (
    Tier(name="Bronze", color="#cd7f32", min_level=1, next_tier_level=5),
    Tier(name="Silver", color="#c0c0c0", min_level=5, next_tier_level=10),
    Tier(name="Gold", color="#ffd700", min_level=10, next_tier_level=20),
    Tier(name="Diamond", color="#b9f2ff", min_level=20, next_tier_level=None),
)


def tier_of(level: int) -> Tier:
    """Highest tier whose min_level is reached. Levels below 1 count as Bronze."""
    current = TIERS[0]
    for tier in TIERS:
        if level >= tier.min_level:
            current = tier
    return current


def list_tiers() -> list[Tier]:
    return list(TIERS)
