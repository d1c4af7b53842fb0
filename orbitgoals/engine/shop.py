"""Rewards shop and daily spin wheel, paid for with locally stored coins/XP."""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from orbitgoals.engine.errors import (
    AlreadyOwnedError,
    InsufficientCoinsError,
    ShopItemNotFoundError,
    SpinUnavailableError,
)
from orbitgoals.engine.local_store import LocalStore, UserState
from orbitgoals.engine.models import Identity, SpinResult, Wallet

logger = logging.getLogger(__name__)

BOOSTER_DURATION = timedelta(hours=24)


@dataclass(frozen=True, slots=True)
class ShopItem:
    id: str
    type: str  # "theme" | "coupon" | "badge" | "avatar" | "booster" | "premium"
    title: str
    description: str
    cost: int  # 0 for real-money items
    value: str | None = None


SHOP_ITEMS: tuple[ShopItem, ...] = (
    ShopItem("premium_lifetime", "premium", "Orbit Premium (Lifetime)",
             "Unlock Advanced Analytics, PDF Reports & Exclusive Badges.", 0, "PRO"),
    ShopItem("booster_xp_2x", "booster", "Double XP Potion", "Earn 2x XP & Coins for 24 hours.", 400, "24h"),
    ShopItem("frame_gold", "avatar", "Golden Halo", "Shine on the leaderboard.", 1000, "ring-amber-400"),
    ShopItem("frame_neon", "avatar", "Cyber Pulse", "Neon cyan border.", 800, "ring-cyan-500"),
    ShopItem("frame_rose", "avatar", "Rose Aura", "Elegant rose glow.", 600, "ring-rose-500"),
    ShopItem("theme_sunset", "theme", "Sunset Blvd", "Warm gradients for cold days.", 500,
             "from-orange-500 to-rose-500"),
    ShopItem("theme_cyber", "theme", "Cyberpunk", "Neon vibes only.", 800, "from-cyan-500 to-fuchsia-600"),
    ShopItem("theme_forest", "theme", "Deep Forest", "Calm and focused green.", 300,
             "from-emerald-600 to-teal-800"),
    ShopItem("coupon_streak_freeze", "coupon", "Streak Freeze", "Save your streak for one day.", 150, "FREEZE-1"),
    ShopItem("badge_supporter", "badge", "Early Supporter", "Show you were here first.", 1000),
)

# Item types that can only be owned once
UNIQUE_TYPES = {"theme", "avatar", "badge"}


@dataclass(frozen=True, slots=True)
class Prize:
    label: str
    value: int


PRIZES: tuple[Prize, ...] = (
    Prize("50 XP", 50),
    Prize("20 XP", 20),
    Prize("100 XP", 100),
    Prize("50 XP", 50),
    Prize("JACKPOT", 500),
    Prize("20 XP", 20),
)


def list_items(item_type: str | None = None) -> list[ShopItem]:
    return [i for i in SHOP_ITEMS if item_type is None or i.type == item_type]


def get_item(item_id: str) -> ShopItem | None:
    return next((i for i in SHOP_ITEMS if i.id == item_id), None)


class Shop:
    def __init__(
        self,
        store: LocalStore,
        today: Callable[[], date] = date.today,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.today = today
        self.rng = rng or random.Random()

    def wallet(self, user: Identity) -> Wallet:
        state = UserState(self.store, user.id)
        return Wallet(
            coins=state.coins(),
            bonus_points=state.bonus_points(),
            unlocked_items=state.unlocked_items(),
            active_avatar_frame=state.active_avatar_frame(),
            booster_expiry=state.booster_expiry(),
            booster_active=state.booster_active(),
            is_pro=state.is_pro(),
        )

    def purchase(self, user: Identity, item_id: str, now: datetime | None = None) -> Wallet:
        """Buy a coin-priced item. Premium items go through PaymentService instead."""
        item = get_item(item_id)
        if item is None or item.type == "premium":
            raise ShopItemNotFoundError(item_id)

        now = now or datetime.now(timezone.utc)
        state = UserState(self.store, user.id)
        owned = state.unlocked_items()
        if item.type in UNIQUE_TYPES and item.id in owned:
            raise AlreadyOwnedError(item.id)
        if item.type == "booster" and state.booster_active(now):
            raise AlreadyOwnedError(item.id)

        coins = state.coins()
        if coins < item.cost:
            raise InsufficientCoinsError(f"{item.id} costs {item.cost}, balance is {coins}")
        state.set_coins(coins - item.cost)

        if item.type == "booster":
            state.set_booster_expiry(now + BOOSTER_DURATION)
        else:
            state.set_unlocked_items([*owned, item.id])
        logger.info("User %s bought %s for %d coins", user.id, item.id, item.cost)
        return self.wallet(user)

    def equip_avatar(self, user: Identity, item_id: str) -> Wallet:
        item = get_item(item_id)
        state = UserState(self.store, user.id)
        if item is None or item.type != "avatar" or item.id not in state.unlocked_items():
            raise ShopItemNotFoundError(item_id)
        state.set_active_avatar_frame(item.id)
        return self.wallet(user)

    def spin(self, user: Identity) -> SpinResult:
        """One spin per calendar day; the prize is added to bonus XP."""
        state = UserState(self.store, user.id)
        today = self.today()
        if state.last_spin_date() == today:
            raise SpinUnavailableError(f"Already spun on {today.isoformat()}")

        prize = self.rng.choice(PRIZES)
        boosted = state.booster_active()
        value = prize.value * 2 if boosted else prize.value
        bonus = state.bonus_points() + value
        state.set_bonus_points(bonus)
        state.set_last_spin_date(today)
        return SpinResult(label=prize.label, value=value, bonus_points=bonus, boosted=boosted)
