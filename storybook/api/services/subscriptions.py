"""
Subscription plans and the limits derived from them.

Plan limits are copied onto the user's subscription row when the plan is
chosen; boolean features are looked up from the plan table.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..models.enums import SubscriptionTier

UNLIMITED = -1

# Fallbacks when a user has no subscription row yet
DEFAULT_MAX_PAGES = 5
DEFAULT_MAX_CHILDREN = 1

FEATURE_NAMES = (
    "basic_personalization",
    "advanced_personalization",
    "cover_design_selection",
    "friend_sharing",
    "unlimited_friend_sharing",
    "basic_stats",
    "detailed_stats",
    "advanced_stats",
    "photo_story",
    "audio_story",
    "font_selection",
    "unlimited_revision",
    "favorite_pages",
    "custom_illustration",
    "weekly_themes",
    "family_sharing",
    "print_ready",
    "library_backup",
    "unlimited_stories",
    "unlimited_pages",
)


def _features(*enabled: str) -> dict[str, bool]:
    return {name: name in enabled for name in FEATURE_NAMES}


_EXPLORER = ("basic_personalization", "basic_stats", "friend_sharing", "photo_story", "audio_story")
_HERO = _EXPLORER + (
    "advanced_personalization",
    "cover_design_selection",
    "detailed_stats",
    "font_selection",
    "favorite_pages",
    "weekly_themes",
)
_ENDLESS = _HERO + (
    "unlimited_friend_sharing",
    "advanced_stats",
    "unlimited_revision",
    "custom_illustration",
    "family_sharing",
    "print_ready",
    "library_backup",
    "unlimited_stories",
    "unlimited_pages",
)

# Plan table, cheapest first
TIER_FEATURES: dict[SubscriptionTier, dict] = {
    SubscriptionTier.MINIK_MASAL: {
        "monthly_credits": 3,
        "max_pages": 5,
        "max_children": 1,
        "price_tl": 0,
        "trial_months": 1,
        "features": _features("basic_personalization", "basic_stats"),
    },
    SubscriptionTier.MASAL_KESFIFCISI: {
        "monthly_credits": 10,
        "max_pages": 10,
        "max_children": 2,
        "price_tl": 79,
        "trial_months": 0,
        "features": _features(*_EXPLORER),
    },
    SubscriptionTier.MASAL_KAHRAMANI: {
        "monthly_credits": 30,
        "max_pages": 15,
        "max_children": 3,
        "price_tl": 149,
        "trial_months": 0,
        "features": _features(*_HERO),
    },
    SubscriptionTier.SONSUZ_MASAL: {
        "monthly_credits": UNLIMITED,
        "max_pages": 20,
        "max_children": 5,
        "price_tl": 249,
        "trial_months": 0,
        "features": _features(*_ENDLESS),
    },
}

DEFAULT_TIER = SubscriptionTier.MINIK_MASAL


def tier_limits(tier: SubscriptionTier) -> dict:
    """Columns copied onto a subscription row for a plan."""
    plan = TIER_FEATURES[SubscriptionTier(tier)]
    return {
        "tier": SubscriptionTier(tier).value,
        "monthly_credits": plan["monthly_credits"],
        "max_pages": plan["max_pages"],
        "max_children": plan["max_children"],
        "price_tl": plan["price_tl"],
    }


@dataclass
class SubscriptionStatus:
    """A subscription row plus the caller's admin flag.

    Admins are never limited.
    """

    subscription: Optional[dict]
    is_admin: bool = False

    @property
    def plan(self) -> Optional[dict]:
        if not self.subscription:
            return None
        return TIER_FEATURES.get(SubscriptionTier(self.subscription["tier"]))

    @property
    def remaining_credits(self) -> int:
        """Credits left this period, or -1 for unlimited."""
        if self.is_admin:
            return UNLIMITED
        if not self.subscription:
            return 0
        if self.subscription["monthly_credits"] == UNLIMITED:
            return UNLIMITED
        return max(0, self.subscription["monthly_credits"] - self.subscription["used_credits"])

    @property
    def is_in_trial(self) -> bool:
        trial_ends_at: Optional[datetime] = (self.subscription or {}).get("trial_ends_at")
        return bool(trial_ends_at and trial_ends_at > datetime.now(timezone.utc))

    @property
    def can_create_story(self) -> bool:
        remaining = self.remaining_credits
        return self.is_admin or remaining == UNLIMITED or remaining > 0

    @property
    def max_children(self) -> Optional[int]:
        """Child profile limit, or None for unlimited."""
        if self.is_admin:
            return None
        if not self.subscription:
            return DEFAULT_MAX_CHILDREN
        return self.subscription.get("max_children") or DEFAULT_MAX_CHILDREN

    def max_pages(self, requested: int) -> int:
        """Clamp a requested page count to the plan."""
        if self.is_admin:
            return requested
        plan = self.plan
        if not plan:
            return min(requested, DEFAULT_MAX_PAGES)
        if plan["features"]["unlimited_pages"]:
            return requested
        limit = self.subscription.get("max_pages") or plan["max_pages"]
        return min(requested, limit)

    def has_feature(self, name: str) -> bool:
        if self.is_admin:
            return True
        plan = self.plan
        if not plan:
            return False
        return plan["features"].get(name, False)

    def features(self) -> dict[str, bool]:
        return {name: self.has_feature(name) for name in FEATURE_NAMES}
