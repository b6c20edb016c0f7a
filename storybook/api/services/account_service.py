"""Account service: profile bootstrap, plan limits and story credits."""

import logging
from dataclasses import dataclass
from typing import Optional

from ...core.errors import ChildLimitReachedError, CreditsExhaustedError
from ..database.account_repository import AccountRepository, ChildRepository
from ..models.enums import SubscriptionTier
from ..models.responses import (
    ChildResponse,
    ProfileResponse,
    SubscriptionResponse,
    TierFeaturesResponse,
)
from .subscriptions import DEFAULT_TIER, TIER_FEATURES, SubscriptionStatus, tier_limits

logger = logging.getLogger(__name__)

DEFAULT_CHILD_NAME = "Child"
DEFAULT_CHILD_AVATAR = "👶"


@dataclass
class AuthUser:
    """The authenticated caller."""

    id: str
    email: Optional[str] = None


def default_display_name(email: Optional[str]) -> str:
    """Display name for a new profile: the email's local part, or "User"."""
    if email and "@" in email:
        local = email.split("@", 1)[0].strip()
        if local:
            return local
    return "User"


class AccountService:
    """Profile, subscription and child profile rules."""

    def __init__(self, accounts: AccountRepository, children: Optional[ChildRepository] = None):
        self.accounts = accounts
        self.children = children

    async def get_or_create_profile(self, user: AuthUser) -> ProfileResponse:
        """Return the profile, creating it and the default plan on first access."""
        profile = await self.accounts.get_profile(user.id)
        if profile:
            return profile

        logger.info(f"Creating profile for user {user.id}")
        profile = await self.accounts.create_profile(
            user.id, user.email, default_display_name(user.email)
        )
        if await self.accounts.get_subscription(user.id) is None:
            await self.accounts.create_subscription(
                user.id,
                tier_limits(DEFAULT_TIER),
                trial_months=TIER_FEATURES[DEFAULT_TIER]["trial_months"],
            )
        return profile

    async def get_status(self, user: AuthUser) -> SubscriptionStatus:
        subscription = await self.accounts.get_subscription(user.id)
        if subscription is None:
            await self.get_or_create_profile(user)
            subscription = await self.accounts.get_subscription(user.id)
        return SubscriptionStatus(
            subscription=subscription,
            is_admin=await self.accounts.is_admin(user.id),
        )

    async def get_subscription(self, user: AuthUser) -> SubscriptionResponse:
        status = await self.get_status(user)
        return to_subscription_response(status)

    async def change_tier(self, user: AuthUser, tier: SubscriptionTier) -> SubscriptionResponse:
        """Switch plan, copying its limits and resetting used credits."""
        await self.get_status(user)
        await self.accounts.change_tier(user.id, tier_limits(tier))
        logger.info(f"User {user.id} changed tier to {tier.value}")
        return await self.get_subscription(user)

    async def consume_story_credit(self, user: AuthUser) -> SubscriptionStatus:
        """Check and consume one story credit.

        Raises:
            CreditsExhaustedError: If the user has no credits left
        """
        status = await self.get_status(user)
        if status.is_admin:
            return status
        if not status.can_create_story or not await self.accounts.use_story_credit(user.id):
            raise CreditsExhaustedError()
        return status

    async def create_child(self, user: AuthUser, fields: dict) -> ChildResponse:
        """Create a child profile within the plan's child limit.

        Raises:
            ChildLimitReachedError: If the plan's limit is already reached
        """
        status = await self.get_status(user)
        limit = status.max_children
        if limit is not None and await self.children.count_children(user.id) >= limit:
            raise ChildLimitReachedError()

        fields = dict(fields)
        fields["name"] = (fields.get("name") or "").strip() or DEFAULT_CHILD_NAME
        fields["avatar_emoji"] = fields.get("avatar_emoji") or DEFAULT_CHILD_AVATAR
        return await self.children.create_child(user.id, fields)


def to_subscription_response(status: SubscriptionStatus) -> SubscriptionResponse:
    subscription = status.subscription or {
        **tier_limits(DEFAULT_TIER),
        "used_credits": 0,
    }
    return SubscriptionResponse(
        **subscription,
        is_admin=status.is_admin,
        remaining_credits=status.remaining_credits,
        is_in_trial=status.is_in_trial,
        can_create_story=status.can_create_story,
        features=status.features(),
    )


def list_plans() -> list[TierFeaturesResponse]:
    """Every plan, cheapest first."""
    return [
        TierFeaturesResponse(
            tier=tier,
            monthly_credits=plan["monthly_credits"],
            max_pages=plan["max_pages"],
            max_children=plan["max_children"],
            price_tl=plan["price_tl"],
            trial_months=plan["trial_months"],
            features=plan["features"],
        )
        for tier, plan in TIER_FEATURES.items()
    ]
