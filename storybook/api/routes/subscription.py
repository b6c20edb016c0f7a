"""Subscription plans and the caller's subscription."""

from fastapi import APIRouter

from ..dependencies import AccountSvc, CurrentUser
from ..models.requests import ChangeTierRequest
from ..models.responses import SubscriptionResponse, TierFeaturesResponse
from ..services.account_service import list_plans

router = APIRouter()


@router.get("", response_model=SubscriptionResponse, summary="Get my subscription")
async def get_subscription(user: CurrentUser, service: AccountSvc):
    return await service.get_subscription(user)


@router.get("/plans", response_model=list[TierFeaturesResponse], summary="List plans")
async def get_plans():
    return list_plans()


@router.put("/tier", response_model=SubscriptionResponse, summary="Change my plan")
async def change_tier(request: ChangeTierRequest, user: CurrentUser, service: AccountSvc):
    """Copies the plan's limits and resets used credits. Payment is handled elsewhere."""
    return await service.change_tier(user, request.tier)
