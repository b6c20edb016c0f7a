"""Admin panel endpoints. Every route requires the admin role."""

import logging

from fastapi import APIRouter, HTTPException, status

from ..dependencies import Accounts, AdminRepo, AdminUser
from ..models.requests import AdminToggleRoleRequest, ChangeTierRequest
from ..models.responses import AdminStatisticsResponse, AdminUserResponse
from ..services.subscriptions import tier_limits

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_not_found(user_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"User {user_id} not found",
    )


@router.get("/users", response_model=list[AdminUserResponse], summary="List users")
async def list_users(admin: AdminUser, repo: AdminRepo):
    return await repo.list_users()


@router.get("/statistics", response_model=AdminStatisticsResponse, summary="Usage statistics")
async def get_statistics(admin: AdminUser, repo: AdminRepo):
    return await repo.get_statistics()


@router.put("/users/{user_id}/tier", summary="Change a user's plan")
async def update_user_tier(user_id: str, request: ChangeTierRequest, admin: AdminUser, accounts: Accounts):
    subscription = await accounts.change_tier(user_id, tier_limits(request.tier))
    if subscription is None:
        raise _user_not_found(user_id)
    logger.info(f"Admin {admin.id} set tier {request.tier.value} for user {user_id}")
    return {"user_id": user_id, "tier": request.tier.value}


@router.put("/users/{user_id}/role", summary="Grant or revoke admin")
async def toggle_admin_role(
    user_id: str,
    request: AdminToggleRoleRequest,
    admin: AdminUser,
    accounts: Accounts,
    repo: AdminRepo,
):
    if user_id == admin.id and not request.make_admin:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot remove your own admin role",
        )
    if not await repo.user_exists(user_id):
        raise _user_not_found(user_id)
    await accounts.set_admin(user_id, request.make_admin)
    logger.info(f"Admin {admin.id} set admin={request.make_admin} for user {user_id}")
    return {"user_id": user_id, "is_admin": request.make_admin}


@router.post(
    "/users/{user_id}/reset-credits",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset a user's used credits",
)
async def reset_credits(user_id: str, admin: AdminUser, accounts: Accounts):
    if not await accounts.reset_credits(user_id):
        raise _user_not_found(user_id)
