"""The caller's profile."""

from fastapi import APIRouter

from ..dependencies import AccountSvc, Accounts, CurrentUser
from ..models.requests import UpdateProfileRequest
from ..models.responses import ProfileResponse

router = APIRouter()


@router.get("", response_model=ProfileResponse, summary="Get my profile")
async def get_profile(user: CurrentUser, service: AccountSvc):
    """Created with the default plan on first access."""
    return await service.get_or_create_profile(user)


@router.patch("", response_model=ProfileResponse, summary="Update my profile")
async def update_profile(
    request: UpdateProfileRequest, user: CurrentUser, service: AccountSvc, repo: Accounts
):
    """Only the fields present in the body are changed."""
    profile = await service.get_or_create_profile(user)
    fields = request.model_dump(exclude_unset=True, mode="json")
    if not fields:
        return profile
    return await repo.update_profile(user.id, fields)
