"""Child profile endpoints."""

from fastapi import APIRouter, HTTPException, status

from ..dependencies import AccountSvc, Books, Children, CurrentUser
from ..models.requests import ChildRequest
from ..models.responses import BookResponse, ChildResponse

router = APIRouter()


def _not_found(child_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Child {child_id} not found",
    )


@router.get("", response_model=list[ChildResponse], summary="List children")
async def list_children(user: CurrentUser, repo: Children):
    """The caller's child profiles, oldest first."""
    return await repo.list_children(user.id)


@router.post(
    "",
    response_model=ChildResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a child",
    responses={403: {"description": "Plan's child limit reached (CHILD_LIMIT_REACHED)"}},
)
async def create_child(request: ChildRequest, user: CurrentUser, service: AccountSvc):
    return await service.create_child(user, request.model_dump(exclude_none=True))


@router.get("/{child_id}", response_model=ChildResponse, summary="Get a child")
async def get_child(child_id: str, user: CurrentUser, repo: Children):
    child = await repo.get_child(child_id, user.id)
    if not child:
        raise _not_found(child_id)
    return child


@router.patch("/{child_id}", response_model=ChildResponse, summary="Update a child")
async def update_child(child_id: str, request: ChildRequest, user: CurrentUser, repo: Children):
    child = await repo.update_child(child_id, user.id, request.model_dump(exclude_unset=True))
    if not child:
        raise _not_found(child_id)
    return child


@router.delete("/{child_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a child")
async def delete_child(child_id: str, user: CurrentUser, repo: Children):
    if not await repo.delete_child(child_id, user.id):
        raise _not_found(child_id)


@router.get(
    "/{child_id}/shared-books",
    response_model=list[BookResponse],
    summary="Books shared with a child",
)
async def list_shared_books(child_id: str, user: CurrentUser, repo: Books):
    return await repo.list_shared_books(child_id, user.id)
