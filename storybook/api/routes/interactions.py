"""Likes, comments and shares on books."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from ...core.errors import InvalidRequestError
from ..dependencies import CurrentUser, Interactions
from ..models.requests import AddCommentRequest, ToggleLikeRequest, UpdateSharesRequest
from ..models.responses import CommentResponse, LikeStatusResponse, ShareListResponse

router = APIRouter()

DEFAULT_COMMENT_EMOJI = "😊"


async def _require_access(repo, user_id: str, book_id: str, child_id: Optional[str] = None) -> None:
    """404 unless the caller owns the book and, when given, the child."""
    if not await repo.can_access(user_id, book_id, child_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Book {book_id} not found",
        )


async def _like_status(repo, user_id: str, book_id: str, child_id: str, liked: bool) -> LikeStatusResponse:
    return LikeStatusResponse(
        book_id=book_id,
        child_id=child_id,
        liked=liked,
        like_count=await repo.count_likes(user_id, book_id),
    )


@router.get("/{book_id}/likes", response_model=LikeStatusResponse, summary="Like status")
async def get_like_status(
    book_id: str,
    user: CurrentUser,
    repo: Interactions,
    child_id: str = Query(..., description="Child whose like is checked"),
):
    await _require_access(repo, user.id, book_id, child_id)
    liked = await repo.is_liked(user.id, book_id, child_id)
    return await _like_status(repo, user.id, book_id, child_id, liked)


@router.post("/{book_id}/likes", response_model=LikeStatusResponse, summary="Toggle a like")
async def toggle_like(book_id: str, request: ToggleLikeRequest, user: CurrentUser, repo: Interactions):
    await _require_access(repo, user.id, book_id, request.child_id)
    liked = await repo.toggle_like(user.id, book_id, request.child_id)
    return await _like_status(repo, user.id, book_id, request.child_id, liked)


@router.get("/{book_id}/comments", response_model=list[CommentResponse], summary="List comments")
async def list_comments(book_id: str, user: CurrentUser, repo: Interactions):
    """Newest first."""
    await _require_access(repo, user.id, book_id)
    return await repo.list_comments(user.id, book_id)


@router.post(
    "/{book_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
)
async def add_comment(book_id: str, request: AddCommentRequest, user: CurrentUser, repo: Interactions):
    content = request.content.strip()
    if not content:
        raise InvalidRequestError("Comment cannot be empty")
    await _require_access(repo, user.id, book_id, request.child_id)
    return await repo.add_comment(
        user.id, book_id, request.child_id, content, request.emoji or DEFAULT_COMMENT_EMOJI
    )


@router.delete(
    "/{book_id}/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a comment",
)
async def delete_comment(book_id: str, comment_id: str, user: CurrentUser, repo: Interactions):
    if not await repo.delete_comment(comment_id, user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Comment {comment_id} not found",
        )


@router.get("/{book_id}/shares", response_model=ShareListResponse, summary="List shares")
async def list_shares(book_id: str, user: CurrentUser, repo: Interactions):
    await _require_access(repo, user.id, book_id)
    return ShareListResponse(book_id=book_id, child_ids=await repo.list_shares(user.id, book_id))


@router.put("/{book_id}/shares", response_model=ShareListResponse, summary="Replace shares")
async def update_shares(
    book_id: str, request: UpdateSharesRequest, user: CurrentUser, repo: Interactions
):
    """Share the book with exactly these children."""
    await _require_access(repo, user.id, book_id)
    wanted = set(request.child_ids)
    unknown = wanted - set(await repo.owned_child_ids(user.id, list(wanted)))
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Child {sorted(unknown)[0]} not found",
        )
    child_ids = await repo.replace_shares(user.id, book_id, request.child_ids)
    return ShareListResponse(book_id=book_id, child_ids=child_ids)
