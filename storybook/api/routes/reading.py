"""Reading sessions, statistics and progress."""

from fastapi import APIRouter, HTTPException, Query, status

from ..dependencies import CurrentUser, Reading
from ..models.enums import Language
from ..models.requests import (
    StartReadingSessionRequest,
    UpdateReadingProgressRequest,
    UpdateReadingSessionRequest,
)
from ..models.responses import (
    ChildReadingStatsResponse,
    ReadingProgressResponse,
    ReadingSessionResponse,
)
from ..services.reading import format_duration

router = APIRouter()


def _book_not_found(book_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Book {book_id} not found",
    )


def _session_not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Reading session {session_id} not found",
    )


@router.post(
    "/sessions",
    response_model=ReadingSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a reading session",
)
async def start_session(request: StartReadingSessionRequest, user: CurrentUser, repo: Reading):
    if not await repo.can_access(user.id, request.book_id, request.child_id):
        raise _book_not_found(request.book_id)
    return await repo.start_session(user.id, request.book_id, request.child_id)


@router.patch(
    "/sessions/{session_id}",
    response_model=ReadingSessionResponse,
    summary="Update a reading session",
)
async def update_session(
    session_id: str, request: UpdateReadingSessionRequest, user: CurrentUser, repo: Reading
):
    session = await repo.update_session(
        session_id, user.id, request.pages_read, duration_seconds=request.duration_seconds
    )
    if not session:
        raise _session_not_found(session_id)
    return session


@router.post(
    "/sessions/{session_id}/end",
    response_model=ReadingSessionResponse,
    summary="End a reading session",
)
async def end_session(
    session_id: str, request: UpdateReadingSessionRequest, user: CurrentUser, repo: Reading
):
    session = await repo.update_session(
        session_id, user.id, request.pages_read, duration_seconds=request.duration_seconds, end=True
    )
    if not session:
        raise _session_not_found(session_id)
    return session


@router.get(
    "/stats",
    response_model=list[ChildReadingStatsResponse],
    summary="Reading statistics per child",
)
async def get_stats(
    user: CurrentUser,
    repo: Reading,
    language: Language = Query(default=Language.TR, description="Language of the reading time text"),
):
    stats = await repo.get_child_stats(user.id)
    for child in stats:
        child.total_reading_time = format_duration(child.total_reading_seconds, language.value)
    return stats


@router.get(
    "/progress/{book_id}",
    response_model=ReadingProgressResponse,
    summary="Get reading progress for a book",
)
async def get_progress(book_id: str, user: CurrentUser, repo: Reading):
    """Books never opened start on page 0."""
    progress = await repo.get_progress(user.id, book_id)
    return progress or ReadingProgressResponse(book_id=book_id)


@router.put(
    "/progress/{book_id}",
    response_model=ReadingProgressResponse,
    summary="Save reading progress for a book",
)
async def save_progress(
    book_id: str, request: UpdateReadingProgressRequest, user: CurrentUser, repo: Reading
):
    if not await repo.can_access(user.id, book_id):
        raise _book_not_found(book_id)
    return await repo.save_progress(user.id, book_id, request.current_page, request.completed)
