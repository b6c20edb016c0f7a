"""Book library endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from ..dependencies import AccountSvc, Books, CurrentUser, Pool, Storage
from ..models.requests import BookGenerationRequest, UpdateBookCategoryRequest
from ..models.responses import BookListResponse, BookResponse
from ..services.book_generation import (
    GenerationOptions,
    generate_book_from_drawing,
    generate_book_from_theme,
)
from ..services.task_service import prepare_generation

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found(book_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Book {book_id} not found",
    )


@router.get(
    "",
    response_model=BookListResponse,
    summary="List books",
    description="The caller's books, newest first, optionally filtered.",
)
async def list_books(
    user: CurrentUser,
    repo: Books,
    child_id: Optional[str] = Query(default=None, description="Only books made for this child"),
    category: Optional[str] = Query(default=None, description="Category id"),
    favorites: bool = Query(default=False, description="Only favorite books"),
):
    books = await repo.list_books(user.id, child_id=child_id, category=category, favorites_only=favorites)
    return BookListResponse(books=books, total=len(books))


@router.post(
    "/from-theme",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a book from a theme",
    description="Runs the whole pipeline in the request. Consumes a story credit.",
)
async def create_book_from_theme(
    request: BookGenerationRequest,
    user: CurrentUser,
    accounts: AccountSvc,
    repo: Books,
    pool: Pool,
    storage: Storage,
):
    input_data = await prepare_generation(accounts, user, request.model_copy(update={"image_base64": None}))
    options = GenerationOptions.from_input_data(input_data)
    book_id = await generate_book_from_theme(pool, user.id, input_data["theme"], options, storage=storage)
    return await repo.get_book(book_id, user.id)


@router.post(
    "/from-drawing",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a book from a drawing",
    description="Runs the whole pipeline in the request. Consumes a story credit.",
)
async def create_book_from_drawing(
    request: BookGenerationRequest,
    user: CurrentUser,
    accounts: AccountSvc,
    repo: Books,
    pool: Pool,
    storage: Storage,
):
    input_data = await prepare_generation(accounts, user, request.model_copy(update={"theme": None}))
    options = GenerationOptions.from_input_data(input_data)
    book_id = await generate_book_from_drawing(
        pool, user.id, input_data["image_base64"], options, storage=storage
    )
    return await repo.get_book(book_id, user.id)


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book",
    description="Get a book with its pages in reading order.",
)
async def get_book(book_id: str, user: CurrentUser, repo: Books):
    book = await repo.get_book(book_id, user.id)
    if not book:
        raise _not_found(book_id)
    return book


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    description="Delete a book, its pages and its stored images.",
)
async def delete_book(book_id: str, user: CurrentUser, repo: Books, storage: Storage):
    if not await repo.delete_book(book_id, user.id):
        raise _not_found(book_id)
    await storage.delete_book(book_id)
    logger.info(f"Deleted book {book_id}")


@router.post(
    "/{book_id}/favorite",
    summary="Toggle favorite",
)
async def toggle_favorite(book_id: str, user: CurrentUser, repo: Books):
    is_favorite = await repo.toggle_favorite(book_id, user.id)
    if is_favorite is None:
        raise _not_found(book_id)
    return {"id": book_id, "is_favorite": is_favorite}


@router.post(
    "/{book_id}/read",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mark a book as read",
)
async def mark_read(book_id: str, user: CurrentUser, repo: Books):
    if not await repo.mark_read(book_id, user.id):
        raise _not_found(book_id)


@router.patch(
    "/{book_id}/category",
    summary="Change a book's category",
)
async def update_category(
    book_id: str, request: UpdateBookCategoryRequest, user: CurrentUser, repo: Books
):
    if not await repo.update_category(book_id, user.id, request.category):
        raise _not_found(book_id)
    return {"id": book_id, "category": request.category}
