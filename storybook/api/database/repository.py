"""Repositories for books and background tasks using raw asyncpg SQL."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import asyncpg

from ..config import TASK_EVENTS_CHANNEL
from ..models.enums import ACTIVE_TASK_STATUSES, TaskEventType
from ..models.responses import BookPageResponse, BookResponse, CategoryResponse, TaskResponse

BOOK_COLUMNS = """
    id, user_id, child_id, title, theme, category, cover_emoji, cover_image,
    is_favorite, is_from_drawing, last_read_at, created_at, updated_at
"""

TASK_COLUMNS = """
    id, user_id, status, progress_percent, progress_message, input_data,
    book_id, error_message, created_at, updated_at
"""


class BookRepository:
    """Repository for book persistence operations."""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def save_book(self, book: dict, pages: list[dict]) -> None:
        """Insert a book and its pages in a transaction."""
        async with self.conn.transaction():
            await self.conn.execute(
                """
                INSERT INTO books (id, user_id, child_id, title, theme, category,
                                   cover_emoji, cover_image, is_from_drawing)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                """,
                book["id"],
                book["user_id"],
                book.get("child_id"),
                book["title"],
                book["theme"],
                book.get("category"),
                book["cover_emoji"],
                book.get("cover_image"),
                book.get("is_from_drawing", False),
            )

            # Batch insert pages
            page_data = [
                (
                    book["id"],
                    p["page_number"],
                    p["character"],
                    p["emoji"],
                    p["title"],
                    p["description"],
                    p["sound"],
                    p.get("background_image"),
                    p["text_position"],
                )
                for p in pages
            ]
            await self.conn.executemany(
                """
                INSERT INTO book_pages (book_id, page_number, character, emoji, title,
                                        description, sound, background_image, text_position)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                """,
                page_data,
            )

    async def list_books(
        self,
        user_id: str,
        child_id: Optional[str] = None,
        category: Optional[str] = None,
        favorites_only: bool = False,
    ) -> list[BookResponse]:
        """List a user's books, newest first."""
        conditions = ["user_id = $1"]
        params: list[Any] = [user_id]

        if child_id:
            params.append(child_id)
            conditions.append(f"child_id = ${len(params)}")
        if category:
            params.append(category)
            conditions.append(f"category = ${len(params)}")
        if favorites_only:
            conditions.append("is_favorite = TRUE")

        rows = await self.conn.fetch(
            f"""
            SELECT {BOOK_COLUMNS}
            FROM books
            WHERE {" AND ".join(conditions)}
            ORDER BY created_at DESC
            """,
            *params,
        )
        return [BookResponse.model_validate(dict(row)) for row in rows]

    async def get_book(self, book_id: str, user_id: str) -> Optional[BookResponse]:
        """Get a book with its pages in reading order."""
        row = await self.conn.fetchrow(
            f"SELECT {BOOK_COLUMNS} FROM books WHERE id = $1 AND user_id = $2",
            book_id,
            user_id,
        )
        if not row:
            return None

        page_rows = await self.conn.fetch(
            """
            SELECT page_number, character, emoji, title, description, sound,
                   background_image, text_position
            FROM book_pages
            WHERE book_id = $1
            ORDER BY page_number
            """,
            book_id,
        )
        book = BookResponse.model_validate(dict(row))
        book.pages = [BookPageResponse.model_validate(dict(p)) for p in page_rows]
        return book

    async def delete_book(self, book_id: str, user_id: str) -> bool:
        """Delete a book. Pages cascade. Returns True if a row was deleted."""
        result = await self.conn.execute(
            "DELETE FROM books WHERE id = $1 AND user_id = $2",
            book_id,
            user_id,
        )
        return result == "DELETE 1"

    async def set_favorite(self, book_id: str, user_id: str, is_favorite: bool) -> bool:
        result = await self.conn.execute(
            "UPDATE books SET is_favorite = $3, updated_at = NOW() WHERE id = $1 AND user_id = $2",
            book_id,
            user_id,
            is_favorite,
        )
        return result == "UPDATE 1"

    async def toggle_favorite(self, book_id: str, user_id: str) -> Optional[bool]:
        """Flip the favorite flag. Returns the new value, or None if not found."""
        return await self.conn.fetchval(
            """
            UPDATE books
            SET is_favorite = NOT COALESCE(is_favorite, FALSE), updated_at = NOW()
            WHERE id = $1 AND user_id = $2
            RETURNING is_favorite
            """,
            book_id,
            user_id,
        )

    async def mark_read(self, book_id: str, user_id: str) -> bool:
        """Stamp last_read_at."""
        result = await self.conn.execute(
            "UPDATE books SET last_read_at = $3 WHERE id = $1 AND user_id = $2",
            book_id,
            user_id,
            datetime.now(timezone.utc),
        )
        return result == "UPDATE 1"

    async def update_category(self, book_id: str, user_id: str, category: Optional[str]) -> bool:
        result = await self.conn.execute(
            "UPDATE books SET category = $3, updated_at = NOW() WHERE id = $1 AND user_id = $2",
            book_id,
            user_id,
            category,
        )
        return result == "UPDATE 1"

    async def list_shared_books(self, child_id: str, user_id: str) -> list[BookResponse]:
        """Books shared with one of the user's children, most recently shared first."""
        rows = await self.conn.fetch(
            """
            SELECT b.id, b.user_id, b.child_id, b.title, b.theme, b.category, b.cover_emoji,
                   b.cover_image, b.is_favorite, b.is_from_drawing, b.last_read_at,
                   b.created_at, b.updated_at
            FROM book_shares s
            JOIN books b ON b.id = s.book_id
            WHERE s.child_id = $1 AND s.shared_by = $2
            ORDER BY s.created_at DESC
            """,
            child_id,
            user_id,
        )
        return [BookResponse.model_validate(dict(row)) for row in rows]

    async def list_categories(self) -> list[CategoryResponse]:
        rows = await self.conn.fetch(
            "SELECT id, name, emoji, color, sort_order FROM book_categories ORDER BY sort_order"
        )
        return [CategoryResponse.model_validate(dict(row)) for row in rows]


class TaskRepository:
    """Repository for background task rows.

    Every write publishes a change notification on the
    ``book_generation_tasks`` channel so listeners can relay it to clients.
    """

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def _notify(self, event: TaskEventType, task: TaskResponse) -> None:
        payload = json.dumps(
            {"event": event.value, "task_id": task.id, "user_id": task.user_id}
        )
        await self.conn.execute("SELECT pg_notify($1, $2)", TASK_EVENTS_CHANNEL, payload)

    async def create_task(self, user_id: str, input_data: dict) -> TaskResponse:
        """Insert a pending task."""
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO book_generation_tasks
                (id, user_id, status, progress_percent, progress_message, input_data)
            VALUES ($1, $2, 'pending', 0, $3, $4)
            RETURNING {TASK_COLUMNS}
            """,
            str(uuid.uuid4()),
            user_id,
            "Starting...",
            json.dumps(input_data),
        )
        task = _row_to_task(row)
        await self._notify(TaskEventType.INSERT, task)
        return task

    async def get_task(self, task_id: str, user_id: Optional[str] = None) -> Optional[TaskResponse]:
        """Get a task, optionally scoped to its owner."""
        if user_id is None:
            row = await self.conn.fetchrow(
                f"SELECT {TASK_COLUMNS} FROM book_generation_tasks WHERE id = $1",
                task_id,
            )
        else:
            row = await self.conn.fetchrow(
                f"SELECT {TASK_COLUMNS} FROM book_generation_tasks WHERE id = $1 AND user_id = $2",
                task_id,
                user_id,
            )
        return _row_to_task(row) if row else None

    async def list_active_tasks(self, user_id: str) -> list[TaskResponse]:
        """Non-terminal tasks, newest first."""
        rows = await self.conn.fetch(
            f"""
            SELECT {TASK_COLUMNS}
            FROM book_generation_tasks
            WHERE user_id = $1 AND status = ANY($2::text[])
            ORDER BY created_at DESC
            """,
            user_id,
            ACTIVE_TASK_STATUSES,
        )
        return [_row_to_task(row) for row in rows]

    async def update_task(
        self,
        task_id: str,
        status: Optional[str] = None,
        progress_message: Optional[str] = None,
        progress_percent: Optional[int] = None,
        book_id: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> Optional[TaskResponse]:
        """Apply a partial update and stamp updated_at.

        Returns None when the row no longer exists (task was cancelled).
        """
        row = await self.conn.fetchrow(
            f"""
            UPDATE book_generation_tasks
            SET status = COALESCE($2, status),
                progress_message = COALESCE($3, progress_message),
                progress_percent = COALESCE($4, progress_percent),
                book_id = COALESCE($5, book_id),
                error_message = COALESCE($6, error_message),
                updated_at = $7
            WHERE id = $1
            RETURNING {TASK_COLUMNS}
            """,
            task_id,
            status,
            progress_message,
            progress_percent,
            book_id,
            error_message,
            datetime.now(timezone.utc),
        )
        if not row:
            return None
        task = _row_to_task(row)
        await self._notify(TaskEventType.UPDATE, task)
        return task

    async def delete_task(self, task_id: str, user_id: str) -> bool:
        """Cancel a task by deleting its row."""
        row = await self.conn.fetchrow(
            f"""
            DELETE FROM book_generation_tasks
            WHERE id = $1 AND user_id = $2
            RETURNING {TASK_COLUMNS}
            """,
            task_id,
            user_id,
        )
        if not row:
            return False
        await self._notify(TaskEventType.DELETE, _row_to_task(row))
        return True


def _row_to_task(row) -> TaskResponse:
    data = dict(row)
    input_data = data.get("input_data")
    if isinstance(input_data, str):
        data["input_data"] = json.loads(input_data) if input_data else {}
    elif input_data is None:
        data["input_data"] = {}
    return TaskResponse.model_validate(data)
