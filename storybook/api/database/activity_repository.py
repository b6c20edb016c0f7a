"""Repositories for reading activity and book interactions."""

import uuid
from datetime import datetime, timezone
from typing import Optional

import asyncpg

from ..models.responses import (
    ChildReadingStatsResponse,
    CommentResponse,
    ReadingProgressResponse,
    ReadingSessionResponse,
)

SESSION_COLUMNS = """
    id, user_id, book_id, child_id, pages_read, duration_seconds, started_at, ended_at
"""


class _ActivityRepository:
    """Shared ownership checks.

    Books and children are private to the account that created them.
    """

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def can_access(self, user_id: str, book_id: str, child_id: Optional[str] = None) -> bool:
        """True if the user owns the book and, when given, the child."""
        return bool(
            await self.conn.fetchval(
                """
                SELECT EXISTS(SELECT 1 FROM books WHERE id = $1 AND user_id = $2)
                   AND ($3::text IS NULL
                        OR EXISTS(SELECT 1 FROM children WHERE id = $3 AND user_id = $2))
                """,
                book_id,
                user_id,
                child_id,
            )
        )

    async def owned_child_ids(self, user_id: str, child_ids: list[str]) -> list[str]:
        """The subset of ``child_ids`` that belong to the user."""
        if not child_ids:
            return []
        rows = await self.conn.fetch(
            "SELECT id FROM children WHERE user_id = $1 AND id = ANY($2::text[])",
            user_id,
            child_ids,
        )
        return [row["id"] for row in rows]


class ReadingRepository(_ActivityRepository):
    """Reading sessions, per-child statistics and reading progress."""

    async def start_session(
        self, user_id: str, book_id: str, child_id: Optional[str] = None
    ) -> ReadingSessionResponse:
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO reading_sessions
                (id, user_id, book_id, child_id, pages_read, duration_seconds, started_at)
            VALUES ($1, $2, $3, $4, 0, 0, $5)
            RETURNING {SESSION_COLUMNS}
            """,
            str(uuid.uuid4()),
            user_id,
            book_id,
            child_id,
            datetime.now(timezone.utc),
        )
        return ReadingSessionResponse.model_validate(dict(row))

    async def update_session(
        self,
        session_id: str,
        user_id: str,
        pages_read: int,
        duration_seconds: Optional[int] = None,
        end: bool = False,
    ) -> Optional[ReadingSessionResponse]:
        """Record pages read and elapsed time, optionally ending the session.

        Elapsed seconds default to the time since the session started.
        """
        now = datetime.now(timezone.utc)
        row = await self.conn.fetchrow(
            f"""
            UPDATE reading_sessions
            SET pages_read = $3,
                duration_seconds = COALESCE(
                    $4::int, GREATEST(0, FLOOR(EXTRACT(EPOCH FROM ($5::timestamptz - started_at))))::int
                ),
                ended_at = CASE WHEN $6::boolean THEN $5::timestamptz ELSE ended_at END
            WHERE id = $1 AND user_id = $2
            RETURNING {SESSION_COLUMNS}
            """,
            session_id,
            user_id,
            pages_read,
            duration_seconds,
            now,
            end,
        )
        return ReadingSessionResponse.model_validate(dict(row)) if row else None

    async def get_child_stats(self, user_id: str) -> list[ChildReadingStatsResponse]:
        """Aggregate reading sessions per child, oldest child first."""
        rows = await self.conn.fetch(
            """
            SELECT c.id AS child_id,
                   c.name AS child_name,
                   c.avatar_emoji,
                   COUNT(DISTINCT s.book_id) AS books_read,
                   COALESCE(SUM(s.pages_read), 0) AS total_pages_read,
                   COALESCE(SUM(s.duration_seconds), 0) AS total_reading_seconds,
                   COUNT(s.id) AS total_sessions
            FROM children c
            LEFT JOIN reading_sessions s ON s.child_id = c.id
            WHERE c.user_id = $1
            GROUP BY c.id, c.name, c.avatar_emoji, c.created_at
            ORDER BY c.created_at
            """,
            user_id,
        )
        return [ChildReadingStatsResponse.model_validate(dict(row)) for row in rows]

    async def get_progress(self, user_id: str, book_id: str) -> Optional[ReadingProgressResponse]:
        row = await self.conn.fetchrow(
            """
            SELECT book_id, current_page, completed, updated_at
            FROM reading_progress
            WHERE user_id = $1 AND book_id = $2
            """,
            user_id,
            book_id,
        )
        return ReadingProgressResponse.model_validate(dict(row)) if row else None

    async def save_progress(
        self, user_id: str, book_id: str, current_page: int, completed: bool
    ) -> ReadingProgressResponse:
        """Upsert progress for (user, book)."""
        row = await self.conn.fetchrow(
            """
            INSERT INTO reading_progress (id, user_id, book_id, current_page, completed, updated_at)
            VALUES ($1, $2, $3, $4, $5, NOW())
            ON CONFLICT (user_id, book_id) DO UPDATE
            SET current_page = EXCLUDED.current_page,
                completed = EXCLUDED.completed,
                updated_at = NOW()
            RETURNING book_id, current_page, completed, updated_at
            """,
            str(uuid.uuid4()),
            user_id,
            book_id,
            current_page,
            completed,
        )
        return ReadingProgressResponse.model_validate(dict(row))


class InteractionRepository(_ActivityRepository):
    """Likes, comments and shares, scoped to the account that made them."""

    # === Likes ===

    async def toggle_like(self, user_id: str, book_id: str, child_id: str) -> bool:
        """Like or unlike a book for one of the user's children. Returns True if now liked."""
        deleted = await self.conn.fetchval(
            """
            DELETE FROM book_likes
            WHERE book_id = $1 AND child_id = $2 AND user_id = $3
            RETURNING id
            """,
            book_id,
            child_id,
            user_id,
        )
        if deleted:
            return False

        await self.conn.execute(
            """
            INSERT INTO book_likes (id, book_id, child_id, user_id)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (book_id, child_id) DO NOTHING
            """,
            str(uuid.uuid4()),
            book_id,
            child_id,
            user_id,
        )
        return True

    async def is_liked(self, user_id: str, book_id: str, child_id: str) -> bool:
        return bool(
            await self.conn.fetchval(
                """
                SELECT EXISTS(
                    SELECT 1 FROM book_likes
                    WHERE book_id = $1 AND child_id = $2 AND user_id = $3
                )
                """,
                book_id,
                child_id,
                user_id,
            )
        )

    async def count_likes(self, user_id: str, book_id: str) -> int:
        return await self.conn.fetchval(
            "SELECT COUNT(*) FROM book_likes WHERE book_id = $1 AND user_id = $2",
            book_id,
            user_id,
        )

    # === Comments ===

    async def list_comments(self, user_id: str, book_id: str) -> list[CommentResponse]:
        """The user's comments on a book, newest first."""
        rows = await self.conn.fetch(
            """
            SELECT cm.id, cm.book_id, cm.child_id, cm.user_id, cm.content, cm.emoji,
                   cm.created_at, c.name AS child_name
            FROM book_comments cm
            LEFT JOIN children c ON c.id = cm.child_id
            WHERE cm.book_id = $1 AND cm.user_id = $2
            ORDER BY cm.created_at DESC
            """,
            book_id,
            user_id,
        )
        return [CommentResponse.model_validate(dict(row)) for row in rows]

    async def add_comment(
        self, user_id: str, book_id: str, child_id: str, content: str, emoji: str
    ) -> CommentResponse:
        row = await self.conn.fetchrow(
            """
            INSERT INTO book_comments (id, book_id, child_id, user_id, content, emoji)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id, book_id, child_id, user_id, content, emoji, created_at
            """,
            str(uuid.uuid4()),
            book_id,
            child_id,
            user_id,
            content,
            emoji,
        )
        return CommentResponse.model_validate(dict(row))

    async def delete_comment(self, comment_id: str, user_id: str) -> bool:
        result = await self.conn.execute(
            "DELETE FROM book_comments WHERE id = $1 AND user_id = $2",
            comment_id,
            user_id,
        )
        return result == "DELETE 1"

    # === Shares ===

    async def list_shares(self, user_id: str, book_id: str) -> list[str]:
        """Child ids the user has shared a book with."""
        rows = await self.conn.fetch(
            """
            SELECT child_id FROM book_shares
            WHERE book_id = $1 AND shared_by = $2
            ORDER BY created_at
            """,
            book_id,
            user_id,
        )
        return [row["child_id"] for row in rows]

    async def replace_shares(self, user_id: str, book_id: str, child_ids: list[str]) -> list[str]:
        """Make the user's share set equal ``child_ids``: remove dropped, insert added."""
        async with self.conn.transaction():
            current = set(await self.list_shares(user_id, book_id))
            wanted = list(dict.fromkeys(child_ids))

            removed = [c for c in current if c not in wanted]
            added = [c for c in wanted if c not in current]

            if removed:
                await self.conn.execute(
                    """
                    DELETE FROM book_shares
                    WHERE book_id = $1 AND shared_by = $2 AND child_id = ANY($3::text[])
                    """,
                    book_id,
                    user_id,
                    removed,
                )
            if added:
                await self.conn.executemany(
                    """
                    INSERT INTO book_shares (id, book_id, child_id, shared_by)
                    VALUES ($1, $2, $3, $4)
                    ON CONFLICT (book_id, child_id) DO NOTHING
                    """,
                    [(str(uuid.uuid4()), book_id, child_id, user_id) for child_id in added],
                )
        return wanted
