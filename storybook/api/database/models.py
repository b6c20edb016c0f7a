"""SQLAlchemy ORM models for PostgreSQL.

User ids are the ``sub`` claim of the access token and are stored as
strings. Application code talks to these tables through raw asyncpg SQL
in the repositories; the models only declare the schema.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class Profile(Base):
    """Account profile - personalization and generation preferences."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    email: Mapped[Optional[str]] = mapped_column(Text)
    display_name: Mapped[Optional[str]] = mapped_column(Text)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text)
    age: Mapped[Optional[int]] = mapped_column(Integer)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    favorite_color: Mapped[Optional[str]] = mapped_column(Text)
    favorite_animal: Mapped[Optional[str]] = mapped_column(Text)
    favorite_team: Mapped[Optional[str]] = mapped_column(Text)
    favorite_toy: Mapped[Optional[str]] = mapped_column(Text)
    favorite_superhero: Mapped[Optional[str]] = mapped_column(Text)
    favorite_cartoon: Mapped[Optional[str]] = mapped_column(Text)
    preferred_ai_model: Mapped[Optional[str]] = mapped_column(String(100))
    preferred_image_model: Mapped[Optional[str]] = mapped_column(String(100))
    preferred_language: Mapped[Optional[str]] = mapped_column(String(10))
    preferred_page_count: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class UserRole(Base):
    """Role grant (``admin`` or ``user``)."""

    __tablename__ = "user_roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)


class Subscription(Base):
    """A user's plan and monthly credit usage."""

    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    tier: Mapped[str] = mapped_column(String(30), nullable=False, server_default="minik_masal")
    monthly_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    used_credits: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    max_pages: Mapped[int] = mapped_column(Integer, nullable=False)
    max_children: Mapped[int] = mapped_column(Integer, nullable=False)
    price_tl: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    trial_ends_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    current_period_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    current_period_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())


class Child(Base):
    """A child profile that books are written for."""

    __tablename__ = "children"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    age: Mapped[Optional[int]] = mapped_column(Integer)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    avatar_emoji: Mapped[Optional[str]] = mapped_column(String(16))
    favorite_color: Mapped[Optional[str]] = mapped_column(Text)
    favorite_animal: Mapped[Optional[str]] = mapped_column(Text)
    favorite_team: Mapped[Optional[str]] = mapped_column(Text)
    favorite_toy: Mapped[Optional[str]] = mapped_column(Text)
    favorite_superhero: Mapped[Optional[str]] = mapped_column(Text)
    favorite_cartoon: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_children_user_id", "user_id"),)


class BookCategory(Base):
    """Library shelf a book can be filed under."""

    __tablename__ = "book_categories"

    id: Mapped[str] = mapped_column(String(30), primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False)
    sort_order: Mapped[Optional[int]] = mapped_column(Integer)


class Book(Base):
    """A generated storybook."""

    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(40), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    child_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="SET NULL")
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    theme: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(
        String(30), ForeignKey("book_categories.id", ondelete="SET NULL")
    )
    cover_emoji: Mapped[str] = mapped_column(String(16), nullable=False, server_default="📚")
    cover_image: Mapped[Optional[str]] = mapped_column(Text)
    is_favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    is_from_drawing: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    last_read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    pages: Mapped[list["BookPage"]] = relationship(
        back_populates="book", cascade="all, delete-orphan", order_by="BookPage.page_number"
    )

    __table_args__ = (
        Index("idx_books_user_id", "user_id"),
        Index("idx_books_created_at", "created_at"),
    )


class BookPage(Base):
    """One page of a book."""

    __tablename__ = "book_pages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    book_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    page_number: Mapped[int] = mapped_column(Integer, nullable=False)
    character: Mapped[str] = mapped_column(Text, nullable=False)
    emoji: Mapped[str] = mapped_column(String(16), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    sound: Mapped[str] = mapped_column(Text, nullable=False, server_default="pop")
    background_image: Mapped[Optional[str]] = mapped_column(Text)
    text_position: Mapped[Optional[str]] = mapped_column(String(20), server_default="bottom")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    book: Mapped["Book"] = relationship(back_populates="pages")

    __table_args__ = (UniqueConstraint("book_id", "page_number", name="uq_book_pages_book_page"),)


class BookGenerationTask(Base):
    """Background book generation task observed through the change feed."""

    __tablename__ = "book_generation_tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="pending")
    progress_percent: Mapped[Optional[int]] = mapped_column(Integer, server_default="0")
    progress_message: Mapped[Optional[str]] = mapped_column(Text)
    input_data: Mapped[str] = mapped_column(Text, nullable=False)  # JSON
    book_id: Mapped[Optional[str]] = mapped_column(
        String(40), ForeignKey("books.id", ondelete="SET NULL")
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_tasks_user_status", "user_id", "status"),)


class ReadingSession(Base):
    """A single sitting spent reading a book."""

    __tablename__ = "reading_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    book_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    child_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="SET NULL")
    )
    pages_read: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_reading_sessions_child", "child_id"),)


class ReadingProgress(Base):
    """Where a user left off in a book."""

    __tablename__ = "reading_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    book_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    current_page: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=false())
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("user_id", "book_id", name="uq_reading_progress_user_book"),)


class BookLike(Base):
    """A child's like on a book."""

    __tablename__ = "book_likes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    book_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    child_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("book_id", "child_id", name="uq_book_likes_book_child"),)


class BookComment(Base):
    """A child's comment on a book."""

    __tablename__ = "book_comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    book_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    child_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    emoji: Mapped[Optional[str]] = mapped_column(String(16))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (Index("idx_book_comments_book", "book_id"),)


class BookShare(Base):
    """A book shared with one of the owner's children."""

    __tablename__ = "book_shares"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    book_id: Mapped[str] = mapped_column(
        String(40), ForeignKey("books.id", ondelete="CASCADE"), nullable=False
    )
    child_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False
    )
    shared_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (UniqueConstraint("book_id", "child_id", name="uq_book_shares_book_child"),)
