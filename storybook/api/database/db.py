"""PostgreSQL connection management.

The schema is declared with SQLAlchemy and created at startup; all
queries go through a shared asyncpg pool.
"""

from typing import Optional

import asyncpg
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ..config import DATABASE_URL, get_database_dsn


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    pass


# Create async engine (only if DATABASE_URL is configured)
engine: Optional[AsyncEngine] = None

if DATABASE_URL:
    engine = create_async_engine(
        DATABASE_URL,
        echo=False,  # Set to True for SQL debugging
        pool_pre_ping=True,  # Verify connections before use
    )

# Shared asyncpg pool (set during API startup)
_pool: Optional[asyncpg.Pool] = None

# Library shelves offered by the reader app
DEFAULT_CATEGORIES = [
    {"id": "adventure", "name": "Macera", "emoji": "🏔️", "color": "orange", "sort_order": 1},
    {"id": "animals", "name": "Hayvanlar", "emoji": "🐾", "color": "green", "sort_order": 2},
    {"id": "fantasy", "name": "Fantastik", "emoji": "🧙", "color": "purple", "sort_order": 3},
    {"id": "space", "name": "Uzay", "emoji": "🚀", "color": "blue", "sort_order": 4},
    {"id": "nature", "name": "Doğa", "emoji": "🌿", "color": "emerald", "sort_order": 5},
    {"id": "friendship", "name": "Arkadaşlık", "emoji": "🤝", "color": "pink", "sort_order": 6},
    {"id": "family", "name": "Aile", "emoji": "👨‍👩‍👧", "color": "amber", "sort_order": 7},
    {"id": "sports", "name": "Spor", "emoji": "⚽", "color": "red", "sort_order": 8},
    {"id": "vehicles", "name": "Araçlar", "emoji": "🚗", "color": "cyan", "sort_order": 9},
    {"id": "other", "name": "Diğer", "emoji": "📚", "color": "gray", "sort_order": 10},
]


def _check_configured():
    """Raise an error if the database is not configured."""
    if engine is None:
        raise RuntimeError(
            "Database not configured. Set DATABASE_URL environment variable "
            "to a PostgreSQL connection string."
        )


async def init_db() -> None:
    """Initialize database - create all tables and seed categories."""
    _check_configured()
    from .models import BookCategory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(
            insert(BookCategory).values(DEFAULT_CATEGORIES).on_conflict_do_nothing(index_elements=["id"])
        )


async def create_pool(min_size: int = 1, max_size: int = 10) -> asyncpg.Pool:
    """Create the shared asyncpg pool. Called during API startup."""
    global _pool
    _check_configured()
    _pool = await asyncpg.create_pool(get_database_dsn(), min_size=min_size, max_size=max_size)
    return _pool


def get_pool() -> asyncpg.Pool:
    """Get the shared asyncpg pool. Raises if not initialized."""
    if _pool is None:
        raise RuntimeError("Database pool not initialized. Ensure the API server is running.")
    return _pool


async def close_pool() -> None:
    """Close the shared pool. Called during API shutdown."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
