"""FastAPI application for Storybook Studio."""

import logging
from contextlib import asynccontextmanager

from arq import create_pool
from arq.connections import RedisSettings
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .arq_pool import close_pool as close_arq_pool, set_pool as set_arq_pool
from .config import BOOK_IMAGES_BUCKET, DATABASE_URL, LOG_FORMAT, get_database_dsn
from .errors import setup_exception_handlers
from .logging import configure_logging
from .routes import (
    admin,
    books,
    categories,
    children,
    generation,
    interactions,
    profile,
    reading,
    storage,
    subscription,
    tasks,
)
from .services.task_events import task_event_broker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    configure_logging(json_format=LOG_FORMAT == "json")

    # Startup: Initialize database (only if DATABASE_URL is configured)
    if DATABASE_URL:
        from .database.db import close_pool, create_pool as create_db_pool, init_db

        await init_db()
        await create_db_pool()
        await task_event_broker.start(get_database_dsn())
        logger.info("Database initialized")
    else:
        logger.warning("DATABASE_URL not set - database not initialized")

    # ARQ pool for enqueueing background book generation
    set_arq_pool(await create_pool(RedisSettings()))
    logger.info("ARQ Redis pool initialized")

    yield

    await close_arq_pool()
    if DATABASE_URL:
        await task_event_broker.stop()
        await close_pool()


app = FastAPI(
    title="Storybook Studio API",
    description="""
Create illustrated, narrated children's picture books from a theme or a child's drawing.

## Workflow
1. POST `/tasks` with a theme or drawing to start generation
2. Follow progress on the `/tasks/events` WebSocket (or poll GET `/tasks/{id}`)
3. Read the finished book from GET `/books/{book_id}`
    """,
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

# Include routers
app.include_router(generation.router, prefix="/generate", tags=["Generation"])
app.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
app.include_router(books.router, prefix="/books", tags=["Books"])
app.include_router(interactions.router, prefix="/books", tags=["Interactions"])
app.include_router(categories.router, prefix="/categories", tags=["Categories"])
app.include_router(storage.router, prefix=f"/storage/{BOOK_IMAGES_BUCKET}", tags=["Storage"])
app.include_router(profile.router, prefix="/profile", tags=["Profile"])
app.include_router(children.router, prefix="/children", tags=["Children"])
app.include_router(subscription.router, prefix="/subscription", tags=["Subscription"])
app.include_router(reading.router, prefix="/reading", tags=["Reading"])
app.include_router(admin.router, prefix="/admin", tags=["Admin"])


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
