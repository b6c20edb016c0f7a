"""
ARQ worker for background book generation.

Run with: arq storybook.worker.WorkerSettings
"""

import logging
from typing import Any

from arq.connections import RedisSettings
from dotenv import load_dotenv

# Load environment variables before importing app modules
load_dotenv()

from storybook.api.config import LOG_FORMAT  # noqa: E402
from storybook.api.logging import configure_logging  # noqa: E402
from storybook.api.services.book_generation import process_task  # noqa: E402

logger = logging.getLogger(__name__)


async def process_book_task(ctx: dict[str, Any], task_id: str) -> dict[str, Any]:
    """
    ARQ task for generating a book from a task row.

    This is a thin wrapper around the standalone process_task function,
    which records failures on the task row itself.

    Args:
        ctx: ARQ context (contains job_id, redis connection, etc.)
        task_id: ID of the book_generation_tasks row

    Returns:
        Dict with task_id, final status and book_id
    """
    job_id = ctx.get("job_id", "unknown")
    logger.info(f"Starting book generation job {job_id} for task {task_id}")

    task = await process_task(task_id)
    logger.info(f"Finished book generation job {job_id} for task {task_id}: {task.status.value}")
    return {"task_id": task_id, "status": task.status.value, "book_id": task.book_id}


async def startup(ctx: dict[str, Any]) -> None:
    """Called when worker starts up."""
    configure_logging(json_format=LOG_FORMAT == "json")
    logger.info("ARQ worker starting up")
    await _cleanup_stale_redis_keys(ctx)


async def _cleanup_stale_redis_keys(ctx: dict[str, Any]) -> None:
    """Clear arq:in-progress:* keys left by a crashed worker so their jobs can run."""
    redis = ctx.get("redis")
    if not redis:
        logger.warning("Redis connection not available in context, skipping Redis cleanup")
        return

    try:
        removed = 0
        async for key in redis.scan_iter(match="arq:in-progress:*"):
            await redis.delete(key)
            removed += 1
        if removed:
            logger.info(f"Startup Redis cleanup: removed {removed} stale in-progress key(s)")
    except Exception as e:
        logger.error(f"Failed Redis cleanup: {e}")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Called when worker shuts down."""
    logger.info("ARQ worker shutting down")


class WorkerSettings:
    """ARQ worker configuration."""

    functions = [process_book_task]

    # Lifecycle hooks
    on_startup = startup
    on_shutdown = shutdown

    # Redis connection settings
    redis_settings = RedisSettings()

    # Job settings
    max_jobs = 2  # Generation is vendor-bound; keep provider rate limits in check
    job_timeout = 600  # 10 minutes max per job
    max_tries = 1  # Failures are recorded on the task row; the user retries

    # Health check
    health_check_interval = 30
