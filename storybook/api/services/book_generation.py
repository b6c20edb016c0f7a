"""
Standalone book generation logic.

Runs the generation pipeline (analyze drawing, write story, illustrate
pages, upload images, save rows) and can be called from the ARQ worker,
the synchronous book endpoints or the task processing endpoint. Vendor
calls are sequential except page illustrations and uploads, which fan
out concurrently and are awaited together.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import asyncpg

from ...config import get_image_client, get_story_lm, get_vision_lm
from ...config.story import STORY_CONSTANTS, clamp_page_count
from ...core.errors import (
    MissingBackgroundsError,
    ServiceNotConfiguredError,
    StorybookError,
    TaskNotFoundError,
)
from ...core.modules import DrawingAnalyzer, PageIllustrator, StoryWriter
from ...core.types import ChildProfile, GeneratedStory, PageImage
from ..config import get_database_dsn
from ..database.repository import BookRepository, TaskRepository
from ..logging import book_logger
from ..models.enums import TaskStatus
from ..models.responses import TaskResponse
from .storage import BookImageStorage

# (status, message key, percent)
StageCallback = Callable[[TaskStatus, str, int], Awaitable[None]]

PROGRESS_MESSAGES = {
    "tr": {
        "analyzing": "Çizim analiz ediliyor...",
        "generating_story": "Hikaye yazılıyor...",
        "generating_images": "Görseller oluşturuluyor...",
        "saving": "Kitap kaydediliyor...",
        "completed": "Hikaye hazır!",
        "failed": "Hata oluştu",
    },
    "en": {
        "analyzing": "Analyzing the drawing...",
        "generating_story": "Writing the story...",
        "generating_images": "Creating illustrations...",
        "saving": "Saving the book...",
        "completed": "Your story is ready!",
        "failed": "Something went wrong",
    },
}

STAGE_PERCENT = {
    "analyzing": 10,
    "generating_story": 25,
    "generating_images": 40,
    "saving": 90,
    "completed": 100,
    "failed": 0,
}


def progress_message(key: str, language: Optional[str]) -> str:
    messages = PROGRESS_MESSAGES.get(language or "", PROGRESS_MESSAGES["tr"])
    return messages[key]


def new_book_id() -> str:
    """Book ids are ``book-<epoch millis>``."""
    return f"book-{int(time.time() * 1000)}"


@dataclass
class GenerationOptions:
    """Everything a book needs besides its theme or drawing."""

    language: str = STORY_CONSTANTS["default_language"]
    page_count: int = STORY_CONSTANTS["default_page_count"]
    model: Optional[str] = None
    image_model: Optional[str] = None
    category: Optional[str] = None
    child_id: Optional[str] = None
    profile: Optional[ChildProfile] = None
    user_description: Optional[str] = None

    @classmethod
    def from_input_data(cls, data: dict) -> "GenerationOptions":
        """Build from a task's input_data (snake_case or camelCase keys)."""

        def pick(*keys):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        profile = ChildProfile.from_dict(pick("profile"))
        child_id = pick("child_id", "childId") or (profile.child_id if profile else None)
        return cls(
            language=pick("language") or STORY_CONSTANTS["default_language"],
            page_count=clamp_page_count(pick("page_count", "pageCount")),
            model=pick("model"),
            image_model=pick("image_model", "imageModel"),
            category=pick("category"),
            child_id=child_id,
            profile=profile,
            user_description=pick("user_description", "userDescription"),
        )


# =============================================================================
# Vendor module factories
# =============================================================================


def story_writer_for(model: Optional[str] = None) -> StoryWriter:
    try:
        return StoryWriter(lm=get_story_lm(model))
    except ValueError as e:
        raise ServiceNotConfiguredError(str(e)) from e


def drawing_analyzer() -> DrawingAnalyzer:
    try:
        return DrawingAnalyzer(lm=get_vision_lm())
    except ValueError as e:
        raise ServiceNotConfiguredError(str(e)) from e


def page_illustrator_for(image_model: Optional[str] = None) -> PageIllustrator:
    try:
        return PageIllustrator(image_model=image_model, client=get_image_client())
    except ValueError as e:
        raise ServiceNotConfiguredError(str(e)) from e


# =============================================================================
# Pipeline stages
# =============================================================================


async def write_story_from_theme(theme: str, options: GenerationOptions) -> GeneratedStory:
    writer = story_writer_for(options.model)
    # DSPy calls block, so run them off the event loop
    return await asyncio.to_thread(
        writer,
        theme,
        page_count=options.page_count,
        language=options.language,
        profile=options.profile,
    )


async def write_story_from_drawing(
    image_base64: str,
    options: GenerationOptions,
    on_stage: Optional[StageCallback] = None,
) -> GeneratedStory:
    """Analyze a drawing, then write a story from the analysis."""
    analyzer = drawing_analyzer()
    if on_stage:
        await on_stage(TaskStatus.ANALYZING, "analyzing", STAGE_PERCENT["analyzing"])
    analysis = await asyncio.to_thread(analyzer, image_base64, options.language)

    writer = story_writer_for(options.model)
    if on_stage:
        await on_stage(TaskStatus.GENERATING_STORY, "generating_story", STAGE_PERCENT["generating_story"])
    return await asyncio.to_thread(
        writer.write_from_drawing,
        analysis,
        page_count=options.page_count,
        language=options.language,
        profile=options.profile,
        user_description=options.user_description,
    )


async def illustrate_story(story: GeneratedStory, image_model: Optional[str] = None) -> list[Optional[PageImage]]:
    """Illustrate every page; at least one page must get an image."""
    illustrator = page_illustrator_for(image_model)
    images = await illustrator.illustrate_story(story.pages, story.theme or story.title)
    if not any(images):
        raise MissingBackgroundsError()
    return images


async def _save_book(
    pool: asyncpg.Pool,
    user_id: str,
    book_id: str,
    story: GeneratedStory,
    page_urls: list[Optional[str]],
    options: GenerationOptions,
    cover_image: Optional[str] = None,
    is_from_drawing: bool = False,
) -> None:
    pages = [
        {
            "page_number": index + 1,
            "character": page.character,
            "emoji": page.emoji,
            "title": page.title,
            "description": page.description,
            "sound": page.sound or STORY_CONSTANTS["default_sound"],
            "background_image": page_urls[index] if index < len(page_urls) else None,
            "text_position": STORY_CONSTANTS["default_text_position"],
        }
        for index, page in enumerate(story.pages)
    ]
    book = {
        "id": book_id,
        "user_id": user_id,
        "child_id": options.child_id,
        "title": story.title,
        "theme": story.theme or story.title,
        "category": options.category or "other",
        "cover_emoji": story.cover_emoji or STORY_CONSTANTS["default_cover_emoji"],
        "cover_image": cover_image or next((url for url in page_urls if url), None),
        "is_from_drawing": is_from_drawing,
    }

    async with pool.acquire() as conn:
        await BookRepository(conn).save_book(book, pages)


async def _finish_book(
    pool: asyncpg.Pool,
    user_id: str,
    story: GeneratedStory,
    options: GenerationOptions,
    on_stage: Optional[StageCallback],
    storage: Optional[BookImageStorage],
    drawing: Optional[str] = None,
) -> str:
    """Illustrate, upload and persist a written story. Returns the book id."""
    storage = storage or BookImageStorage()

    if on_stage:
        await on_stage(TaskStatus.GENERATING_IMAGES, "generating_images", STAGE_PERCENT["generating_images"])
    images = await illustrate_story(story, options.image_model)

    if on_stage:
        await on_stage(TaskStatus.GENERATING_IMAGES, "saving", STAGE_PERCENT["saving"])
    book_id = new_book_id()
    cover_image = None
    if drawing:
        page_urls, cover_image = await asyncio.gather(
            storage.upload_pages(book_id, images),
            storage.upload_drawing(book_id, drawing),
        )
    else:
        page_urls = await storage.upload_pages(book_id, images)

    await _save_book(
        pool,
        user_id,
        book_id,
        story,
        page_urls,
        options,
        cover_image=cover_image,
        is_from_drawing=drawing is not None,
    )
    return book_id


async def generate_book_from_theme(
    pool: asyncpg.Pool,
    user_id: str,
    theme: str,
    options: GenerationOptions,
    on_stage: Optional[StageCallback] = None,
    storage: Optional[BookImageStorage] = None,
) -> str:
    """Write, illustrate and save a book about a theme. Returns the book id."""
    if on_stage:
        await on_stage(TaskStatus.GENERATING_STORY, "generating_story", STAGE_PERCENT["generating_story"])
    story = await write_story_from_theme(theme, options)
    return await _finish_book(pool, user_id, story, options, on_stage, storage)


async def generate_book_from_drawing(
    pool: asyncpg.Pool,
    user_id: str,
    image_base64: str,
    options: GenerationOptions,
    on_stage: Optional[StageCallback] = None,
    storage: Optional[BookImageStorage] = None,
) -> str:
    """Analyze a drawing, then write, illustrate and save a book. Returns the book id."""
    story = await write_story_from_drawing(image_base64, options, on_stage)
    return await _finish_book(pool, user_id, story, options, on_stage, storage, drawing=image_base64)


# =============================================================================
# Background task processing
# =============================================================================


async def process_task(
    task_id: str,
    pool: Optional[asyncpg.Pool] = None,
    storage: Optional[BookImageStorage] = None,
) -> TaskResponse:
    """
    Run the pipeline for a background task row and record the outcome.

    Pipeline failures mark the task ``failed`` with the error message and
    are not re-raised; the returned task carries the final status.

    Args:
        task_id: ID of the book_generation_tasks row
        pool: Database pool; a dedicated pool is created when omitted
        storage: Image storage (defaults to local book image storage)

    Raises:
        TaskNotFoundError: If the task row does not exist
    """
    owns_pool = pool is None
    if owns_pool:
        # Dedicated pool avoids event loop conflicts when run from a worker
        pool = await asyncpg.create_pool(get_database_dsn(), min_size=1, max_size=2)

    try:
        async with pool.acquire() as conn:
            task = await TaskRepository(conn).get_task(task_id)
        if task is None:
            raise TaskNotFoundError(f"Task {task_id} not found")

        input_data = task.input_data
        user_id = input_data.get("user_id") or input_data.get("userId") or task.user_id
        options = GenerationOptions.from_input_data(input_data)
        drawing = input_data.get("image_base64") or input_data.get("imageBase64")
        theme = input_data.get("theme")
        current_stage = "pending"
        stage_start = time.time()

        async def on_stage(status: TaskStatus, key: str, percent: int) -> None:
            nonlocal current_stage, stage_start
            if current_stage != "pending":
                book_logger.stage_completed(task_id, current_stage, time.time() - stage_start)
            current_stage, stage_start = key, time.time()
            book_logger.stage_started(task_id, key)
            async with pool.acquire() as conn:
                await TaskRepository(conn).update_task(
                    task_id,
                    status=status.value,
                    progress_message=progress_message(key, options.language),
                    progress_percent=percent,
                )

        start_time = time.time()
        book_logger.generation_started(task_id, "drawing" if drawing else "theme")

        try:
            if drawing:
                book_id = await generate_book_from_drawing(
                    pool, user_id, drawing, options, on_stage=on_stage, storage=storage
                )
            elif theme:
                book_id = await generate_book_from_theme(
                    pool, user_id, theme, options, on_stage=on_stage, storage=storage
                )
            else:
                raise ValueError("Task has neither a theme nor a drawing")
        except Exception as e:
            book_logger.generation_failed(task_id, e, stage=current_stage)
            message = e.message if isinstance(e, StorybookError) else str(e)
            async with pool.acquire() as conn:
                failed = await TaskRepository(conn).update_task(
                    task_id,
                    status=TaskStatus.FAILED.value,
                    progress_message=progress_message("failed", options.language),
                    progress_percent=STAGE_PERCENT["failed"],
                    error_message=message or type(e).__name__,
                )
            return failed or task.model_copy(
                update={"status": TaskStatus.FAILED, "error_message": message}
            )

        async with pool.acquire() as conn:
            completed = await TaskRepository(conn).update_task(
                task_id,
                status=TaskStatus.COMPLETED.value,
                progress_message=progress_message("completed", options.language),
                progress_percent=STAGE_PERCENT["completed"],
                book_id=book_id,
            )
        if current_stage != "pending":
            book_logger.stage_completed(task_id, current_stage, time.time() - stage_start)
        book_logger.generation_completed(task_id, book_id, time.time() - start_time)
        return completed or task.model_copy(
            update={"status": TaskStatus.COMPLETED, "book_id": book_id}
        )

    finally:
        if owns_pool:
            await pool.close()
