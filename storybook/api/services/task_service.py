"""Task service: create background book generation tasks and enqueue them."""

import logging

from ...config.story import clamp_page_count
from ...core.errors import InvalidRequestError
from ...core.images import validate_drawing
from ..arq_pool import get_pool as get_arq_pool
from ..database.repository import TaskRepository
from ..models.requests import BookGenerationRequest
from ..models.responses import TaskResponse
from .account_service import AccountService, AuthUser

logger = logging.getLogger(__name__)

# ARQ function name registered by the worker
PROCESS_TASK_JOB = "process_book_task"


def validate_generation_request(request: BookGenerationRequest) -> None:
    """Exactly one of theme and drawing; drawings must be valid uploads."""
    theme = (request.theme or "").strip()
    if bool(theme) == bool(request.image_base64):
        raise InvalidRequestError("Provide either a theme or a drawing")
    if request.image_base64:
        validate_drawing(request.image_base64)


async def prepare_generation(
    accounts: AccountService, user: AuthUser, request: BookGenerationRequest
) -> dict:
    """
    Validate a book request, consume a story credit and build the input data.

    Raises:
        InvalidRequestError / InvalidImageError / ImageTooLargeError: Bad input
        CreditsExhaustedError: No credits left
    """
    validate_generation_request(request)
    status = await accounts.consume_story_credit(user)
    page_count = status.max_pages(clamp_page_count(request.page_count))

    profile = request.profile.model_dump(exclude_none=True) if request.profile else None
    return {
        "user_id": user.id,
        "theme": (request.theme or "").strip() or None,
        "image_base64": request.image_base64,
        "user_description": request.user_description,
        "language": request.language.value,
        "page_count": page_count,
        "model": request.model,
        "image_model": request.image_model,
        "category": request.category,
        "child_id": request.child_id or (profile or {}).get("child_id"),
        "profile": profile,
    }


class TaskService:
    """Service for creating and managing background generation tasks."""

    def __init__(self, repo: TaskRepository, accounts: AccountService):
        self.repo = repo
        self.accounts = accounts

    async def create_task(self, user: AuthUser, request: BookGenerationRequest) -> TaskResponse:
        """
        Create a pending task and enqueue it for the worker.

        Returns:
            The pending task, which clients follow through the change feed.
        """
        input_data = await prepare_generation(self.accounts, user, request)
        task = await self.repo.create_task(user.id, input_data)

        # Enqueue ARQ job for background generation
        arq_pool = get_arq_pool()
        await arq_pool.enqueue_job(PROCESS_TASK_JOB, task_id=task.id)
        logger.info(f"Enqueued task {task.id} for user {user.id}")
        return task
