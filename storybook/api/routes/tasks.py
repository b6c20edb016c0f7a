"""Background book generation tasks and their change feed."""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status

from ...core.errors import TaskNotFoundError
from ..auth.websocket import WebSocketSessionError, authenticated_websocket_session
from ..database.db import get_pool as get_db_pool
from ..database.repository import TaskRepository
from ..dependencies import CurrentUser, Pool, Tasks, TaskSvc
from ..models.enums import TaskEventType, TaskStatus
from ..models.requests import BookGenerationRequest
from ..models.responses import ProcessTaskResponse, TaskResponse
from ..services import book_generation
from ..services.task_events import task_event_broker

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Create a book in the background",
    description="Consumes a story credit and returns the pending task. Follow it on /tasks/events.",
    responses={402: {"description": "No story credits left (CREDITS_EXHAUSTED)"}},
)
async def create_task(request: BookGenerationRequest, user: CurrentUser, service: TaskSvc):
    """Start a background book generation task."""
    return await service.create_task(user, request)


@router.get(
    "",
    response_model=list[TaskResponse],
    summary="List active tasks",
)
async def list_tasks(user: CurrentUser, repo: Tasks):
    """The caller's tasks that are still running, newest first."""
    return await repo.list_active_tasks(user.id)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get a task",
)
async def get_task(task_id: str, user: CurrentUser, repo: Tasks):
    task = await repo.get_task(task_id, user.id)
    if not task:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task {task_id} not found",
        )
    return task


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel a task",
    description="Deletes the task row. A pipeline already running finishes without reporting back.",
)
async def delete_task(task_id: str, user: CurrentUser, repo: Tasks):
    if not await repo.delete_task(task_id, user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Task {task_id} not found",
        )


@router.post(
    "/{task_id}/process",
    response_model=ProcessTaskResponse,
    summary="Run a task now",
    description="Runs the generation pipeline for the task synchronously and reports its outcome.",
)
async def process_task(task_id: str, user: CurrentUser, pool: Pool, repo: Tasks):
    """Process a pending task in the request instead of the worker."""
    if not await repo.get_task(task_id, user.id):
        raise TaskNotFoundError(f"Task {task_id} not found")

    task = await book_generation.process_task(task_id, pool=pool)
    success = task.status == TaskStatus.COMPLETED
    return ProcessTaskResponse(
        success=success,
        message="Task completed" if success else (task.error_message or "Task failed"),
        task_id=task_id,
    )


async def _event_message(event: dict) -> dict | None:
    """Expand a notification into ``{event, task}`` for the client."""
    event_type = event.get("event")
    if event_type == TaskEventType.DELETE.value:
        return {"event": event_type, "task": {"id": event["task_id"], "user_id": event["user_id"]}}

    async with get_db_pool().acquire() as conn:
        task = await TaskRepository(conn).get_task(event["task_id"])
    if task is None:
        return None
    return {"event": event_type, "task": task.model_dump(mode="json")}


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Clients only listen; anything they send is ignored
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/events")
async def task_events(websocket: WebSocket):
    """Push the caller's task inserts, updates and deletes.

    Authenticate with ``?token=`` or a first message
    ``{"type": "auth", "token": "..."}``.
    """
    try:
        async with authenticated_websocket_session(websocket, "Task events") as payload:
            user_id = payload["sub"]
            await websocket.send_json({"type": "ready"})

            async with task_event_broker.subscribe(user_id) as queue:
                disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
                try:
                    while not disconnect.done():
                        next_event = asyncio.create_task(queue.get())
                        done, _ = await asyncio.wait(
                            {next_event, disconnect}, return_when=asyncio.FIRST_COMPLETED
                        )
                        if next_event not in done:
                            next_event.cancel()
                            break
                        message = await _event_message(next_event.result())
                        if message:
                            await websocket.send_json(message)
                except WebSocketDisconnect:
                    pass
                finally:
                    disconnect.cancel()
    except WebSocketSessionError:
        return
