"""Unit tests for the ARQ worker."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from storybook.api.models.enums import TaskStatus
from storybook.api.models.responses import TaskResponse


def task_with_status(status: TaskStatus, book_id=None) -> TaskResponse:
    return TaskResponse(id="task-1", user_id="user-1", status=status, book_id=book_id)


class TestProcessBookTask:
    """Tests for the process_book_task ARQ task."""

    @pytest.mark.asyncio
    async def test_task_calls_process_task(self):
        """Task should run the pipeline for the given task id."""
        with patch("storybook.worker.process_task", new_callable=AsyncMock) as mock_process:
            mock_process.return_value = task_with_status(TaskStatus.COMPLETED, "book-1")
            from storybook.worker import process_book_task

            result = await process_book_task({"job_id": "job-1"}, task_id="task-1")

            mock_process.assert_awaited_once_with("task-1")
            assert result == {"task_id": "task-1", "status": "completed", "book_id": "book-1"}

    @pytest.mark.asyncio
    async def test_failed_pipeline_is_reported_not_raised(self):
        """Failures are recorded on the task row, so the job itself succeeds."""
        with patch("storybook.worker.process_task", new_callable=AsyncMock) as mock_process:
            mock_process.return_value = task_with_status(TaskStatus.FAILED)
            from storybook.worker import process_book_task

            result = await process_book_task({}, task_id="task-1")

            assert result["status"] == "failed"

    @pytest.mark.asyncio
    async def test_missing_task_propagates(self):
        """A task row that does not exist fails the job."""
        from storybook.core.errors import TaskNotFoundError

        with patch("storybook.worker.process_task", new_callable=AsyncMock) as mock_process:
            mock_process.side_effect = TaskNotFoundError()
            from storybook.worker import process_book_task

            with pytest.raises(TaskNotFoundError):
                await process_book_task({}, task_id="missing")


class TestStartup:
    @pytest.mark.asyncio
    async def test_clears_stale_in_progress_keys(self):
        from storybook.worker import startup

        async def scan_iter(match):
            assert match == "arq:in-progress:*"
            for key in (b"arq:in-progress:abc", b"arq:in-progress:def"):
                yield key

        redis = MagicMock()
        redis.scan_iter = scan_iter
        redis.keys = AsyncMock()
        redis.delete = AsyncMock()

        with patch("storybook.worker.configure_logging"):
            await startup({"redis": redis})

        assert [c.args[0] for c in redis.delete.await_args_list] == [
            b"arq:in-progress:abc",
            b"arq:in-progress:def",
        ]
        redis.keys.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_redis_is_tolerated(self):
        from storybook.worker import startup

        with patch("storybook.worker.configure_logging"):
            await startup({})


class TestWorkerSettings:
    def test_registers_single_try_job(self):
        from storybook.worker import WorkerSettings, process_book_task

        assert WorkerSettings.functions == [process_book_task]
        assert WorkerSettings.max_tries == 1
        assert WorkerSettings.job_timeout == 600
        assert not hasattr(WorkerSettings, "cron_jobs")
