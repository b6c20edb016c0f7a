"""Pytest fixtures for unit and API tests."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import find_dotenv, load_dotenv
from fastapi.testclient import TestClient

# Load environment variables (find_dotenv searches parent directories)
load_dotenv(find_dotenv())

from storybook.api.main import app  # noqa: E402
from storybook.api.database.account_repository import AccountRepository, ChildRepository  # noqa: E402
from storybook.api.database.activity_repository import InteractionRepository, ReadingRepository  # noqa: E402
from storybook.api.database.admin_repository import AdminRepository  # noqa: E402
from storybook.api.database.repository import BookRepository, TaskRepository  # noqa: E402
from storybook.api.dependencies import (  # noqa: E402
    get_account_repository,
    get_account_service,
    get_admin_repository,
    get_book_repository,
    get_child_repository,
    get_current_user,
    get_interaction_repository,
    get_pool,
    get_reading_repository,
    get_storage,
    get_task_repository,
    get_task_service,
)
from storybook.api.services.account_service import AccountService, AuthUser  # noqa: E402
from storybook.api.services.storage import BookImageStorage  # noqa: E402
from storybook.api.models.enums import SubscriptionTier  # noqa: E402
from storybook.api.services.subscriptions import SubscriptionStatus, tier_limits  # noqa: E402
from storybook.api.services.task_service import TaskService  # noqa: E402

TEST_USER = AuthUser(id="user-123", email="parent@example.com")


def create_mock_pool_and_conn():
    """Create a properly mocked asyncpg pool and connection."""
    mock_conn = AsyncMock()
    mock_pool = MagicMock()

    # Create an async context manager for acquire()
    @asynccontextmanager
    async def mock_acquire():
        yield mock_conn

    mock_pool.acquire = mock_acquire
    mock_pool.close = AsyncMock()

    return mock_pool, mock_conn


@pytest.fixture
def test_user():
    return TEST_USER


@pytest.fixture
def mock_pool_and_conn():
    return create_mock_pool_and_conn()


@pytest.fixture
def storage(tmp_path):
    """Book image storage in a temporary directory."""
    return BookImageStorage(base_dir=tmp_path / "book-images", public_base_url="http://test")


@pytest.fixture
def mocks(mock_pool_and_conn, storage):
    """Mock repositories and services keyed by name."""
    pool, _ = mock_pool_and_conn
    account_service = AsyncMock(spec=AccountService)
    # Top plan by default so page counts pass through unless a test narrows it
    account_service.get_status.return_value = SubscriptionStatus(
        subscription=tier_limits(SubscriptionTier.SONSUZ_MASAL)
    )
    reading = AsyncMock(spec=ReadingRepository)
    reading.can_access.return_value = True
    interactions = AsyncMock(spec=InteractionRepository)
    interactions.can_access.return_value = True
    return {
        "pool": pool,
        "books": AsyncMock(spec=BookRepository),
        "tasks": AsyncMock(spec=TaskRepository),
        "accounts": AsyncMock(spec=AccountRepository),
        "children": AsyncMock(spec=ChildRepository),
        "reading": reading,
        "interactions": interactions,
        "admin": AsyncMock(spec=AdminRepository),
        "account_service": account_service,
        "task_service": AsyncMock(spec=TaskService),
        "storage": storage,
    }


@pytest.fixture
def client_with_mocks(mocks):
    """TestClient with mocked dependencies and an authenticated caller."""
    app.dependency_overrides[get_pool] = lambda: mocks["pool"]
    app.dependency_overrides[get_book_repository] = lambda: mocks["books"]
    app.dependency_overrides[get_task_repository] = lambda: mocks["tasks"]
    app.dependency_overrides[get_account_repository] = lambda: mocks["accounts"]
    app.dependency_overrides[get_child_repository] = lambda: mocks["children"]
    app.dependency_overrides[get_reading_repository] = lambda: mocks["reading"]
    app.dependency_overrides[get_interaction_repository] = lambda: mocks["interactions"]
    app.dependency_overrides[get_admin_repository] = lambda: mocks["admin"]
    app.dependency_overrides[get_account_service] = lambda: mocks["account_service"]
    app.dependency_overrides[get_task_service] = lambda: mocks["task_service"]
    app.dependency_overrides[get_storage] = lambda: mocks["storage"]
    app.dependency_overrides[get_current_user] = lambda: TEST_USER

    # No lifespan: the database and Redis are never touched
    client = TestClient(app, raise_server_exceptions=False)
    yield client, mocks

    app.dependency_overrides.clear()
