"""FastAPI dependency injection for services and repositories."""

from typing import Annotated, AsyncGenerator

import asyncpg
from dotenv import find_dotenv, load_dotenv
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Load .env from project root (find_dotenv searches parent directories)
load_dotenv(find_dotenv())

from .auth.tokens import verify_token  # noqa: E402
from .database.account_repository import AccountRepository, ChildRepository  # noqa: E402
from .database.activity_repository import InteractionRepository, ReadingRepository  # noqa: E402
from .database.admin_repository import AdminRepository  # noqa: E402
from .database.db import get_pool as get_db_pool  # noqa: E402
from .database.repository import BookRepository, TaskRepository  # noqa: E402
from .services.account_service import AccountService, AuthUser  # noqa: E402
from .services.storage import BookImageStorage  # noqa: E402
from .services.task_service import TaskService  # noqa: E402

# Security scheme for bearer token authentication
security = HTTPBearer()


# Database pool and connection dependencies
def get_pool() -> asyncpg.Pool:
    """Get the shared asyncpg pool."""
    return get_db_pool()


async def get_connection(
    pool: Annotated[asyncpg.Pool, Depends(get_pool)]
) -> AsyncGenerator[asyncpg.Connection, None]:
    """Acquire a pooled connection for the duration of a request."""
    async with pool.acquire() as conn:
        yield conn


Connection = Annotated[asyncpg.Connection, Depends(get_connection)]


# Repositories - require a connection
def get_book_repository(conn: Connection) -> BookRepository:
    return BookRepository(conn)


def get_task_repository(conn: Connection) -> TaskRepository:
    return TaskRepository(conn)


def get_account_repository(conn: Connection) -> AccountRepository:
    return AccountRepository(conn)


def get_child_repository(conn: Connection) -> ChildRepository:
    return ChildRepository(conn)


def get_reading_repository(conn: Connection) -> ReadingRepository:
    return ReadingRepository(conn)


def get_interaction_repository(conn: Connection) -> InteractionRepository:
    return InteractionRepository(conn)


def get_admin_repository(conn: Connection) -> AdminRepository:
    return AdminRepository(conn)


# Services - depend on repositories
def get_account_service(
    accounts: Annotated[AccountRepository, Depends(get_account_repository)],
    children: Annotated[ChildRepository, Depends(get_child_repository)],
) -> AccountService:
    """Get an AccountService instance with injected repositories."""
    return AccountService(accounts, children)


def get_task_service(
    repo: Annotated[TaskRepository, Depends(get_task_repository)],
    accounts: Annotated[AccountService, Depends(get_account_service)],
) -> TaskService:
    """Get a TaskService instance with injected repository."""
    return TaskService(repo, accounts)


def get_storage() -> BookImageStorage:
    return BookImageStorage()


# Type aliases for cleaner route signatures
Pool = Annotated[asyncpg.Pool, Depends(get_pool)]
Books = Annotated[BookRepository, Depends(get_book_repository)]
Tasks = Annotated[TaskRepository, Depends(get_task_repository)]
Accounts = Annotated[AccountRepository, Depends(get_account_repository)]
Children = Annotated[ChildRepository, Depends(get_child_repository)]
Reading = Annotated[ReadingRepository, Depends(get_reading_repository)]
Interactions = Annotated[InteractionRepository, Depends(get_interaction_repository)]
AdminRepo = Annotated[AdminRepository, Depends(get_admin_repository)]
AccountSvc = Annotated[AccountService, Depends(get_account_service)]
TaskSvc = Annotated[TaskService, Depends(get_task_service)]
Storage = Annotated[BookImageStorage, Depends(get_storage)]


# Authentication dependency
async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)]
) -> AuthUser:
    """Verify the bearer token and return the caller.

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    payload = verify_token(credentials.credentials)
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthUser(id=payload["sub"], email=payload.get("email"))


# Type alias for authenticated user
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]


async def get_admin_user(user: CurrentUser, accounts: Accounts) -> AuthUser:
    """Require the admin role.

    Raises:
        HTTPException: 403 if the caller is not an admin
    """
    if not await accounts.is_admin(user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return user


AdminUser = Annotated[AuthUser, Depends(get_admin_user)]
