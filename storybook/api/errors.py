"""
Exception handlers for the FastAPI application.

Domain errors render as ``{"error": CODE, "message": text}`` with their
status code. Anything unhandled is logged with request context and
rendered as a 500 ``INTERNAL_ERROR``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.errors import StorybookError

logger = logging.getLogger(__name__)


async def storybook_error_handler(request: Request, exc: StorybookError) -> JSONResponse:
    """Render a domain error with its code and status."""
    logger.warning(
        f"{exc.code} in {request.method} {request.url.path}: {exc.message}",
        extra={"error_type": type(exc).__name__},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception and return a generic 500."""
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={"error_type": type(exc).__name__},
    )
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": "Internal server error"},
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""
    app.add_exception_handler(StorybookError, storybook_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
