"""Structured logging infrastructure for the API layer.

Provides JSON-formatted logging for production and human-readable
logging for development, plus a BookLogger helper for book generation events.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Structured fields copied from ``extra=`` onto the JSON record
STRUCTURED_FIELDS = ("task_id", "book_id", "user_id", "stage", "duration", "error_type")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if present
        for name in STRUCTURED_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def configure_logging(json_format: bool = True, level: int = logging.INFO) -> None:
    """Configure structured logging for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Create console handler
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)


class BookLogger:
    """Logger for book generation events with structured fields."""

    def __init__(self):
        self.logger = logging.getLogger("book_generation")

    def generation_started(self, task_id: str, source: str) -> None:
        self.logger.info(
            f"Book generation started from {source}",
            extra={"task_id": task_id, "stage": "started"},
        )

    def stage_started(self, task_id: str, stage: str) -> None:
        self.logger.info(f"Stage started: {stage}", extra={"task_id": task_id, "stage": stage})

    def stage_completed(self, task_id: str, stage: str, duration: float = None) -> None:
        extra = {"task_id": task_id, "stage": stage}
        if duration:
            extra["duration"] = round(duration, 2)
        self.logger.info(f"Stage completed: {stage}", extra=extra)

    def generation_completed(self, task_id: str, book_id: str, duration: float) -> None:
        self.logger.info(
            "Book generation completed",
            extra={
                "task_id": task_id,
                "book_id": book_id,
                "stage": "completed",
                "duration": round(duration, 2),
            },
        )

    def generation_failed(self, task_id: str, error: Exception, stage: str = None) -> None:
        extra = {"task_id": task_id, "stage": stage or "failed", "error_type": type(error).__name__}
        self.logger.error(f"Book generation failed: {error}", extra=extra, exc_info=True)


# Global book logger instance
book_logger = BookLogger()
