"""Pydantic models for API requests and responses."""

from .enums import Language, SubscriptionTier, TaskEventType, TaskStatus
from .requests import (
    BookGenerationRequest,
    GenerateBookImagesRequest,
    GenerateSpeechRequest,
    GenerateStoryFromDrawingRequest,
    GenerateStoryRequest,
)
from .responses import BookResponse, StoryResponse, TaskResponse

__all__ = [
    "Language",
    "SubscriptionTier",
    "TaskEventType",
    "TaskStatus",
    "BookGenerationRequest",
    "GenerateBookImagesRequest",
    "GenerateSpeechRequest",
    "GenerateStoryFromDrawingRequest",
    "GenerateStoryRequest",
    "BookResponse",
    "StoryResponse",
    "TaskResponse",
]
