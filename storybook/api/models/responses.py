"""Pydantic models for API responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer

from .enums import SubscriptionTier, TaskEventType, TaskStatus


# =============================================================================
# Generation
# =============================================================================


class StoryPageResponse(BaseModel):
    """A page of a freshly written story."""

    character: str
    emoji: str
    title: str
    description: str
    sound: str = "pop"


class StoryResponse(BaseModel):
    """A story as written by the story model."""

    title: str
    pages: list[StoryPageResponse]


class DrawingAnalysisResponse(BaseModel):
    """The part of a drawing analysis returned to clients."""

    colors: list[str] = Field(default_factory=list)
    theme: str = ""
    mood: str = ""


class StoryFromDrawingResponse(BaseModel):
    story: StoryResponse
    analysis: DrawingAnalysisResponse


class BookImagesResponse(BaseModel):
    """Illustrations aligned with the requested pages (data URL or null)."""

    images: list[Optional[str]]


class SpeechResponse(BaseModel):
    """Narration as base64-encoded MP3."""

    audio_content: str


class ProcessTaskResponse(BaseModel):
    success: bool
    message: str
    task_id: str


# =============================================================================
# Library
# =============================================================================


class BookPageResponse(BaseModel):
    page_number: int
    character: str
    emoji: str
    title: str
    description: str
    sound: str = "pop"
    background_image: Optional[str] = None
    text_position: Optional[str] = "bottom"


class BookResponse(BaseModel):
    """A book, with its pages when fetched individually."""

    id: str
    user_id: str
    child_id: Optional[str] = None
    title: str
    theme: str
    category: Optional[str] = None
    cover_emoji: str = "📚"
    cover_image: Optional[str] = None
    is_favorite: bool = False
    is_from_drawing: bool = False
    last_read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    pages: Optional[list[BookPageResponse]] = None


class BookListResponse(BaseModel):
    books: list[BookResponse]
    total: int


class CategoryResponse(BaseModel):
    id: str
    name: str
    emoji: str
    color: str
    sort_order: Optional[int] = None


# =============================================================================
# Background tasks
# =============================================================================


class TaskResponse(BaseModel):
    """A background book generation task."""

    id: str
    user_id: str
    status: TaskStatus
    progress_percent: Optional[int] = 0
    progress_message: Optional[str] = None
    input_data: dict[str, Any] = Field(default_factory=dict)
    book_id: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_serializer("input_data")
    def _hide_drawing(self, input_data: dict[str, Any]) -> dict[str, Any]:
        # Drawings can be megabytes of base64; clients only need to know one was sent
        data = {k: v for k, v in input_data.items() if k != "image_base64"}
        if "image_base64" in input_data:
            data["has_drawing"] = bool(input_data["image_base64"])
        return data


class TaskEvent(BaseModel):
    """A change feed message."""

    event: TaskEventType
    task: TaskResponse


# =============================================================================
# Accounts
# =============================================================================


class ProfileResponse(BaseModel):
    id: str
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    favorite_color: Optional[str] = None
    favorite_animal: Optional[str] = None
    favorite_team: Optional[str] = None
    favorite_toy: Optional[str] = None
    favorite_superhero: Optional[str] = None
    favorite_cartoon: Optional[str] = None
    preferred_ai_model: Optional[str] = None
    preferred_image_model: Optional[str] = None
    preferred_language: Optional[str] = None
    preferred_page_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChildResponse(BaseModel):
    id: str
    user_id: str
    name: str
    age: Optional[int] = None
    gender: Optional[str] = None
    avatar_emoji: Optional[str] = None
    favorite_color: Optional[str] = None
    favorite_animal: Optional[str] = None
    favorite_team: Optional[str] = None
    favorite_toy: Optional[str] = None
    favorite_superhero: Optional[str] = None
    favorite_cartoon: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TierFeaturesResponse(BaseModel):
    """What a subscription plan includes."""

    tier: SubscriptionTier
    monthly_credits: int
    max_pages: int
    max_children: int
    price_tl: int
    trial_months: int = 0
    features: dict[str, bool]


class SubscriptionResponse(BaseModel):
    """A user's subscription with derived limits."""

    tier: SubscriptionTier
    monthly_credits: int
    used_credits: int
    max_pages: int
    max_children: int
    price_tl: int
    trial_ends_at: Optional[datetime] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None

    is_admin: bool = False
    remaining_credits: int  # -1 = unlimited
    is_in_trial: bool
    can_create_story: bool
    features: dict[str, bool] = Field(default_factory=dict)


# =============================================================================
# Reading and interactions
# =============================================================================


class ReadingSessionResponse(BaseModel):
    id: str
    user_id: str
    book_id: str
    child_id: Optional[str] = None
    pages_read: int = 0
    duration_seconds: int = 0
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None


class ChildReadingStatsResponse(BaseModel):
    child_id: str
    child_name: str
    avatar_emoji: Optional[str] = None
    books_read: int = 0
    total_pages_read: int = 0
    total_reading_seconds: int = 0
    total_sessions: int = 0
    total_reading_time: str = ""  # Human-readable duration


class ReadingProgressResponse(BaseModel):
    book_id: str
    current_page: int = 0
    completed: bool = False
    updated_at: Optional[datetime] = None


class LikeStatusResponse(BaseModel):
    book_id: str
    child_id: str
    liked: bool
    like_count: int


class CommentResponse(BaseModel):
    id: str
    book_id: str
    child_id: str
    user_id: str
    content: str
    emoji: Optional[str] = None
    child_name: Optional[str] = None
    created_at: Optional[datetime] = None


class ShareListResponse(BaseModel):
    book_id: str
    child_ids: list[str]


# =============================================================================
# Admin
# =============================================================================


class AdminUserResponse(BaseModel):
    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    user_created_at: Optional[datetime] = None
    tier: Optional[SubscriptionTier] = None
    monthly_credits: int = 0
    used_credits: int = 0
    max_pages: int = 0
    max_children: int = 0
    trial_ends_at: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    children_count: int = 0
    books_count: int = 0
    total_reading_seconds: int = 0
    is_admin: bool = False


class AdminStatisticsResponse(BaseModel):
    total_users: int = 0
    total_children: int = 0
    total_books: int = 0
    total_reading_sessions: int = 0
    total_reading_hours: float = 0.0
    users_by_tier: dict[str, int] = Field(default_factory=dict)
    new_users_this_month: int = 0
    books_this_month: int = 0
