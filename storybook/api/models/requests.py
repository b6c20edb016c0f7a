"""Pydantic models for API requests."""

from typing import Optional

from pydantic import BaseModel, Field

from .enums import Language, SubscriptionTier


class ChildProfileInput(BaseModel):
    """Optional personalization for a story."""

    child_id: Optional[str] = None
    child_name: Optional[str] = Field(default=None, max_length=100)
    display_name: Optional[str] = Field(default=None, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=18)
    gender: Optional[str] = None
    favorite_color: Optional[str] = None
    favorite_animal: Optional[str] = None
    favorite_team: Optional[str] = None
    favorite_toy: Optional[str] = None
    favorite_superhero: Optional[str] = None
    favorite_cartoon: Optional[str] = None


class StoryOptions(BaseModel):
    """Options shared by every story generation request."""

    language: Language = Language.TR
    page_count: Optional[int] = Field(default=None, ge=1, le=20, description="Defaults to 5")
    model: Optional[str] = Field(default=None, description="Preferred AI model name")
    profile: Optional[ChildProfileInput] = None


class GenerateStoryRequest(StoryOptions):
    """Request body for writing a story from a theme."""

    theme: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Theme or idea for the story",
        examples=["a brave little turtle who learns to swim"],
    )


class GenerateStoryFromDrawingRequest(StoryOptions):
    """Request body for writing a story from a child's drawing.

    ``image_base64`` is checked by the drawing validator so that oversize
    uploads answer 413 and malformed ones 400.
    """

    image_base64: Optional[str] = Field(default=None, description="data:image/...;base64,... URL")
    user_description: Optional[str] = Field(default=None, max_length=1000)


class PageInput(BaseModel):
    """A story page to illustrate."""

    character: str
    emoji: str = ""
    title: str = ""
    description: str
    sound: str = "pop"


class GenerateBookImagesRequest(BaseModel):
    """Request body for illustrating story pages."""

    pages: list[PageInput] = Field(..., min_length=1, max_length=20)
    theme: str = Field(..., min_length=1, max_length=500)
    image_model: Optional[str] = None


class GenerateSpeechRequest(BaseModel):
    """Request body for narration. Text is validated by the narrator."""

    text: Optional[str] = None
    voice_id: Optional[str] = None
    language: Optional[Language] = None


class BookGenerationRequest(StoryOptions):
    """Request body for creating a book, in the background or synchronously.

    Exactly one of ``theme`` and ``image_base64`` must be given.
    """

    theme: Optional[str] = Field(default=None, max_length=500)
    image_base64: Optional[str] = None
    user_description: Optional[str] = Field(default=None, max_length=1000)
    image_model: Optional[str] = None
    category: Optional[str] = None
    child_id: Optional[str] = None


class UpdateBookCategoryRequest(BaseModel):
    category: Optional[str] = None


class UpdateProfileRequest(BaseModel):
    """Partial profile update. Only fields that are sent are changed."""

    display_name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0, le=120)
    gender: Optional[str] = None
    favorite_color: Optional[str] = None
    favorite_animal: Optional[str] = None
    favorite_team: Optional[str] = None
    favorite_toy: Optional[str] = None
    favorite_superhero: Optional[str] = None
    favorite_cartoon: Optional[str] = None
    preferred_ai_model: Optional[str] = None
    preferred_image_model: Optional[str] = None
    preferred_language: Optional[Language] = None
    preferred_page_count: Optional[int] = Field(default=None, ge=1, le=20)


class ChildRequest(BaseModel):
    """Create or partially update a child profile."""

    name: Optional[str] = Field(default=None, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=18)
    gender: Optional[str] = None
    avatar_emoji: Optional[str] = None
    favorite_color: Optional[str] = None
    favorite_animal: Optional[str] = None
    favorite_team: Optional[str] = None
    favorite_toy: Optional[str] = None
    favorite_superhero: Optional[str] = None
    favorite_cartoon: Optional[str] = None


class ChangeTierRequest(BaseModel):
    tier: SubscriptionTier


class StartReadingSessionRequest(BaseModel):
    book_id: str
    child_id: Optional[str] = None


class UpdateReadingSessionRequest(BaseModel):
    """Pages read so far; elapsed seconds default to time since start."""

    pages_read: int = Field(default=0, ge=0)
    duration_seconds: Optional[int] = Field(default=None, ge=0)


class UpdateReadingProgressRequest(BaseModel):
    current_page: int = Field(..., ge=0)
    completed: bool = False


class ToggleLikeRequest(BaseModel):
    child_id: str


class AddCommentRequest(BaseModel):
    child_id: str
    content: str = Field(..., max_length=1000)
    emoji: Optional[str] = None


class UpdateSharesRequest(BaseModel):
    child_ids: list[str] = Field(default_factory=list)


class AdminToggleRoleRequest(BaseModel):
    make_admin: bool
