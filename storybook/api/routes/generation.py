"""AI generation endpoints: story, story from drawing, page images and speech."""

import asyncio

from fastapi import APIRouter

from ...config.story import clamp_page_count
from ...core.images import validate_drawing
from ...core.modules import Narrator
from ...core.types import ChildProfile, StoryPage
from ..dependencies import AccountSvc, CurrentUser
from ..models.requests import (
    GenerateBookImagesRequest,
    GenerateSpeechRequest,
    GenerateStoryFromDrawingRequest,
    GenerateStoryRequest,
)
from ..models.responses import (
    BookImagesResponse,
    DrawingAnalysisResponse,
    SpeechResponse,
    StoryFromDrawingResponse,
    StoryResponse,
)
from ..services.book_generation import (
    GenerationOptions,
    drawing_analyzer,
    page_illustrator_for,
    story_writer_for,
)

router = APIRouter()

ERROR_RESPONSES = {
    402: {"description": "AI provider credits exhausted (PAYMENT_REQUIRED)"},
    429: {"description": "AI provider rate limit (RATE_LIMIT)"},
    502: {"description": "AI provider failure"},
}


async def _options(request, user, accounts) -> GenerationOptions:
    """Generation options with the page count clamped to the caller's plan."""
    status = await accounts.get_status(user)
    return GenerationOptions(
        language=request.language.value,
        page_count=status.max_pages(clamp_page_count(request.page_count)),
        model=request.model,
        profile=ChildProfile.from_dict(
            request.profile.model_dump(exclude_none=True) if request.profile else None
        ),
    )


@router.post(
    "/story",
    response_model=StoryResponse,
    summary="Write a story from a theme",
    responses=ERROR_RESPONSES,
)
async def generate_story(request: GenerateStoryRequest, user: CurrentUser, accounts: AccountSvc):
    """Write a story about a theme and return its JSON."""
    options = await _options(request, user, accounts)
    writer = story_writer_for(options.model)
    story = await asyncio.to_thread(
        writer,
        request.theme,
        page_count=options.page_count,
        language=options.language,
        profile=options.profile,
    )
    return story.to_dict()


@router.post(
    "/story-from-drawing",
    response_model=StoryFromDrawingResponse,
    summary="Write a story from a child's drawing",
    responses={**ERROR_RESPONSES, 413: {"description": "Drawing too large (IMAGE_TOO_LARGE)"}},
)
async def generate_story_from_drawing(
    request: GenerateStoryFromDrawingRequest, user: CurrentUser, accounts: AccountSvc
):
    """Analyze a drawing, then write a story from what was found in it."""
    validate_drawing(request.image_base64)
    options = await _options(request, user, accounts)
    analyzer = drawing_analyzer()
    analysis = await asyncio.to_thread(analyzer, request.image_base64, options.language)

    writer = story_writer_for(options.model)
    story = await asyncio.to_thread(
        writer.write_from_drawing,
        analysis,
        page_count=options.page_count,
        language=options.language,
        profile=options.profile,
        user_description=request.user_description,
    )
    return StoryFromDrawingResponse(
        story=StoryResponse.model_validate(story.to_dict()),
        analysis=DrawingAnalysisResponse(**analysis.summary()),
    )


@router.post(
    "/book-images",
    response_model=BookImagesResponse,
    summary="Illustrate story pages",
    responses=ERROR_RESPONSES,
)
async def generate_book_images(request: GenerateBookImagesRequest, user: CurrentUser):
    """Illustrate every page concurrently. Pages without an image are null."""
    illustrator = page_illustrator_for(request.image_model)
    pages = [
        StoryPage(
            character=p.character,
            emoji=p.emoji,
            title=p.title,
            description=p.description,
            sound=p.sound,
        )
        for p in request.pages
    ]
    images = await illustrator.illustrate_story(pages, request.theme)
    return BookImagesResponse(images=[image.to_data_url() if image else None for image in images])


@router.post(
    "/speech",
    response_model=SpeechResponse,
    summary="Narrate text",
    responses={**ERROR_RESPONSES, 503: {"description": "TTS not configured"}},
)
async def generate_speech(request: GenerateSpeechRequest, user: CurrentUser):
    """Synthesize text to a base64 MP3 clip."""
    audio = await Narrator().synthesize_base64(
        request.text,
        voice_id=request.voice_id,
        language=request.language.value if request.language else None,
    )
    return SpeechResponse(audio_content=audio)
