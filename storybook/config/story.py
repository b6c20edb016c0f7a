"""
Story generation constants for Storybook Studio.

Defaults mirror what the reader app offers when creating a book.
"""

# Story generation constants
STORY_CONSTANTS = {
    "default_page_count": 5,
    "min_page_count": 1,
    "max_page_count": 20,
    "default_language": "tr",
    "languages": ("tr", "en"),
    "default_sound": "pop",
    "default_text_position": "bottom",
    "default_cover_emoji": "📚",
    "drawing_cover_emoji": "🎨",
    # data:image/...;base64 payload limit (~8MB of binary image data)
    "max_drawing_data_url_length": 10_700_000,
    "max_analysis_colors": 3,
    "max_analysis_characters": 4,
}

LANGUAGE_NAMES = {
    "tr": "Turkish",
    "en": "English",
}


def clamp_page_count(page_count: int | None) -> int:
    """Clamp a requested page count into the supported range."""
    if not page_count:
        return STORY_CONSTANTS["default_page_count"]
    return max(
        STORY_CONSTANTS["min_page_count"],
        min(page_count, STORY_CONSTANTS["max_page_count"]),
    )


def language_name(code: str | None) -> str:
    """Human-readable language name used in prompts."""
    return LANGUAGE_NAMES.get(code or STORY_CONSTANTS["default_language"], "Turkish")
