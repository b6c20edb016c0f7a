# Storybook Studio - Core Domain

# Re-export types for convenient access
from .types import (
    ChildProfile,
    DrawingCharacter,
    DrawingAnalysis,
    StoryPage,
    GeneratedStory,
    PageImage,
)

__all__ = [
    "ChildProfile",
    "DrawingCharacter",
    "DrawingAnalysis",
    "StoryPage",
    "GeneratedStory",
    "PageImage",
]
