from .drawing_analyzer import DrawingAnalyzer
from .narrator import Narrator, validate_text
from .page_illustrator import PageIllustrator
from .story_writer import StoryWriter

__all__ = [
    "DrawingAnalyzer",
    "Narrator",
    "PageIllustrator",
    "StoryWriter",
    "validate_text",
]
