from .drawing_analysis import CharacterSketch, DrawingAnalysisSignature
from .story import DrawingStorySignature, PageDraft, ThemeStorySignature

__all__ = [
    "CharacterSketch",
    "DrawingAnalysisSignature",
    "DrawingStorySignature",
    "PageDraft",
    "ThemeStorySignature",
]
