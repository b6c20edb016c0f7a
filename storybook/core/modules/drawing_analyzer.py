"""
Module for analyzing a child's drawing with a vision-capable LLM.
"""

import logging
from typing import Optional

import dspy
from dspy.utils.exceptions import AdapterParseError

from ...config.story import STORY_CONSTANTS, language_name
from ..errors import InvalidStoryError, translate_vendor_error
from ..images import validate_drawing
from ..signatures.drawing_analysis import CharacterSketch, DrawingAnalysisSignature
from ..types import DrawingAnalysis, DrawingCharacter

logger = logging.getLogger(__name__)


class DrawingAnalyzer(dspy.Module):
    """Describe a drawing's colors, characters, theme and mood."""

    def __init__(self, lm: Optional[dspy.LM] = None):
        super().__init__()
        self.lm = lm
        self.analyze = dspy.Predict(DrawingAnalysisSignature)

    def forward(self, drawing_data_url: str, language: str = "tr") -> DrawingAnalysis:
        """
        Analyze a drawing.

        Args:
            drawing_data_url: The drawing as a data:image/...;base64 URL
            language: Language code for the returned names and title

        Returns:
            DrawingAnalysis with at most 3 colors and 4 characters

        Raises:
            ImageTooLargeError / InvalidImageError: For bad uploads
            InvalidStoryError: If the model output could not be parsed
            StorybookError: Vendor failures mapped by status code
        """
        validate_drawing(drawing_data_url)

        try:
            with dspy.context(lm=self.lm or dspy.settings.lm):
                result = self.analyze(
                    drawing=dspy.Image(url=drawing_data_url),
                    language=language_name(language),
                )
        except AdapterParseError as e:
            logger.error(f"Drawing analysis could not be parsed: {e}")
            raise InvalidStoryError("Invalid analysis format") from e
        except Exception as e:
            raise translate_vendor_error(e, "Vision model") from e

        return self._to_analysis(result)

    def _to_analysis(self, result) -> DrawingAnalysis:
        colors = [str(c).strip() for c in (result.colors or []) if str(c).strip()]
        characters = []
        for sketch in result.characters or []:
            if isinstance(sketch, dict):
                sketch = CharacterSketch.model_validate(sketch)
            if not sketch.name.strip():
                continue
            characters.append(
                DrawingCharacter(
                    name=sketch.name.strip(),
                    emoji=sketch.emoji.strip() or STORY_CONSTANTS["drawing_cover_emoji"],
                    description=sketch.description.strip(),
                )
            )

        analysis = DrawingAnalysis(
            colors=colors[: STORY_CONSTANTS["max_analysis_colors"]],
            characters=characters[: STORY_CONSTANTS["max_analysis_characters"]],
            theme=(result.theme or "").strip(),
            mood=(result.mood or "").strip(),
            title=(result.title or "").strip(),
        )
        logger.info(f"Analysis complete - Title: {analysis.title}")
        return analysis
