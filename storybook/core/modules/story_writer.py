"""
DSPy Module for writing picture-book stories.

Stories are written either from a free-text theme or from the analysis of
a child's drawing. Both paths return a validated GeneratedStory whose
pages are truncated to the requested page count.
"""

import logging
from typing import Optional

import dspy
from dspy.utils.exceptions import AdapterParseError

from ...config.story import STORY_CONSTANTS, clamp_page_count, language_name
from ..errors import InvalidStoryError, translate_vendor_error
from ..signatures.story import DrawingStorySignature, PageDraft, ThemeStorySignature
from ..types import ChildProfile, DrawingAnalysis, GeneratedStory, StoryPage

logger = logging.getLogger(__name__)


def _profile_prompt(profile: Optional[ChildProfile]) -> str:
    if profile is None:
        return "none"
    return profile.to_prompt_string() or "none"


class StoryWriter(dspy.Module):
    """
    Write a children's story as a title plus one entry per page.

    Args:
        lm: LM to run with. Falls back to the globally configured LM.
    """

    def __init__(self, lm: Optional[dspy.LM] = None):
        super().__init__()
        self.lm = lm
        self.from_theme = dspy.Predict(ThemeStorySignature)
        self.from_drawing = dspy.Predict(DrawingStorySignature)

    def forward(
        self,
        theme: str,
        page_count: int = STORY_CONSTANTS["default_page_count"],
        language: str = STORY_CONSTANTS["default_language"],
        profile: Optional[ChildProfile] = None,
    ) -> GeneratedStory:
        """
        Write a story about a theme.

        Raises:
            InvalidStoryError: If the model returned no usable story
            StorybookError: Vendor failures mapped by status code
        """
        page_count = clamp_page_count(page_count)
        logger.info(f"Writing {page_count}-page story for theme: {theme[:60]}")

        result = self._run(
            self.from_theme,
            theme=theme,
            child_profile=_profile_prompt(profile),
            page_count=page_count,
            language=language_name(language),
        )
        story = self.validate(result.title, result.pages, page_count)
        story.theme = theme
        return story

    def write_from_drawing(
        self,
        analysis: DrawingAnalysis,
        page_count: int = STORY_CONSTANTS["default_page_count"],
        language: str = STORY_CONSTANTS["default_language"],
        profile: Optional[ChildProfile] = None,
        user_description: Optional[str] = None,
    ) -> GeneratedStory:
        """Write a story that continues from what was found in a drawing."""
        page_count = clamp_page_count(page_count)
        logger.info(f"Writing {page_count}-page story from drawing: {analysis.title}")

        result = self._run(
            self.from_drawing,
            colors=", ".join(analysis.colors) or "none",
            theme=analysis.theme or "none",
            mood=analysis.mood or "none",
            characters=analysis.characters_prompt() or "none",
            suggested_title=analysis.title or "none",
            user_description=(user_description or "").strip() or "none",
            child_profile=_profile_prompt(profile),
            page_count=page_count,
            language=language_name(language),
        )
        story = self.validate(result.title, result.pages, page_count)
        story.theme = analysis.theme
        story.analysis = analysis
        return story

    def _run(self, predictor, **kwargs):
        try:
            with dspy.context(lm=self.lm or dspy.settings.lm):
                return predictor(**kwargs)
        except AdapterParseError as e:
            logger.error(f"Story output could not be parsed: {e}")
            raise InvalidStoryError() from e
        except Exception as e:
            raise translate_vendor_error(e, "Story model") from e

    @staticmethod
    def validate(title, pages, page_count: int) -> GeneratedStory:
        """
        Turn raw model output into a GeneratedStory.

        A page needs a character, emoji, title and description; a missing
        sound falls back to the default. Extra pages are dropped.

        Raises:
            InvalidStoryError: If the title is empty, any page is incomplete,
                or there are no pages at all
        """
        title = title.strip() if isinstance(title, str) else ""
        if not title:
            raise InvalidStoryError("Story has no title")
        if not pages:
            raise InvalidStoryError("Story has no pages")

        story_pages = []
        for index, draft in enumerate(pages[:page_count]):
            if isinstance(draft, dict):
                data = draft
            elif isinstance(draft, PageDraft):
                data = draft.model_dump()
            else:
                raise InvalidStoryError(f"Page {index + 1} is not an object")

            fields = {
                key: str(data.get(key) or "").strip()
                for key in ("character", "emoji", "title", "description", "sound")
            }
            missing = [k for k in ("character", "emoji", "title", "description") if not fields[k]]
            if missing:
                raise InvalidStoryError(f"Page {index + 1} is missing {', '.join(missing)}")

            story_pages.append(
                StoryPage(
                    character=fields["character"],
                    emoji=fields["emoji"],
                    title=fields["title"],
                    description=fields["description"],
                    sound=fields["sound"] or STORY_CONSTANTS["default_sound"],
                )
            )

        return GeneratedStory(title=title, pages=story_pages)
