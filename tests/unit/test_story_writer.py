"""Unit tests for the StoryWriter module."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from storybook.core.errors import InvalidStoryError, PaymentRequiredError, RateLimitError
from storybook.core.modules.story_writer import StoryWriter
from storybook.core.signatures.story import PageDraft
from storybook.core.types import ChildProfile, DrawingAnalysis, DrawingCharacter


def page_dict(n: int, **overrides) -> dict:
    page = {
        "character": f"Character {n}",
        "emoji": "🐢",
        "title": f"Page {n}",
        "description": f"Something happens on page {n}.",
        "sound": "whoosh",
    }
    page.update(overrides)
    return page


class VendorException(Exception):
    def __init__(self, status_code):
        super().__init__(f"vendor answered {status_code}")
        self.status_code = status_code


class TestValidate:
    def test_builds_pages_from_dicts(self):
        story = StoryWriter.validate("  Tosbi Learns to Swim ", [page_dict(1), page_dict(2)], 5)
        assert story.title == "Tosbi Learns to Swim"
        assert [p.title for p in story.pages] == ["Page 1", "Page 2"]

    def test_accepts_page_drafts(self):
        story = StoryWriter.validate("Title", [PageDraft(**page_dict(1))], 5)
        assert story.pages[0].character == "Character 1"

    def test_truncates_to_page_count(self):
        story = StoryWriter.validate("Title", [page_dict(i) for i in range(1, 8)], 3)
        assert story.page_count == 3

    def test_missing_sound_defaults_to_pop(self):
        story = StoryWriter.validate("Title", [page_dict(1, sound="")], 5)
        assert story.pages[0].sound == "pop"

    @pytest.mark.parametrize("field", ["character", "emoji", "title", "description"])
    def test_missing_required_field_is_invalid(self, field):
        with pytest.raises(InvalidStoryError, match=field):
            StoryWriter.validate("Title", [page_dict(1, **{field: ""})], 5)

    def test_empty_title_is_invalid(self):
        with pytest.raises(InvalidStoryError):
            StoryWriter.validate("  ", [page_dict(1)], 5)

    def test_no_pages_is_invalid(self):
        with pytest.raises(InvalidStoryError):
            StoryWriter.validate("Title", [], 5)

    def test_non_object_page_is_invalid(self):
        with pytest.raises(InvalidStoryError):
            StoryWriter.validate("Title", ["just text"], 5)


class TestWriteFromTheme:
    def test_returns_story_with_theme(self):
        writer = StoryWriter(lm=MagicMock())
        writer.from_theme = MagicMock(
            return_value=SimpleNamespace(title="Space Cats", pages=[page_dict(1), page_dict(2)])
        )

        story = writer("space cats", page_count=2, language="en", profile=ChildProfile(child_name="Ada"))

        assert story.title == "Space Cats"
        assert story.theme == "space cats"
        kwargs = writer.from_theme.call_args.kwargs
        assert kwargs["page_count"] == 2
        assert kwargs["language"] == "English"
        assert "Ada" in kwargs["child_profile"]

    def test_page_count_is_clamped(self):
        writer = StoryWriter(lm=MagicMock())
        writer.from_theme = MagicMock(
            return_value=SimpleNamespace(title="T", pages=[page_dict(i) for i in range(25)])
        )

        story = writer("theme", page_count=50)

        assert writer.from_theme.call_args.kwargs["page_count"] == 20
        assert story.page_count == 20

    def test_no_profile_is_sent_as_none(self):
        writer = StoryWriter(lm=MagicMock())
        writer.from_theme = MagicMock(return_value=SimpleNamespace(title="T", pages=[page_dict(1)]))

        writer("theme", page_count=1)

        assert writer.from_theme.call_args.kwargs["child_profile"] == "none"

    def test_vendor_rate_limit_is_mapped(self):
        writer = StoryWriter(lm=MagicMock())
        writer.from_theme = MagicMock(side_effect=VendorException(429))

        with pytest.raises(RateLimitError):
            writer("theme")

    def test_vendor_payment_required_is_mapped(self):
        writer = StoryWriter(lm=MagicMock())
        writer.from_theme = MagicMock(side_effect=VendorException(402))

        with pytest.raises(PaymentRequiredError):
            writer("theme")


class TestWriteFromDrawing:
    def test_passes_analysis_and_keeps_it_on_story(self):
        analysis = DrawingAnalysis(
            colors=["blue", "green"],
            characters=[DrawingCharacter(name="Fish", emoji="🐟", description="a happy fish")],
            theme="underwater",
            mood="cheerful",
            title="The Happy Fish",
        )
        writer = StoryWriter(lm=MagicMock())
        writer.from_drawing = MagicMock(return_value=SimpleNamespace(title="The Happy Fish", pages=[page_dict(1)]))

        story = writer.write_from_drawing(analysis, page_count=1, user_description="  ")

        kwargs = writer.from_drawing.call_args.kwargs
        assert kwargs["colors"] == "blue, green"
        assert kwargs["characters"] == "Fish (a happy fish)"
        assert kwargs["user_description"] == "none"
        assert story.theme == "underwater"
        assert story.analysis is analysis
