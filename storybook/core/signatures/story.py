"""
DSPy Signatures for writing picture-book stories.

Both signatures produce the same shape: a title plus one entry per page,
where every page has a featured character, an emoji, a short page title,
a one or two sentence description and a sound effect.
"""

import dspy
from pydantic import BaseModel, Field


class PageDraft(BaseModel):
    """One page of a story as written by the LLM."""

    character: str = Field(description="Name of the character featured on this page")
    emoji: str = Field(description="A single emoji for the character")
    title: str = Field(description="Page title, at most 8 words")
    description: str = Field(description="1-2 sentences, at most 25 words")
    sound: str = Field(description="A sound effect, at most 3 words")


class ThemeStorySignature(dspy.Signature):
    """
    Write a children's picture-book story about a theme.

    RULES:
    1) First imagine one complete story with a beginning, middle and end
    2) Then split it into exactly `page_count` consecutive pages; every page
       continues the previous one
    3) Characters behave consistently
    4) The last page ends on a positive note
    5) Keep language simple and playful for 3-7 year olds
    6) If a child profile is given, make the child the hero and weave in
       their favorite things naturally
    """

    theme: str = dspy.InputField(desc="Theme or idea for the story")
    child_profile: str = dspy.InputField(desc="Details about the child, or 'none'")
    page_count: int = dspy.InputField(desc="Exact number of pages to write")
    language: str = dspy.InputField(desc="Language to write the story in")

    title: str = dspy.OutputField(desc="Book title")
    pages: list[PageDraft] = dspy.OutputField(desc="Exactly `page_count` pages in reading order")


class DrawingStorySignature(dspy.Signature):
    """
    Write a coherent children's picture-book story based on a child's drawing.

    RULES:
    1) First imagine one complete story with a beginning, middle and end
       that uses the characters, colors and mood found in the drawing
    2) Then split it into exactly `page_count` consecutive pages; every page
       continues the previous one
    3) Characters behave consistently
    4) The last page ends on a positive note
    5) Honor the parent's description of the drawing when one is given
    """

    colors: str = dspy.InputField(desc="Main colors of the drawing")
    theme: str = dspy.InputField(desc="Theme of the drawing")
    mood: str = dspy.InputField(desc="Mood of the drawing")
    characters: str = dspy.InputField(desc="Characters found in the drawing with descriptions")
    suggested_title: str = dspy.InputField(desc="Title suggested by the drawing analysis")
    user_description: str = dspy.InputField(desc="What the parent says the drawing shows, or 'none'")
    child_profile: str = dspy.InputField(desc="Details about the child, or 'none'")
    page_count: int = dspy.InputField(desc="Exact number of pages to write")
    language: str = dspy.InputField(desc="Language to write the story in")

    title: str = dspy.OutputField(desc="Book title")
    pages: list[PageDraft] = dspy.OutputField(desc="Exactly `page_count` pages in reading order")
