"""
DSPy Signature for analyzing a child's drawing.

The vision model reads colors, characters, mood and theme from the
picture so the story writer has something concrete to build on.
"""

import dspy
from pydantic import BaseModel, Field


class CharacterSketch(BaseModel):
    """A character or object the model found in the drawing."""

    name: str
    emoji: str = Field(description="A single emoji that represents the character")
    description: str = Field(description="One short sentence describing the character")


class DrawingAnalysisSignature(dspy.Signature):
    """
    Look at a child's drawing and describe it for a storyteller.

    Be warm and generous: children's drawings are rough, so interpret
    shapes kindly. Never mention that the drawing is messy or unclear.
    """

    drawing: dspy.Image = dspy.InputField(desc="The child's drawing")
    language: str = dspy.InputField(desc="Language to write names, theme, mood and title in")

    colors: list[str] = dspy.OutputField(desc="Main colors in the drawing (at most 3)")
    characters: list[CharacterSketch] = dspy.OutputField(
        desc="Characters or objects in the drawing (at most 4)"
    )
    theme: str = dspy.OutputField(desc="Overall theme of the drawing in one sentence")
    mood: str = dspy.OutputField(desc="Mood or atmosphere of the drawing")
    title: str = dspy.OutputField(desc="A fitting title for a story about this drawing")
