"""
Centralized domain types for Storybook Studio.

Dataclasses that flow through the generation pipeline are defined here
to keep data flow explicit and avoid circular imports.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional


# =============================================================================
# Personalization
# =============================================================================


@dataclass
class ChildProfile:
    """Details about the child a story is written for."""

    child_id: Optional[str] = None
    child_name: Optional[str] = None
    display_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    favorite_color: Optional[str] = None
    favorite_animal: Optional[str] = None
    favorite_team: Optional[str] = None
    favorite_toy: Optional[str] = None
    favorite_superhero: Optional[str] = None
    favorite_cartoon: Optional[str] = None

    def to_prompt_string(self) -> str:
        """Summarize the profile for a story prompt ("" when empty)."""
        parts = []
        if self.child_name:
            parts.append(f"The hero is a child named {self.child_name}")
        if self.age:
            parts.append(f"age {self.age}")
        if self.gender:
            parts.append(f"gender {self.gender}")
        favorites = [
            ("color", self.favorite_color),
            ("animal", self.favorite_animal),
            ("team", self.favorite_team),
            ("toy", self.favorite_toy),
            ("superhero", self.favorite_superhero),
            ("cartoon", self.favorite_cartoon),
        ]
        liked = [f"favorite {label}: {value}" for label, value in favorites if value]
        if liked:
            parts.append("; ".join(liked))
        return ", ".join(parts)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["ChildProfile"]:
        """Build from a camelCase or snake_case dict, ignoring unknown keys."""
        if not data:
            return None
        aliases = {
            "childId": "child_id",
            "childName": "child_name",
            "displayName": "display_name",
            "favoriteColor": "favorite_color",
            "favoriteAnimal": "favorite_animal",
            "favoriteTeam": "favorite_team",
            "favoriteToy": "favorite_toy",
            "favoriteSuperhero": "favorite_superhero",
            "favoriteCartoon": "favorite_cartoon",
        }
        known = set(cls.__dataclass_fields__)
        values = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)


# =============================================================================
# Drawing analysis
# =============================================================================


@dataclass
class DrawingCharacter:
    """A character or object spotted in a child's drawing."""

    name: str
    emoji: str = "🎨"
    description: str = ""


@dataclass
class DrawingAnalysis:
    """What a vision model saw in a child's drawing."""

    colors: list[str] = field(default_factory=list)
    characters: list[DrawingCharacter] = field(default_factory=list)
    theme: str = ""
    mood: str = ""
    title: str = ""

    def characters_prompt(self) -> str:
        return ", ".join(f"{c.name} ({c.description})" for c in self.characters)

    def summary(self) -> dict:
        """The subset returned to clients alongside the story."""
        return {"colors": self.colors, "theme": self.theme, "mood": self.mood}


# =============================================================================
# Story Types
# =============================================================================


@dataclass
class StoryPage:
    """A single page of a storybook."""

    character: str
    emoji: str
    title: str
    description: str
    sound: str = "pop"
    background_image: Optional[str] = None  # Data URL before upload, public URL after

    def illustration_prompt(self, theme: str) -> str:
        """Prompt used to illustrate this page."""
        return (
            f"Children's book illustration, {theme} theme, featuring {self.character} {self.emoji}. "
            f"{self.description}. Colorful, friendly, safe for children, high quality digital art, "
            f"vibrant colors, 16:9 aspect ratio"
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class GeneratedStory:
    """A complete story as returned by the story writer."""

    title: str
    pages: list[StoryPage]
    theme: str = ""
    analysis: Optional[DrawingAnalysis] = None

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def cover_emoji(self) -> Optional[str]:
        return self.pages[0].emoji if self.pages else None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "pages": [
                {k: v for k, v in page.to_dict().items() if k != "background_image"}
                for page in self.pages
            ],
        }


# =============================================================================
# Image Types
# =============================================================================


@dataclass
class PageImage:
    """A generated page illustration."""

    data: bytes
    mime_type: str = "image/png"

    def to_data_url(self) -> str:
        from .images import to_data_url

        return to_data_url(self.data, self.mime_type)
