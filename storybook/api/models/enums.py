"""Enums shared by API models."""

from enum import Enum


class TaskStatus(str, Enum):
    """Status of a background book generation task."""

    PENDING = "pending"
    ANALYZING = "analyzing"
    GENERATING_STORY = "generating_story"
    GENERATING_IMAGES = "generating_images"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


ACTIVE_TASK_STATUSES = [s.value for s in TaskStatus if not s.is_terminal]


class SubscriptionTier(str, Enum):
    """Subscription plans, cheapest first."""

    MINIK_MASAL = "minik_masal"
    MASAL_KESFIFCISI = "masal_kesfifcisi"
    MASAL_KAHRAMANI = "masal_kahramani"
    SONSUZ_MASAL = "sonsuz_masal"


class Language(str, Enum):
    """Languages stories can be written in."""

    TR = "tr"
    EN = "en"


class TaskEventType(str, Enum):
    """Change feed event types."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
