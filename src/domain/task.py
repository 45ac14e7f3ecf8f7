"""Task domain models and enums."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.domain.types import LocalDateTime


class Priority(StrEnum):
    """Task priority."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class When(StrEnum):
    """Coarse scheduling bucket, independent of the absolute deadline."""

    UNSET = "unset"
    TODAY = "today"
    UPCOMING = "upcoming"
    ANYTIME = "anytime"


class Recurrence(StrEnum):
    """How a task repeats once completed."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class Duration(StrEnum):
    """Estimated duration labels."""

    MIN_15 = "15m"
    MIN_30 = "30m"
    HOUR_1 = "1h"
    HOUR_2 = "2h"
    HOUR_4 = "4h"
    HOUR_8 = "8h"


DURATION_MINUTES: dict[str, int] = {
    Duration.MIN_15: 15,
    Duration.MIN_30: 30,
    Duration.HOUR_1: 60,
    Duration.HOUR_2: 120,
    Duration.HOUR_4: 240,
    Duration.HOUR_8: 480,
}


def duration_minutes(label: str | None) -> int:
    """Look up the minute count for a duration label (0 when unmapped or None)."""
    if label is None:
        return 0
    return DURATION_MINUTES.get(label, 0)


class ChecklistItem(BaseModel):
    """Checklist subitem carried on a task."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., description="Subitem text")
    done: bool = Field(default=False, description="Whether the subitem is ticked off")


class Task(BaseModel):
    """Task record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Opaque id, sortable by creation")
    title: str = Field(..., min_length=1, description="Task title")
    notes: str = Field(default="", description="Free-form notes")
    completed: bool = Field(default=False, description="Whether the task is done")
    completed_at: LocalDateTime | None = Field(default=None, description="When the task was completed")
    priority: Priority = Field(default=Priority.NONE, description="Task priority")
    when: When = Field(default=When.UNSET, description="Scheduling bucket")
    project_id: str | None = Field(default=None, description="Owning project (weak reference)")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    checklist: list[ChecklistItem] = Field(default_factory=list, description="Ordered subitems")
    deadline: LocalDateTime | None = Field(default=None, description="Absolute due timestamp")
    reminder: LocalDateTime | None = Field(default=None, description="Reminder timestamp")
    recurring: Recurrence | None = Field(default=None, description="Recurrence rule")
    estimated_duration: Duration | None = Field(default=None, description="Estimated effort label")
    order: int = Field(default=0, description="Manual sort key within a view")
    created_at: LocalDateTime = Field(..., description="Creation timestamp")

    @field_validator("when", mode="before")
    @classmethod
    def default_when(cls, v: Any) -> Any:
        """Treat a null bucket as unset."""
        return When.UNSET if v is None else v

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v: Any) -> Any:
        """Treat a null priority as none."""
        return Priority.NONE if v is None else v

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, v: list[str]) -> list[str]:
        """Strip tag names and drop blanks and case-insensitive duplicates, keeping the first spelling."""
        seen: dict[str, str] = {}
        for name in v:
            name = name.strip()
            if name:
                seen.setdefault(name.casefold(), name)
        return list(seen.values())

    @model_validator(mode="after")
    def check_completion_timestamp(self) -> "Task":
        """Validate that completed_at is set exactly when the task is completed."""
        if self.completed != (self.completed_at is not None):
            msg = "completed_at must be set if and only if the task is completed"
            raise ValueError(msg)
        return self

    @property
    def duration_minutes(self) -> int:
        """Minutes for the estimated duration (0 when unset)."""
        return duration_minutes(self.estimated_duration)
