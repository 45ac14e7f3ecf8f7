"""Update models for store operations.

Only fields the caller actually passes are applied (`model_fields_set`), so an
explicit None clears a nullable field while an omitted field is left alone.
"""

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from src.domain.task import ChecklistItem, Duration, Priority, Recurrence, When
from src.domain.types import LocalDateTime


class TaskUpdate(BaseModel):
    """Partial update payload for a task."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    notes: str | None = None
    priority: Priority | None = None
    when: When | None = None
    project_id: str | None = None
    tags: list[str] | None = None
    checklist: list[ChecklistItem] | None = None
    deadline: LocalDateTime | None = None
    reminder: LocalDateTime | None = None
    recurring: Recurrence | None = None
    estimated_duration: Duration | None = None
    order: int | None = None

    @field_validator("notes", "priority", "when", "tags", "checklist", "order")
    @classmethod
    def reject_null(cls, v: object, info: ValidationInfo) -> object:
        """Reject an explicit null for fields that are not nullable on the task."""
        if v is None:
            msg = f"{info.field_name} cannot be null"
            raise ValueError(msg)
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        """Validate title is present and not blank."""
        if v is None or not v.strip():
            msg = "Task title must not be blank"
            raise ValueError(msg)
        return v.strip()


class ProjectUpdate(BaseModel):
    """Partial update payload for a project."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    color: str | None = None
    emoji: str | None = None

    @field_validator("name", "color")
    @classmethod
    def validate_text(cls, v: str | None) -> str:
        """Validate name and color are present and not blank."""
        if v is None or not v.strip():
            msg = "Project name and color must not be blank"
            raise ValueError(msg)
        return v.strip()


class TagUpdate(BaseModel):
    """Partial update payload for a tag."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    color: str | None = None

    @field_validator("name", "color")
    @classmethod
    def validate_text(cls, v: str | None) -> str:
        """Validate name and color are present and not blank."""
        if v is None or not v.strip():
            msg = "Tag name and color must not be blank"
            raise ValueError(msg)
        return v.strip()
