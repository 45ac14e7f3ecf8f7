"""Pydantic models for creating records in the store."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.config import Constants

from src.domain.task import ChecklistItem, Duration, Priority, Recurrence, When
from src.domain.types import LocalDateTime


def _require_text(value: str, field: str) -> str:
    stripped = value.strip()
    if not stripped:
        msg = f"{field} must not be blank"
        raise ValueError(msg)
    return stripped


class TaskCreate(BaseModel):
    """Pydantic model for creating a task record."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., description="Raw title text; may contain a natural-language date phrase")
    notes: str = Field(default="", description="Free-form notes")
    priority: Priority = Field(default=Priority.NONE, description="Task priority")
    when: When = Field(default=When.UNSET, description="Scheduling bucket")
    project_id: str | None = Field(default=None, description="Owning project")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    checklist: list[ChecklistItem] = Field(default_factory=list, description="Ordered subitems")
    deadline: LocalDateTime | None = Field(default=None, description="Explicit deadline; skips date parsing")
    reminder: LocalDateTime | None = Field(default=None, description="Reminder timestamp")
    recurring: Recurrence | None = Field(default=None, description="Recurrence rule")
    estimated_duration: Duration | None = Field(default=None, description="Estimated effort label")
    parse_dates: bool = Field(default=True, description="Extract a deadline from the title text")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is not blank."""
        return _require_text(v, "Task title")


class ProjectCreate(BaseModel):
    """Pydantic model for creating a project record."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Project name")
    color: str = Field(default=Constants.DEFAULT_PROJECT_COLOR, description="Display color (hex)")
    emoji: str | None = Field(default=None, description="Optional emoji")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is not blank."""
        return _require_text(v, "Project name")


class TagCreate(BaseModel):
    """Pydantic model for creating a tag record."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Tag name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate name is not blank."""
        return _require_text(v, "Tag name")
