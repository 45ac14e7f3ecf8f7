"""User preference model."""

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from src.domain.view import ViewKind


class Theme(StrEnum):
    """Color theme."""

    LIGHT = "none"
    DARK = "dark"


class TimeFormat(StrEnum):
    """Clock format used when rendering times."""

    TWELVE_HOUR = "12"
    TWENTY_FOUR_HOUR = "24"


class Preferences(BaseModel):
    """UI preferences, persisted one key per field."""

    theme: Theme = Field(default=Theme.LIGHT, description="Color theme")
    default_view: ViewKind = Field(default=ViewKind.INBOX, description="View shown when nothing is selected")
    completion_sound: bool = Field(default=False, description="Play a sound on completion")
    show_confirm_dialogs: bool = Field(default=True, description="Ask before destructive actions")
    show_task_counts: bool = Field(default=True, description="Show per-view counts in the sidebar")
    time_format: TimeFormat = Field(default=TimeFormat.TWELVE_HOUR, description="12 or 24 hour clock")

    @field_validator("default_view")
    @classmethod
    def reject_project_view(cls, v: ViewKind) -> ViewKind:
        """Validate that the default view does not need a subject project."""
        if v == ViewKind.PROJECT:
            msg = "The project view cannot be the default view"
            raise ValueError(msg)
        return v
