"""View selection model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ViewKind(StrEnum):
    """Views the collaborator can display."""

    INBOX = "inbox"
    TODAY = "today"
    UPCOMING = "upcoming"
    ANYTIME = "anytime"
    FOCUS = "focus"
    DASHBOARD = "dashboard"
    PROJECT = "project"


class ViewSelection(BaseModel):
    """Active view, with the project it shows when kind is project."""

    model_config = ConfigDict(frozen=True)

    kind: ViewKind = Field(default=ViewKind.INBOX, description="Selected view")
    project_id: str | None = Field(default=None, description="Subject project for the project view")

    @model_validator(mode="after")
    def check_project_subject(self) -> "ViewSelection":
        """Validate that only the project view carries a project id, and that it always does."""
        if self.kind == ViewKind.PROJECT and not self.project_id:
            msg = "The project view requires a project_id"
            raise ValueError(msg)
        if self.kind != ViewKind.PROJECT and self.project_id is not None:
            msg = f"The {self.kind} view does not take a project_id"
            raise ValueError(msg)
        return self
