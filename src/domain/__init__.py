"""Domain models and DTOs."""

from src.domain.create_models import ProjectCreate, TagCreate, TaskCreate
from src.domain.preferences import Preferences, Theme, TimeFormat
from src.domain.project import Project
from src.domain.tag import TAG_PALETTE, Tag, pick_tag_color
from src.domain.task import (
    DURATION_MINUTES,
    ChecklistItem,
    Duration,
    Priority,
    Recurrence,
    Task,
    When,
    duration_minutes,
)
from src.domain.update_models import ProjectUpdate, TagUpdate, TaskUpdate
from src.domain.view import ViewKind, ViewSelection


__all__ = [
    "DURATION_MINUTES",
    "TAG_PALETTE",
    "ChecklistItem",
    "Duration",
    "Preferences",
    "Priority",
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "Recurrence",
    "Tag",
    "TagCreate",
    "TagUpdate",
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "Theme",
    "TimeFormat",
    "ViewKind",
    "ViewSelection",
    "When",
    "duration_minutes",
    "pick_tag_color",
]
