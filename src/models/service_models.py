"""Pydantic models for service layer return types.

These models give the rendering collaborator typed, serializable values
instead of loose dictionaries.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from src.domain.project import Project
from src.domain.tag import Tag
from src.domain.task import Task
from src.domain.view import ViewKind


class TodayTotalTime(BaseModel):
    """Estimated effort for everything due today."""

    hours: int
    minutes: int
    total_minutes: int


class ViewCounts(BaseModel):
    """Sidebar counts per task-list view."""

    inbox: int
    today: int
    upcoming: int
    anytime: int


class ProjectStat(BaseModel):
    """Project ranked by its number of active tasks."""

    project_id: str
    name: str
    emoji: str | None = None
    task_count: int


class AbandonedTask(BaseModel):
    """Anytime task left untouched past the abandonment threshold."""

    task_id: str
    title: str
    days_old: int


class DashboardSummary(BaseModel):
    """Aggregate statistics shown on the dashboard view."""

    completed_this_week: int
    active_tasks: int
    completion_rate: int = Field(..., description="Whole percent of recent work completed")
    top_projects: list[ProjectStat]
    abandoned_total: int
    abandoned_preview: list[AbandonedTask]


class ExportBundle(BaseModel):
    """Full-state export of the store."""

    tasks: list[Task]
    projects: list[Project]
    tags: list[Tag]
    version: str
    export_date: datetime


class PlanningResult(BaseModel):
    """Outcome of completing the daily planning ritual."""

    planned_task_ids: list[str]
    planned_on: date
    next_view: ViewKind = ViewKind.TODAY
