"""Analytics for the dashboard view.

This module provides functions for:
- Counting tasks completed over the last week
- Calculating the completion rate of recent work
- Ranking projects by their active task count
- Surfacing abandoned anytime tasks

Key Concepts:
- Active task: any incomplete task, whatever its bucket.
- Completion rate: completed-this-week / (completed-this-week + active), as a
  whole percent rounded half up. 0 when nothing is active.
- Abandoned: incomplete anytime task created more than a week ago.
"""

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from src.core.config import Constants
from src.core.logging import span
from src.domain.project import Project
from src.domain.task import Task
from src.domain.types import as_local_naive
from src.models.service_models import AbandonedTask, DashboardSummary, ProjectStat
from src.services.view_service import abandoned_tasks


def completed_since(tasks: Sequence[Task], since: datetime) -> list[Task]:
    """Completed tasks whose completion time is at or after `since`."""
    since = as_local_naive(since)
    return [task for task in tasks if task.completed and task.completed_at is not None and task.completed_at >= since]


def completion_rate(completed_count: int, active_count: int) -> int:
    """Whole percent of recent work completed (0 when nothing is active)."""
    if active_count <= 0:
        return 0
    return math.floor(completed_count / (completed_count + active_count) * 100 + 0.5)


def top_projects(
    tasks: Sequence[Task],
    projects: Sequence[Project],
    *,
    limit: int = Constants.DASHBOARD_TOP_PROJECTS,
) -> list[ProjectStat]:
    """Projects with the most active tasks, highest first.

    Projects without active tasks are omitted; ties keep project order.
    """
    stats = [
        ProjectStat(
            project_id=project.id,
            name=project.name,
            emoji=project.emoji,
            task_count=sum(1 for task in tasks if task.project_id == project.id and not task.completed),
        )
        for project in projects
    ]
    ranked = sorted((stat for stat in stats if stat.task_count > 0), key=lambda stat: stat.task_count, reverse=True)
    return ranked[:limit]


def dashboard_summary(
    tasks: Sequence[Task],
    projects: Sequence[Project],
    now: datetime,
    *,
    abandoned_after_days: int = 7,
) -> DashboardSummary:
    """Build the dashboard statistics.

    Args:
        tasks: Full task set
        projects: All projects
        now: Reference time
        abandoned_after_days: Age threshold for abandoned anytime tasks

    Returns:
        DashboardSummary
    """
    with span("analytics_service.dashboard_summary"):
        now = as_local_naive(now)
        week = completed_since(tasks, now - timedelta(days=Constants.DASHBOARD_WINDOW_DAYS))
        active = sum(1 for task in tasks if not task.completed)
        abandoned = abandoned_tasks(tasks, now, days=abandoned_after_days)

        return DashboardSummary(
            completed_this_week=len(week),
            active_tasks=active,
            completion_rate=completion_rate(len(week), active),
            top_projects=top_projects(tasks, projects),
            abandoned_total=len(abandoned),
            abandoned_preview=[
                AbandonedTask(task_id=task.id, title=task.title, days_old=(now - task.created_at).days)
                for task in abandoned[: Constants.DASHBOARD_ABANDONED_PREVIEW]
            ],
        )
