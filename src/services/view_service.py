"""View filter engine and task-list aggregates.

Every function here is pure: callers pass the full task set, the view, the
focus set and the reference time explicitly, and get new lists back.

Key Concepts:
- Bucket vs deadline: a task shows in Today when its bucket is today OR its
  deadline falls on today's calendar date; likewise for Upcoming with any
  future deadline.
- Project views are the only ones that include completed tasks.
- Stale / abandoned: incomplete anytime tasks older than 3 / 7 days. Both are
  computed from the same predicate with a different threshold, never one from
  the other's output.
"""

from collections.abc import Collection, Iterable, Sequence
from datetime import datetime, timedelta

from src.core.config import Constants
from src.core.fuzzy_match import fuzzy_rank
from src.domain.task import Task, When, duration_minutes
from src.domain.types import as_local_naive
from src.domain.view import ViewKind
from src.models.service_models import TodayTotalTime, ViewCounts


def is_due_today(task: Task, now: datetime) -> bool:
    """Return True if the task is in the today bucket or its deadline is on now's date."""
    if task.when == When.TODAY:
        return True
    return task.deadline is not None and task.deadline.date() == now.date()


def is_upcoming(task: Task, now: datetime) -> bool:
    """Return True if the task is in the upcoming bucket or its deadline is after now."""
    if task.when == When.UPCOMING:
        return True
    return task.deadline is not None and task.deadline > now


def is_inbox(task: Task) -> bool:
    """Return True for unscheduled tasks outside any project."""
    return task.when == When.UNSET and task.project_id is None


def _matches(
    task: Task,
    view: ViewKind,
    *,
    active_project_id: str | None,
    focus_ids: Collection[str],
    now: datetime,
) -> bool:
    if view == ViewKind.PROJECT:
        return task.project_id == active_project_id

    if task.completed:
        return False

    match view:
        case ViewKind.INBOX:
            return is_inbox(task)
        case ViewKind.TODAY:
            return is_due_today(task, now)
        case ViewKind.UPCOMING:
            return is_upcoming(task, now)
        case ViewKind.ANYTIME:
            return task.when == When.ANYTIME
        case ViewKind.FOCUS:
            return task.id in focus_ids
        case _:
            return False


def sort_by_order(tasks: Iterable[Task]) -> list[Task]:
    """Sort ascending by manual order; equal keys keep their input order."""
    return sorted(tasks, key=lambda task: task.order)


def filter_tasks(
    tasks: Sequence[Task],
    view: ViewKind,
    *,
    active_project_id: str | None = None,
    focus_ids: Collection[str] = (),
    now: datetime,
) -> list[Task]:
    """Derive the ordered task list for a view.

    Args:
        tasks: Full task set, in store order
        view: View to derive
        active_project_id: Subject project for the project view
        focus_ids: Current focus set
        now: Reference time for deadline comparisons

    Returns:
        Tasks matching the view predicate, stably sorted by `order`. The
        dashboard view and a project view without a project yield [].
    """
    now = as_local_naive(now)
    if view == ViewKind.DASHBOARD:
        return []
    if view == ViewKind.PROJECT and active_project_id is None:
        return []

    return sort_by_order(
        task
        for task in tasks
        if _matches(task, view, active_project_id=active_project_id, focus_ids=focus_ids, now=now)
    )


def count_tasks_by_view(tasks: Sequence[Task], *, now: datetime) -> ViewCounts:
    """Count tasks per list view for the sidebar."""
    return ViewCounts(
        inbox=len(filter_tasks(tasks, ViewKind.INBOX, now=now)),
        today=len(filter_tasks(tasks, ViewKind.TODAY, now=now)),
        upcoming=len(filter_tasks(tasks, ViewKind.UPCOMING, now=now)),
        anytime=len(filter_tasks(tasks, ViewKind.ANYTIME, now=now)),
    )


def today_total_time(tasks: Sequence[Task], now: datetime) -> TodayTotalTime:
    """Sum estimated minutes over incomplete tasks due today.

    Tasks without an estimate, or with an unknown label, contribute 0.
    """
    now = as_local_naive(now)
    total = sum(
        duration_minutes(task.estimated_duration) for task in tasks if not task.completed and is_due_today(task, now)
    )
    hours, minutes = divmod(total, 60)
    return TodayTotalTime(hours=hours, minutes=minutes, total_minutes=total)


def _left_in_anytime(tasks: Sequence[Task], now: datetime, days: int) -> list[Task]:
    cutoff = as_local_naive(now) - timedelta(days=days)
    return [task for task in tasks if not task.completed and task.when == When.ANYTIME and task.created_at < cutoff]


def stale_tasks(tasks: Sequence[Task], now: datetime, *, days: int = 3) -> list[Task]:
    """Return incomplete anytime tasks created more than `days` days before now."""
    return _left_in_anytime(tasks, now, days)


def abandoned_tasks(tasks: Sequence[Task], now: datetime, *, days: int = 7) -> list[Task]:
    """Return incomplete anytime tasks created more than `days` days before now."""
    return _left_in_anytime(tasks, now, days)


def quick_find(tasks: Sequence[Task], query: str, *, limit: int = Constants.QUICK_FIND_LIMIT) -> list[Task]:
    """Search task titles, best matches first (exact > contains > shared word)."""
    return fuzzy_rank(tasks, query)[:limit]
