"""Recurrence utilities for generating the next instance of a repeating task."""

from collections.abc import Callable
from datetime import datetime, timedelta

from src.domain.task import Recurrence, Task


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months with day-of-month rollover.

    The day is carried over as an offset from the first of the target month,
    so a day the target month lacks spills into the following month
    (Jan 31 + 1 month -> Mar 2 in a leap year). No end-of-month clamping.
    """
    years, month_index = divmod(value.month - 1 + months, 12)
    first_of_month = value.replace(year=value.year + years, month=month_index + 1, day=1)
    return first_of_month + timedelta(days=value.day - 1)


_STEPS: dict[Recurrence, Callable[[datetime], datetime]] = {
    Recurrence.DAILY: lambda d: d + timedelta(days=1),
    Recurrence.WEEKLY: lambda d: d + timedelta(days=7),
    Recurrence.MONTHLY: lambda d: add_months(d, 1),
    Recurrence.YEARLY: lambda d: add_months(d, 12),
}


def advance_deadline(deadline: datetime | None, recurring: str | None) -> datetime | None:
    """Advance a deadline by one recurrence unit.

    Args:
        deadline: Current deadline (None stays None)
        recurring: Recurrence rule; unknown or missing rules leave the deadline unchanged

    Returns:
        The advanced deadline
    """
    if deadline is None:
        return None

    step = _STEPS.get(recurring) if recurring is not None else None
    if step is None:
        return deadline
    return step(deadline)


def next_occurrence(task: Task, *, task_id: str, now: datetime, order: int) -> Task:
    """Build the successor of a recurring task that is being completed.

    The successor is a copy of `task` with a new identity, reset completion and
    reminder, a fresh creation time, and the deadline moved forward by one
    recurrence unit. The input task is not modified.

    Args:
        task: Task being completed
        task_id: Identity for the successor
        now: Creation time for the successor
        order: Sort key for the successor

    Returns:
        New incomplete Task
    """
    return task.model_copy(
        update={
            "id": task_id,
            "completed": False,
            "completed_at": None,
            "reminder": None,
            "deadline": advance_deadline(task.deadline, task.recurring),
            "created_at": now,
            "order": order,
        },
        deep=True,
    )
