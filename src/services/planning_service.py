"""Daily planning ritual.

Once per calendar day, when there is unfinished work, the user is offered the
first few incomplete tasks and picks the ones to do today. Completing the
ritual moves the picks into the today bucket and records the date so the
prompt does not come back until tomorrow.
"""

import logging
from collections.abc import Sequence
from datetime import date, datetime

from pydantic import TypeAdapter, ValidationError

from src.core.config import Constants
from src.core.errors import PersistenceError, ValidationFailedError
from src.core.logging import span
from src.core.persistence import PersistenceKey, PersistencePort
from src.domain.task import Task, When
from src.domain.view import ViewKind
from src.models.service_models import PlanningResult
from src.services.task_store import TaskStore


logger = logging.getLogger(__name__)

_DATE = TypeAdapter(date)


def should_prompt(last_planning_date: date | None, now: datetime, has_incomplete_tasks: bool) -> bool:
    """Return True when today's plan is not made yet and there is something to plan."""
    return has_incomplete_tasks and last_planning_date != now.date()


class DailyPlanningService:
    """Tracks the last planning date and applies the user's picks."""

    def __init__(self, store: TaskStore, persistence: PersistencePort | None = None) -> None:
        self._store = store
        self._persistence = persistence
        self._last_planning_date = self._load()

    def _load(self) -> date | None:
        if self._persistence is None:
            return None
        raw = self._persistence.load(PersistenceKey.LAST_PLANNING_DATE)
        if raw is None:
            return None
        try:
            return _DATE.validate_python(raw)
        except ValidationError as e:
            msg = f"Stored last planning date is invalid: {raw!r}"
            raise PersistenceError(msg) from e

    def last_planning_date(self) -> date | None:
        return self._last_planning_date

    def needs_prompt(self) -> bool:
        return should_prompt(self._last_planning_date, self._store.now(), self._store.has_incomplete_tasks())

    def candidates(self, limit: int = Constants.PLANNING_CANDIDATE_LIMIT) -> list[Task]:
        """First `limit` incomplete tasks, in store order."""
        return [task for task in self._store.tasks if not task.completed][:limit]

    def complete(self, selected_ids: Sequence[str]) -> PlanningResult:
        """Finish the ritual with the selected tasks.

        Args:
            selected_ids: Tasks to move into today

        Returns:
            PlanningResult with the planned IDs and the view to switch to

        Raises:
            ValidationFailedError: If nothing was selected
            NotFoundError: If any selected task does not exist
        """
        with span("planning_service.complete"):
            planned = list(dict.fromkeys(selected_ids))
            if not planned:
                msg = "Select at least one task to plan your day"
                raise ValidationFailedError(msg)

            # Resolve everything first so an unknown ID rejects the whole plan
            for task_id in planned:
                self._store.get_task(task_id)

            for task_id in planned:
                self._store.update_task(task_id, when=When.TODAY)

            today = self._store.now().date()
            self._last_planning_date = today
            if self._persistence is not None:
                self._persistence.save(PersistenceKey.LAST_PLANNING_DATE, today.isoformat())

            logger.info("Daily plan set for %s with %d tasks", today, len(planned))
            return PlanningResult(planned_task_ids=planned, planned_on=today, next_view=ViewKind.TODAY)
