"""Focus set: up to N incomplete tasks pinned for the current session.

The set is an ordered list of task IDs. Members that were deleted or completed
stay in the list until the next `add`, which prunes them before checking the
limit; rendering always skips them.
"""

import logging
from collections.abc import Iterable, Sequence

from pydantic import TypeAdapter, ValidationError

from src.core.errors import NotFoundError, PersistenceError, ValidationFailedError
from src.core.logging import span
from src.core.persistence import PersistenceKey, PersistencePort
from src.domain.task import Task


logger = logging.getLogger(__name__)

_ID_LIST = TypeAdapter(list[str])


class FocusService:
    """Ordered, size-limited set of focused task IDs."""

    def __init__(
        self,
        persistence: PersistencePort | None = None,
        *,
        limit: int = 3,
        ids: Iterable[str] = (),
    ) -> None:
        self._persistence = persistence
        self._limit = limit
        self._ids: list[str] = list(dict.fromkeys(ids))

    @classmethod
    def from_persistence(cls, persistence: PersistencePort, *, limit: int = 3) -> "FocusService":
        """Restore the focus set stored under `focus_tasks`.

        Raises:
            PersistenceError: If the stored value is not a list of IDs
        """
        try:
            ids = _ID_LIST.validate_python(persistence.load(PersistenceKey.FOCUS_TASKS) or [])
        except ValidationError as e:
            msg = f"Stored focus set is invalid: {e}"
            raise PersistenceError(msg) from e
        return cls(persistence, limit=limit, ids=ids)

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def _persist(self) -> None:
        if self._persistence is not None:
            self._persistence.save(PersistenceKey.FOCUS_TASKS, list(self._ids))

    def add(self, task_id: str, tasks: Sequence[Task]) -> list[str]:
        """Add a task to the focus set.

        Args:
            task_id: Task to focus
            tasks: Current task set, used to resolve and prune members

        Returns:
            Focus IDs after the change

        Raises:
            NotFoundError: If the task does not exist
            ValidationFailedError: If the task is completed or the set is full
        """
        with span("focus_service.add"):
            by_id = {task.id: task for task in tasks}
            task = by_id.get(task_id)
            if task is None:
                raise NotFoundError("tasks", task_id)
            if task.completed:
                msg = "Completed tasks cannot be focused"
                raise ValidationFailedError(msg)

            live = [member for member in self._ids if member in by_id and not by_id[member].completed]
            if task_id in live:
                return list(live)
            if len(live) >= self._limit:
                msg = f"Focus is limited to {self._limit} tasks"
                raise ValidationFailedError(msg)

            self._ids = [*live, task_id]
            self._persist()
            logger.info("Focused task %s (%d/%d)", task_id, len(self._ids), self._limit)
            return list(self._ids)

    def remove(self, task_id: str) -> None:
        """Remove a task from the focus set.

        Raises:
            NotFoundError: If the task is not focused
        """
        if task_id not in self._ids:
            raise NotFoundError("focus_tasks", task_id)
        self._ids.remove(task_id)
        self._persist()

    def discard(self, task_id: str) -> bool:
        """Remove a task if focused. Returns True if it was."""
        if task_id not in self._ids:
            return False
        self.remove(task_id)
        return True

    def focus_tasks(self, tasks: Sequence[Task]) -> list[Task]:
        """Incomplete focused tasks, in focus order."""
        by_id = {task.id: task for task in tasks}
        return [by_id[task_id] for task_id in self._ids if task_id in by_id and not by_id[task_id].completed]

    def available_tasks(self, tasks: Sequence[Task]) -> list[Task]:
        """Incomplete tasks that could still be focused, in store order."""
        return [task for task in tasks if not task.completed and task.id not in self._ids]

    def remaining_slots(self, tasks: Sequence[Task]) -> int:
        return max(self._limit - len(self.focus_tasks(tasks)), 0)
