"""Completion service with a settle window.

Completing a task does not take effect immediately: the commit is scheduled on
the running asyncio loop after a short settle delay, so an accidental click can
be undone. Toggling the same task again while its commit is pending cancels the
commit and leaves the store untouched (for a recurring task this means no
successor is ever created). Re-opening a completed task is immediate.
"""

import asyncio
import logging

from src.core.errors import NotFoundError
from src.core.logging import span
from src.domain.task import Task
from src.services.task_store import TaskStore


logger = logging.getLogger(__name__)


class CompletionService:
    """Debounced completion toggling on top of a TaskStore."""

    def __init__(self, store: TaskStore, *, settle_delay_seconds: float = 0.6) -> None:
        self._store = store
        self._delay = settle_delay_seconds
        self._pending: dict[str, asyncio.TimerHandle] = {}

    @property
    def settle_delay_seconds(self) -> float:
        return self._delay

    def is_pending(self, task_id: str) -> bool:
        """Return True if the task's completion is waiting out the settle window."""
        return task_id in self._pending

    def pending_ids(self) -> list[str]:
        return list(self._pending)

    def toggle(self, task_id: str) -> Task:
        """Toggle a task's completion.

        - Pending completion: cancelled, store untouched.
        - Completed task: re-opened immediately.
        - Incomplete task: completion scheduled after the settle delay. With a
          non-positive delay, or outside a running event loop, it commits now.

        Returns:
            The task as currently stored

        Raises:
            NotFoundError: If the task does not exist
        """
        with span("completion_service.toggle"):
            if self.cancel(task_id):
                logger.info("Completion of task %s undone within settle window", task_id)
                return self._store.get_task(task_id)

            task = self._store.get_task(task_id)
            if task.completed:
                return self._store.set_completed(task_id, False)

            if self._delay <= 0:
                return self._store.set_completed(task_id, True)

            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("No running event loop; completing task %s immediately", task_id)
                return self._store.set_completed(task_id, True)

            self._pending[task_id] = loop.call_later(self._delay, self._commit, task_id)
            logger.debug("Scheduled completion of task %s in %.2fs", task_id, self._delay)
            return task

    def cancel(self, task_id: str) -> bool:
        """Cancel a pending completion. Returns False if none was pending."""
        handle = self._pending.pop(task_id, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def _commit(self, task_id: str) -> Task | None:
        self._pending.pop(task_id, None)
        try:
            return self._store.set_completed(task_id, True)
        except NotFoundError:
            logger.warning("Task %s disappeared before its completion settled; skipping", task_id)
            return None

    def flush(self) -> list[Task]:
        """Commit every pending completion now.

        Returns:
            Tasks that were completed (deleted tasks are skipped)
        """
        with span("completion_service.flush"):
            committed = []
            for task_id in list(self._pending):
                self._pending[task_id].cancel()
                task = self._commit(task_id)
                if task is not None:
                    committed.append(task)
            return committed
