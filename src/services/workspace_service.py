"""Workspace: one user's session over the task engine.

The workspace wires the store to the session-level services (settle window,
focus set, daily planning, preferences) and keeps the active view selection.
It is the surface a rendering collaborator talks to; every piece it delegates
to can also be used on its own.
"""

import logging
import random
from collections.abc import Callable
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from src.core.config import Settings, settings as default_settings
from src.core.errors import ValidationFailedError
from src.core.fuzzy_match import fuzzy_match
from src.core.logging import log_with_context, span
from src.core.persistence import PersistenceKey, PersistencePort
from src.domain.task import Task, When
from src.domain.view import ViewKind, ViewSelection
from src.models.service_models import DashboardSummary, ExportBundle, TodayTotalTime, ViewCounts
from src.services import view_service
from src.services.analytics_service import dashboard_summary
from src.services.completion_service import CompletionService
from src.services.focus_service import FocusService
from src.services.planning_service import DailyPlanningService
from src.services.preferences_service import PreferencesService
from src.services.task_store import TaskStore


logger = logging.getLogger(__name__)

# Views whose quick-add fills in the task's bucket
_VIEW_BUCKETS = {ViewKind.TODAY: When.TODAY, ViewKind.UPCOMING: When.UPCOMING}


class Workspace:
    """Session facade over store, settle window, focus, planning and preferences."""

    def __init__(
        self,
        store: TaskStore,
        *,
        persistence: PersistencePort | None = None,
        settle_delay_seconds: float = 0.6,
        focus_limit: int = 3,
        stale_after_days: int = 3,
        abandoned_after_days: int = 7,
    ) -> None:
        self.store = store
        self.completion = CompletionService(store, settle_delay_seconds=settle_delay_seconds)
        if persistence is None:
            self.focus = FocusService(limit=focus_limit)
        else:
            self.focus = FocusService.from_persistence(persistence, limit=focus_limit)
        self.planning = DailyPlanningService(store, persistence)
        self.preferences = PreferencesService(persistence)

        self._persistence = persistence
        self._stale_after_days = stale_after_days
        self._abandoned_after_days = abandoned_after_days
        self._selection = self._load_selection()

    @classmethod
    def open(
        cls,
        persistence: PersistencePort,
        *,
        config: Settings | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "Workspace":
        """Restore a workspace from `persistence` using the given settings."""
        config = config or default_settings
        rng = random.Random(config.tag_color_seed)  # noqa: S311
        store = TaskStore.from_persistence(persistence, clock=clock, rng=rng)
        return cls(
            store,
            persistence=persistence,
            settle_delay_seconds=config.settle_delay_seconds,
            focus_limit=config.focus_limit,
            stale_after_days=config.stale_after_days,
            abandoned_after_days=config.abandoned_after_days,
        )

    # ---- view selection ----

    def _default_selection(self) -> ViewSelection:
        return ViewSelection(kind=self.preferences.preferences.default_view)

    def _load_selection(self) -> ViewSelection:
        if self._persistence is None:
            return self._default_selection()

        kind = self._persistence.load(PersistenceKey.SELECTED_VIEW)
        project_id = self._persistence.load(PersistenceKey.SELECTED_PROJECT)
        if kind is None:
            return self._default_selection()
        try:
            selection = ViewSelection(kind=kind, project_id=project_id if kind == ViewKind.PROJECT else None)
        except ValidationError:
            logger.warning("Ignoring invalid stored view selection %r / %r", kind, project_id)
            return self._default_selection()

        if selection.project_id is not None and selection.project_id not in {p.id for p in self.store.projects}:
            logger.warning("Stored view points at missing project %s", selection.project_id)
            return self._default_selection()
        return selection

    @property
    def selection(self) -> ViewSelection:
        return self._selection

    def select_view(self, kind: ViewKind | str, project_id: str | None = None) -> ViewSelection:
        """Switch the active view.

        Raises:
            ValidationFailedError: If the view and project_id do not fit together
            NotFoundError: If the project does not exist
        """
        try:
            selection = ViewSelection(kind=kind, project_id=project_id)
        except ValidationError as e:
            raise ValidationFailedError(str(e)) from e
        if selection.project_id is not None:
            self.store.get_project(selection.project_id)

        self._selection = selection
        if self._persistence is not None:
            self._persistence.save(PersistenceKey.SELECTED_VIEW, selection.kind.value)
            self._persistence.save(PersistenceKey.SELECTED_PROJECT, selection.project_id)

        log_with_context(logger, "debug", "view_selected", view=selection.kind.value, project_id=selection.project_id)
        return selection

    # ---- derived lists ----

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.store.now()

    def visible_tasks(self, now: datetime | None = None) -> list[Task]:
        """Tasks of the active view, ordered."""
        return view_service.filter_tasks(
            self.store.tasks,
            self._selection.kind,
            active_project_id=self._selection.project_id,
            focus_ids=self.focus.ids,
            now=self._now(now),
        )

    def view_counts(self, now: datetime | None = None) -> ViewCounts:
        return view_service.count_tasks_by_view(self.store.tasks, now=self._now(now))

    def today_total_time(self, now: datetime | None = None) -> TodayTotalTime:
        return view_service.today_total_time(self.store.tasks, self._now(now))

    def stale_tasks(self, now: datetime | None = None) -> list[Task]:
        return view_service.stale_tasks(self.store.tasks, self._now(now), days=self._stale_after_days)

    def abandoned_tasks(self, now: datetime | None = None) -> list[Task]:
        return view_service.abandoned_tasks(self.store.tasks, self._now(now), days=self._abandoned_after_days)

    def dashboard(self, now: datetime | None = None) -> DashboardSummary:
        return dashboard_summary(
            self.store.tasks,
            self.store.projects,
            self._now(now),
            abandoned_after_days=self._abandoned_after_days,
        )

    def quick_find(self, query: str) -> list[Task]:
        return view_service.quick_find(self.store.tasks, query)

    def find_task(self, query: str) -> Task | None:
        """Best single title match for `query`, or None."""
        return fuzzy_match(self.store.tasks, query)

    # ---- mutations ----

    def quick_add(self, text: str, **fields: Any) -> Task:
        """Create a task from free text in the context of the active view.

        In the today and upcoming views the new task lands in that bucket; in a
        project view it joins the project. Explicit fields win over both.
        """
        with span("workspace.quick_add"):
            bucket = _VIEW_BUCKETS.get(self._selection.kind)
            if bucket is not None:
                fields.setdefault("when", bucket)
            if self._selection.kind == ViewKind.PROJECT:
                fields.setdefault("project_id", self._selection.project_id)
            return self.store.create_task(title=text, **fields)

    def toggle_complete(self, task_id: str) -> Task:
        return self.completion.toggle(task_id)

    def add_focus(self, task_id: str) -> list[str]:
        return self.focus.add(task_id, self.store.tasks)

    def delete_task(self, task_id: str) -> None:
        """Delete a task along with its pending completion and focus membership.

        Raises:
            NotFoundError: If the task does not exist
        """
        with span("workspace.delete_task"):
            self.store.get_task(task_id)
            self.completion.cancel(task_id)
            self.focus.discard(task_id)
            self.store.delete_task(task_id)

    def delete_project(self, project_id: str) -> list[str]:
        """Delete a project; if it is on screen the view falls back to the inbox.

        Raises:
            NotFoundError: If the project does not exist
        """
        with span("workspace.delete_project"):
            orphaned = self.store.delete_project(project_id)
            if self._selection.project_id == project_id:
                self.select_view(ViewKind.INBOX)
            return orphaned

    def export(self) -> ExportBundle:
        """Full-state export, with pending completions committed first."""
        self.completion.flush()
        return self.store.snapshot()
