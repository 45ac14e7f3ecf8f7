"""Task store: canonical owner of the task, project and tag collections.

The store is the only writer of these collections. Each mutation runs to
completion, then hands the affected collections to the injected persistence
port as JSON snapshots; the store itself performs no I/O.

Key Concepts:
- Append ordering: a new task's `order` is the collection size at creation
  time. After deletions this can collide with an existing task; the view
  engine's stable sort resolves such ties.
- Quick entry: when no explicit deadline is given, the title is scanned for a
  scheduling phrase, which becomes the deadline and is stripped from the title.
- Recurrence: completing a recurring task stores the completed original and its
  successor in a single mutation.
"""

import logging
import random
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from src.core.config import Constants
from src.core.date_parser import parse_natural_language_date, remove_phrase
from src.core.errors import NotFoundError, PersistenceError, ValidationFailedError
from src.core.logging import span
from src.core.persistence import PersistenceKey, PersistencePort
from src.core.recurrence import next_occurrence
from src.domain.create_models import ProjectCreate, TagCreate, TaskCreate
from src.domain.project import Project
from src.domain.tag import Tag, pick_tag_color
from src.domain.task import Task
from src.domain.update_models import ProjectUpdate, TagUpdate, TaskUpdate
from src.models.service_models import ExportBundle


logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_TASK_LIST = TypeAdapter(list[Task])
_PROJECT_LIST = TypeAdapter(list[Project])
_TAG_LIST = TypeAdapter(list[Tag])


def _format_errors(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        parts.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "; ".join(parts)


def _validate(model: type[M], data: dict[str, Any]) -> M:
    """Validate a payload, mapping pydantic errors onto ValidationFailedError."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailedError(_format_errors(e)) from e


def _merge(record: M, changes: dict[str, Any]) -> M:
    """Return a re-validated copy of `record` with `changes` applied."""
    return _validate(type(record), {**record.model_dump(), **changes})


class TaskStore:
    """In-process owner of tasks, projects and tags."""

    def __init__(
        self,
        *,
        persistence: PersistencePort | None = None,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
        tasks: Iterable[Task] = (),
        projects: Iterable[Project] = (),
        tags: Iterable[Tag] = (),
    ) -> None:
        self._persistence = persistence
        self._clock = clock
        self._rng = rng or random.Random()  # noqa: S311
        self._tasks: dict[str, Task] = {task.id: task for task in tasks}
        self._projects: dict[str, Project] = {project.id: project for project in projects}
        self._tags: dict[str, Tag] = {tag.id: tag for tag in tags}

        known_ids = [*self._tasks, *self._projects, *self._tags]
        self._last_id = max((int(record_id) for record_id in known_ids if record_id.isdigit()), default=0)

    @classmethod
    def from_persistence(
        cls,
        persistence: PersistencePort,
        *,
        clock: Callable[[], datetime] = datetime.now,
        rng: random.Random | None = None,
    ) -> "TaskStore":
        """Restore a store from the snapshots held by `persistence`.

        Raises:
            PersistenceError: If a stored collection does not validate
        """
        with span("task_store.from_persistence"):
            try:
                tasks = _TASK_LIST.validate_python(persistence.load(PersistenceKey.TASKS) or [])
                projects = _PROJECT_LIST.validate_python(persistence.load(PersistenceKey.PROJECTS) or [])
                tags = _TAG_LIST.validate_python(persistence.load(PersistenceKey.TAGS) or [])
            except ValidationError as e:
                msg = f"Stored collections are invalid: {_format_errors(e)}"
                raise PersistenceError(msg) from e

            store = cls(persistence=persistence, clock=clock, rng=rng, tasks=tasks, projects=projects, tags=tags)
            logger.info(
                "TaskStore loaded tasks=%d projects=%d tags=%d",
                len(tasks),
                len(projects),
                len(tags),
            )
            return store

    # ---- helpers ----

    def now(self) -> datetime:
        """Current time according to the store's clock."""
        return self._clock()

    def _next_id(self, now: datetime) -> str:
        # Millisecond timestamp, bumped so ids issued in the same millisecond stay unique.
        self._last_id = max(int(now.timestamp() * 1000), self._last_id + 1)
        return str(self._last_id)

    def _dump(self, key: PersistenceKey) -> list[dict[str, Any]]:
        records: dict[str, BaseModel] = {
            PersistenceKey.TASKS: self._tasks,
            PersistenceKey.PROJECTS: self._projects,
            PersistenceKey.TAGS: self._tags,
        }[key]
        return [record.model_dump(mode="json") for record in records.values()]

    def _persist(self, *keys: PersistenceKey) -> None:
        if self._persistence is None:
            return
        for key in keys:
            self._persistence.save(key, self._dump(key))

    def save_all(self) -> None:
        """Hand every collection to the persistence port."""
        self._persist(PersistenceKey.TASKS, PersistenceKey.PROJECTS, PersistenceKey.TAGS)

    # ---- reads ----

    @property
    def tasks(self) -> list[Task]:
        """All tasks in insertion order."""
        return list(self._tasks.values())

    @property
    def projects(self) -> list[Project]:
        return list(self._projects.values())

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags.values())

    def has_incomplete_tasks(self) -> bool:
        return any(not task.completed for task in self._tasks.values())

    def get_task(self, task_id: str) -> Task:
        """Get a task by ID.

        Raises:
            NotFoundError: If the task does not exist
        """
        try:
            return self._tasks[task_id]
        except KeyError:
            raise NotFoundError("tasks", task_id) from None

    def get_project(self, project_id: str) -> Project:
        """Get a project by ID.

        Raises:
            NotFoundError: If the project does not exist
        """
        try:
            return self._projects[project_id]
        except KeyError:
            raise NotFoundError("projects", project_id) from None

    def get_tag(self, tag_id: str) -> Tag:
        """Get a tag by ID.

        Raises:
            NotFoundError: If the tag does not exist
        """
        try:
            return self._tags[tag_id]
        except KeyError:
            raise NotFoundError("tags", tag_id) from None

    def find_tag(self, name: str) -> Tag | None:
        """Find a tag by name (case-insensitive)."""
        return next((tag for tag in self._tags.values() if tag.matches(name)), None)

    def snapshot(self) -> ExportBundle:
        """Build the full-state export bundle."""
        return ExportBundle(
            tasks=self.tasks,
            projects=self.projects,
            tags=self.tags,
            version=Constants.SCHEMA_VERSION,
            export_date=self._clock(),
        )

    # ---- tasks ----

    def create_task(self, **fields: Any) -> Task:
        """Create a task.

        Args:
            **fields: TaskCreate fields. `title` is required; when `deadline` is
                omitted and `parse_dates` is left on, a scheduling phrase in the
                title becomes the deadline and is stripped from the title.

        Returns:
            Created task

        Raises:
            ValidationFailedError: If the payload is invalid (e.g., blank title)
            NotFoundError: If `project_id` refers to a missing project
        """
        with span("task_store.create_task"):
            data = _validate(TaskCreate, fields)
            if data.project_id is not None:
                self.get_project(data.project_id)

            now = self._clock()
            title = data.title
            deadline = data.deadline

            if deadline is None and data.parse_dates:
                parsed = parse_natural_language_date(data.title, now)
                if parsed is not None:
                    deadline = parsed.date
                    stripped = data.title
                    for phrase in parsed.phrases:
                        stripped = remove_phrase(stripped, phrase)
                    # A title that is only a date phrase keeps its raw text
                    title = stripped or data.title

            task = _validate(
                Task,
                {
                    **data.model_dump(exclude={"title", "deadline", "parse_dates"}),
                    "id": self._next_id(now),
                    "title": title,
                    "deadline": deadline,
                    "order": len(self._tasks),
                    "created_at": now,
                },
            )
            self._tasks[task.id] = task
            self._persist(PersistenceKey.TASKS)

            logger.info("Created task %s '%s' (deadline: %s)", task.id, task.title, task.deadline or "none")
            return task

    def update_task(self, task_id: str, **changes: Any) -> Task:
        """Apply a partial update to a task.

        Only the fields passed are changed; passing None clears a nullable field.

        Raises:
            NotFoundError: If the task (or a referenced project) does not exist
            ValidationFailedError: If the changes are invalid
        """
        with span("task_store.update_task"):
            task = self.get_task(task_id)
            update = _validate(TaskUpdate, changes)
            values = {name: getattr(update, name) for name in update.model_fields_set}

            if values.get("project_id") is not None:
                self.get_project(values["project_id"])

            updated = _merge(task, values)
            self._tasks[task_id] = updated
            self._persist(PersistenceKey.TASKS)

            logger.debug("Updated task %s fields=%s", task_id, sorted(values))
            return updated

    def delete_task(self, task_id: str) -> None:
        """Delete a task.

        Raises:
            NotFoundError: If the task does not exist
        """
        with span("task_store.delete_task"):
            task = self.get_task(task_id)
            del self._tasks[task_id]
            self._persist(PersistenceKey.TASKS)
            logger.info("Deleted task %s '%s'", task_id, task.title)

    def set_completed(self, task_id: str, completed: bool) -> Task:
        """Mark a task completed or incomplete.

        Completing a recurring task also inserts its successor; both changes are
        stored and persisted together. Re-opening a task only clears the
        completion fields. Setting the current state again is a no-op.

        Raises:
            NotFoundError: If the task does not exist
        """
        with span("task_store.set_completed"):
            task = self.get_task(task_id)
            if task.completed == completed:
                return task

            now = self._clock()
            if not completed:
                reopened = task.model_copy(update={"completed": False, "completed_at": None})
                self._tasks[task_id] = reopened
                self._persist(PersistenceKey.TASKS)
                logger.info("Reopened task %s", task_id)
                return reopened

            done = task.model_copy(update={"completed": True, "completed_at": now})
            successor = None
            if task.recurring is not None:
                successor = next_occurrence(task, task_id=self._next_id(now), now=now, order=len(self._tasks))

            self._tasks[task_id] = done
            if successor is not None:
                self._tasks[successor.id] = successor
            self._persist(PersistenceKey.TASKS)

            if successor is not None:
                logger.info(
                    "Completed recurring task %s; next %s due %s",
                    task_id,
                    successor.id,
                    successor.deadline or "none",
                )
            else:
                logger.info("Completed task %s", task_id)
            return done

    def toggle_complete(self, task_id: str) -> Task:
        """Flip a task between completed and incomplete.

        Raises:
            NotFoundError: If the task does not exist
        """
        task = self.get_task(task_id)
        return self.set_completed(task_id, not task.completed)

    # ---- projects ----

    def create_project(self, **fields: Any) -> Project:
        """Create a project.

        Raises:
            ValidationFailedError: If the name is blank
        """
        with span("task_store.create_project"):
            data = _validate(ProjectCreate, fields)
            project = Project(id=self._next_id(self._clock()), **data.model_dump())
            self._projects[project.id] = project
            self._persist(PersistenceKey.PROJECTS)
            logger.info("Created project %s '%s'", project.id, project.name)
            return project

    def update_project(self, project_id: str, **changes: Any) -> Project:
        """Apply a partial update to a project.

        Raises:
            NotFoundError: If the project does not exist
            ValidationFailedError: If the changes are invalid
        """
        with span("task_store.update_project"):
            project = self.get_project(project_id)
            update = _validate(ProjectUpdate, changes)
            updated = _merge(project, {name: getattr(update, name) for name in update.model_fields_set})
            self._projects[project_id] = updated
            self._persist(PersistenceKey.PROJECTS)
            return updated

    def delete_project(self, project_id: str) -> list[str]:
        """Delete a project, detaching (not deleting) its tasks.

        Returns:
            IDs of the tasks whose project_id was cleared

        Raises:
            NotFoundError: If the project does not exist
        """
        with span("task_store.delete_project"):
            project = self.get_project(project_id)
            del self._projects[project_id]

            orphaned = [task.id for task in self._tasks.values() if task.project_id == project_id]
            for task_id in orphaned:
                self._tasks[task_id] = self._tasks[task_id].model_copy(update={"project_id": None})

            self._persist(PersistenceKey.PROJECTS, PersistenceKey.TASKS)
            logger.info("Deleted project %s '%s' (%d tasks detached)", project_id, project.name, len(orphaned))
            return orphaned

    # ---- tags ----

    def create_tag(self, **fields: Any) -> Tag:
        """Create a tag, or return the existing one with the same name (case-insensitive).

        Raises:
            ValidationFailedError: If the name is blank
        """
        with span("task_store.create_tag"):
            data = _validate(TagCreate, fields)
            existing = self.find_tag(data.name)
            if existing is not None:
                logger.debug("Tag '%s' already exists as %s", data.name, existing.id)
                return existing

            tag = Tag(id=self._next_id(self._clock()), name=data.name, color=pick_tag_color(self._rng))
            self._tags[tag.id] = tag
            self._persist(PersistenceKey.TAGS)
            logger.info("Created tag %s '%s' (%s)", tag.id, tag.name, tag.color)
            return tag

    def _retag(self, old_name: str, new_name: str | None) -> int:
        """Rename (or with None, remove) a tag name on every task. Returns tasks changed."""
        changed = 0
        for task in list(self._tasks.values()):
            if not any(name.casefold() == old_name.casefold() for name in task.tags):
                continue
            names = [
                (new_name if name.casefold() == old_name.casefold() else name)
                for name in task.tags
                if new_name is not None or name.casefold() != old_name.casefold()
            ]
            self._tasks[task.id] = _merge(task, {"tags": names})
            changed += 1
        return changed

    def update_tag(self, tag_id: str, **changes: Any) -> Tag:
        """Apply a partial update to a tag; a rename is carried into every task.

        Raises:
            NotFoundError: If the tag does not exist
            ValidationFailedError: If the changes are invalid or the new name is taken
        """
        with span("task_store.update_tag"):
            tag = self.get_tag(tag_id)
            update = _validate(TagUpdate, changes)
            values = {name: getattr(update, name) for name in update.model_fields_set}

            new_name = values.get("name")
            if new_name is not None:
                clash = self.find_tag(new_name)
                if clash is not None and clash.id != tag_id:
                    msg = f"A tag named '{clash.name}' already exists"
                    raise ValidationFailedError(msg)

            updated = _merge(tag, values)
            self._tags[tag_id] = updated

            renamed = 0
            if new_name is not None and new_name != tag.name:
                renamed = self._retag(tag.name, new_name)
            self._persist(PersistenceKey.TAGS, *([PersistenceKey.TASKS] if renamed else []))
            return updated

    def delete_tag(self, tag_id: str) -> None:
        """Delete a tag and remove its name from every task.

        Raises:
            NotFoundError: If the tag does not exist
        """
        with span("task_store.delete_tag"):
            tag = self.get_tag(tag_id)
            del self._tags[tag_id]
            untagged = self._retag(tag.name, None)
            self._persist(PersistenceKey.TAGS, PersistenceKey.TASKS)
            logger.info("Deleted tag %s '%s' (removed from %d tasks)", tag_id, tag.name, untagged)
