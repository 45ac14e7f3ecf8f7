"""Key-value snapshot persistence.

The engine never chooses a storage technology. Services hand JSON-compatible
snapshots to a `PersistencePort`, one entry per top-level collection, per UI
preference, and per session marker. Two adapters are provided: an in-memory
one for tests and embedding, and a JSON-file one (one file per key).
"""

import json
import logging
from enum import StrEnum
from pathlib import Path
from typing import Protocol

from pydantic import JsonValue

from src.core.errors import PersistenceError


logger = logging.getLogger(__name__)


class PersistenceKey(StrEnum):
    """Fixed keys for persisted entries (preferences use their field names)."""

    TASKS = "tasks"
    PROJECTS = "projects"
    TAGS = "tags"
    SELECTED_VIEW = "selected_view"
    SELECTED_PROJECT = "selected_project"
    FOCUS_TASKS = "focus_tasks"
    LAST_PLANNING_DATE = "last_planning_date"


class PersistencePort(Protocol):
    """Key-value snapshot interface injected into stateful services."""

    def save(self, key: str, value: JsonValue) -> None:
        """Store `value` under `key`, replacing any previous value."""
        ...

    def load(self, key: str) -> JsonValue | None:
        """Return the value stored under `key`, or None when absent."""
        ...


def _encode(key: str, value: JsonValue) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        msg = f"Value for '{key}' is not JSON-serializable: {e}"
        raise PersistenceError(msg) from e


def _decode(key: str, raw: str) -> JsonValue:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        msg = f"Stored value for '{key}' is not valid JSON: {e}"
        raise PersistenceError(msg) from e


class InMemoryPersistence:
    """In-memory adapter. Values are stored encoded so callers never share references."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def save(self, key: str, value: JsonValue) -> None:
        self._entries[key] = _encode(key, value)

    def load(self, key: str) -> JsonValue | None:
        raw = self._entries.get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    def keys(self) -> list[str]:
        """Return stored keys in insertion order."""
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class JsonFilePersistence:
    """File adapter writing one `<prefix><key>.json` file per key."""

    def __init__(self, directory: str | Path, *, prefix: str = "stuff-app-") -> None:
        self._directory = Path(directory)
        self._prefix = prefix
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create storage directory {self._directory}: {e}"
            raise PersistenceError(msg) from e
        logger.info("JsonFilePersistence ready dir=%s", self._directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Return the file path backing `key`."""
        return self._directory / f"{self._prefix}{key}.json"

    def save(self, key: str, value: JsonValue) -> None:
        payload = _encode(key, value)
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            logger.exception("Failed to write %s", path)
            msg = f"Failed to save '{key}': {e}"
            raise PersistenceError(msg) from e
        logger.debug("Saved %s (%d bytes)", key, len(payload))

    def load(self, key: str) -> JsonValue | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"Failed to load '{key}': {e}"
            raise PersistenceError(msg) from e
        return _decode(key, raw)
