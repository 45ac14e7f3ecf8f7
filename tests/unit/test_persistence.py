"""Unit tests for the persistence adapters."""

import pytest

from src.core.errors import PersistenceError
from src.core.persistence import InMemoryPersistence, JsonFilePersistence, PersistenceKey


@pytest.mark.unit
class TestInMemoryPersistence:
    """Tests for InMemoryPersistence."""

    def test_save_and_load(self):
        """Test storing and reading back a value."""
        persistence = InMemoryPersistence()
        persistence.save(PersistenceKey.TASKS, [{"id": "1", "title": "Task"}])

        assert persistence.load("tasks") == [{"id": "1", "title": "Task"}]
        assert persistence.keys() == ["tasks"]

    def test_missing_key(self):
        """Test that an absent key loads as None."""
        assert InMemoryPersistence().load("projects") is None

    def test_values_are_copied(self):
        """Test that later mutation of the saved object does not leak into storage."""
        persistence = InMemoryPersistence()
        value = ["a"]
        persistence.save("focus_tasks", value)
        value.append("b")

        assert persistence.load("focus_tasks") == ["a"]

    def test_unserializable_value(self):
        """Test that non-JSON values are rejected."""
        with pytest.raises(PersistenceError):
            InMemoryPersistence().save("tasks", {"when": object()})


@pytest.mark.unit
class TestJsonFilePersistence:
    """Tests for JsonFilePersistence."""

    def test_one_prefixed_file_per_key(self, tmp_path):
        """Test that each key is written to its own prefixed file."""
        persistence = JsonFilePersistence(tmp_path)

        persistence.save(PersistenceKey.SELECTED_VIEW, "today")

        path = tmp_path / "stuff-app-selected_view.json"
        assert persistence.path_for("selected_view") == path
        assert path.read_text(encoding="utf-8") == '"today"'
        assert not (tmp_path / "stuff-app-selected_view.json.tmp").exists()

    def test_round_trip_and_missing(self, tmp_path):
        """Test reading back saved values, and None for absent keys."""
        persistence = JsonFilePersistence(tmp_path / "nested", prefix="test-")
        persistence.save("selected_project", None)
        persistence.save("projects", [{"id": "1", "name": "Home", "emoji": "🏠"}])

        assert persistence.load("selected_project") is None
        assert persistence.load("projects") == [{"id": "1", "name": "Home", "emoji": "🏠"}]
        assert persistence.load("tags") is None
        assert (tmp_path / "nested" / "test-projects.json").exists()

    def test_corrupt_file(self, tmp_path):
        """Test that unreadable JSON raises PersistenceError."""
        persistence = JsonFilePersistence(tmp_path)
        persistence.path_for("tasks").write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError):
            persistence.load("tasks")
