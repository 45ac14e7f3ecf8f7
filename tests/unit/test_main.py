"""Unit tests for workspace bootstrap."""

import pytest

from src import main
from src.core.config import Settings
from src.core.persistence import InMemoryPersistence


@pytest.fixture(autouse=True)
def skip_logfire(monkeypatch):
    """Avoid reconfiguring Logfire from tests."""
    monkeypatch.setattr(main, "configure_logfire", lambda: None)


@pytest.mark.unit
class TestCreateWorkspace:
    """Tests for create_workspace."""

    def test_uses_json_files_under_storage_dir(self, tmp_path, clock):
        """Test that the default adapter writes prefixed files to the storage directory."""
        config = Settings(_env_file=None, storage_dir=str(tmp_path), storage_key_prefix="t-")

        workspace = main.create_workspace(config, clock=clock)
        workspace.quick_add("Water plants tomorrow")

        assert (tmp_path / "t-tasks.json").exists()

    def test_restores_existing_state(self, tmp_path, clock):
        """Test that a second bootstrap sees the first one's tasks."""
        config = Settings(_env_file=None, storage_dir=str(tmp_path))
        main.create_workspace(config, clock=clock).quick_add("Persist me")

        restored = main.create_workspace(config, clock=clock)

        assert [t.title for t in restored.store.tasks] == ["Persist me"]

    def test_injected_persistence(self, clock):
        """Test bootstrapping over a caller-supplied adapter."""
        persistence = InMemoryPersistence()

        workspace = main.create_workspace(Settings(_env_file=None), persistence, clock=clock)
        workspace.quick_add("In memory")

        assert "tasks" in persistence
