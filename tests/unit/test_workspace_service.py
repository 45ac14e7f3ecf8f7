"""Unit tests for the workspace facade."""

import asyncio

import pytest

from src.core.config import Settings
from src.core.errors import NotFoundError, ValidationFailedError
from src.domain.task import When
from src.domain.view import ViewKind
from src.services.workspace_service import Workspace


@pytest.fixture
def workspace(store, persistence):
    """Workspace over the fixture store with a short settle window."""
    return Workspace(store, persistence=persistence, settle_delay_seconds=0.05)


@pytest.mark.unit
class TestViewSelection:
    """Tests for selecting and restoring the active view."""

    def test_defaults_to_inbox(self, workspace):
        """Test the initial selection."""
        assert workspace.selection.kind == ViewKind.INBOX

    def test_select_view_persists(self, workspace, persistence):
        """Test that the selection is saved under its two keys."""
        project = workspace.store.create_project(name="Home")

        workspace.select_view(ViewKind.PROJECT, project.id)

        assert persistence.load("selected_view") == "project"
        assert persistence.load("selected_project") == project.id

    def test_select_project_view_needs_project(self, workspace):
        """Test that the project view without a project is refused."""
        with pytest.raises(ValidationFailedError):
            workspace.select_view(ViewKind.PROJECT)

    def test_select_unknown_project(self, workspace):
        """Test that selecting a missing project raises NotFoundError."""
        with pytest.raises(NotFoundError):
            workspace.select_view(ViewKind.PROJECT, "missing")

    def test_restores_selection(self, store, persistence):
        """Test that a new workspace resumes the saved view."""
        Workspace(store, persistence=persistence).select_view("upcoming")

        assert Workspace(store, persistence=persistence).selection.kind == ViewKind.UPCOMING

    def test_missing_project_falls_back_to_default_view(self, store, persistence):
        """Test that a saved view of a vanished project falls back to the preferred default."""
        persistence.save("selected_view", "project")
        persistence.save("selected_project", "gone")
        persistence.save("default_view", "anytime")

        assert Workspace(store, persistence=persistence).selection.kind == ViewKind.ANYTIME


@pytest.mark.unit
class TestQuickAdd:
    """Tests for quick_add."""

    def test_today_view_sets_bucket(self, workspace):
        """Test that adding in the today view files the task under today."""
        workspace.select_view(ViewKind.TODAY)

        task = workspace.quick_add("Call the bank")

        assert task.when == When.TODAY
        assert workspace.visible_tasks() == [task]

    def test_explicit_bucket_wins(self, workspace):
        """Test that an explicit when overrides the view default."""
        workspace.select_view(ViewKind.UPCOMING)

        assert workspace.quick_add("Later", when=When.ANYTIME).when == When.ANYTIME

    def test_project_view_sets_project(self, workspace):
        """Test that adding in a project view files the task under that project."""
        project = workspace.store.create_project(name="Garden")
        workspace.select_view(ViewKind.PROJECT, project.id)

        task = workspace.quick_add("Plant tulips next week")

        assert task.project_id == project.id
        assert task.title == "Plant tulips"
        assert task.deadline is not None

    def test_inbox_leaves_defaults(self, workspace):
        """Test that the inbox adds unscheduled, project-less tasks."""
        task = workspace.quick_add("Idea")

        assert (task.when, task.project_id) == (When.UNSET, None)


@pytest.mark.unit
class TestDeletion:
    """Tests for cascading deletes through the workspace."""

    def test_delete_task_drops_focus(self, workspace):
        """Test that deleting a task also removes it from focus."""
        task = workspace.quick_add("Focus me")
        workspace.add_focus(task.id)

        workspace.delete_task(task.id)

        assert workspace.focus.ids == []
        with pytest.raises(NotFoundError):
            workspace.delete_task(task.id)

    def test_delete_selected_project_resets_view(self, workspace):
        """Test that deleting the project on screen returns to the inbox."""
        project = workspace.store.create_project(name="Old")
        workspace.select_view(ViewKind.PROJECT, project.id)
        task = workspace.quick_add("Leftover")

        orphaned = workspace.delete_project(project.id)

        assert orphaned == [task.id]
        assert workspace.selection.kind == ViewKind.INBOX
        assert workspace.visible_tasks() == [workspace.store.get_task(task.id)]


@pytest.mark.unit
class TestDerived:
    """Tests for lists and summaries exposed by the workspace."""

    def test_focus_view(self, workspace):
        """Test the focus view lists focused tasks."""
        first = workspace.quick_add("one")
        workspace.quick_add("two")
        workspace.add_focus(first.id)
        workspace.select_view(ViewKind.FOCUS)

        assert workspace.visible_tasks() == [first]

    def test_counts_and_find(self, workspace):
        """Test sidebar counts and title search."""
        workspace.quick_add("Buy milk")
        workspace.quick_add("Buy bread", when=When.TODAY)

        counts = workspace.view_counts()

        assert (counts.inbox, counts.today) == (1, 1)
        assert workspace.find_task("bread").title == "Buy bread"
        assert [t.title for t in workspace.quick_find("buy")] == ["Buy milk", "Buy bread"]

    def test_dashboard_lists_nothing(self, workspace):
        """Test that the dashboard view has no task list but a summary."""
        workspace.quick_add("Task")
        workspace.select_view(ViewKind.DASHBOARD)

        assert workspace.visible_tasks() == []
        assert workspace.dashboard().active_tasks == 1

    async def test_export_flushes_pending_completions(self, workspace):
        """Test that exporting commits completions still in their settle window."""
        task = workspace.quick_add("Task")
        workspace.toggle_complete(task.id)
        assert workspace.completion.is_pending(task.id)

        bundle = workspace.export()

        assert bundle.tasks[0].completed is True
        assert bundle.version == "2.0.0"
        await asyncio.sleep(0)


@pytest.mark.unit
class TestOpen:
    """Tests for Workspace.open."""

    def test_open_applies_settings(self, persistence, clock):
        """Test that settings drive the session services."""
        config = Settings(settle_delay_seconds=0, focus_limit=1, tag_color_seed=3)

        workspace = Workspace.open(persistence, config=config, clock=clock)
        first = workspace.quick_add("one")
        second = workspace.quick_add("two")
        workspace.add_focus(first.id)

        assert workspace.toggle_complete(second.id).completed is True
        with pytest.raises(ValidationFailedError):
            workspace.add_focus(workspace.quick_add("three").id)
