"""Unit tests for the view filter engine and task-list aggregates."""

from datetime import UTC, datetime, timedelta

import pytest

from src.domain.task import Duration, When, duration_minutes
from src.domain.view import ViewKind
from src.services import view_service
from tests.unit.mocks import FRIDAY, make_task


@pytest.fixture
def one_per_view():
    """One task matching each list view and nothing else."""
    return {
        ViewKind.INBOX: make_task(title="inbox"),
        ViewKind.TODAY: make_task(title="today", when=When.TODAY, project_id="p1"),
        ViewKind.UPCOMING: make_task(title="upcoming", when=When.UPCOMING, project_id="p1"),
        ViewKind.ANYTIME: make_task(title="anytime", when=When.ANYTIME, project_id="p1"),
    }


@pytest.mark.unit
class TestFilterTasks:
    """Tests for filter_tasks."""

    @pytest.mark.parametrize("view", [ViewKind.INBOX, ViewKind.TODAY, ViewKind.UPCOMING, ViewKind.ANYTIME])
    def test_each_view_returns_only_its_task(self, one_per_view, view):
        """Test that every list view selects exactly its own task."""
        tasks = list(one_per_view.values())

        result = view_service.filter_tasks(tasks, view, now=FRIDAY)

        assert result == [one_per_view[view]]

    def test_deadline_today_counts_as_today(self):
        """Test that a deadline earlier today puts the task in today but not upcoming."""
        task = make_task(project_id="p1", deadline=datetime(2024, 1, 5, 7, 0))

        assert view_service.filter_tasks([task], ViewKind.TODAY, now=FRIDAY) == [task]
        assert view_service.filter_tasks([task], ViewKind.UPCOMING, now=FRIDAY) == []

    def test_future_deadline_counts_as_upcoming(self):
        """Test that any deadline after now puts the task in upcoming."""
        task = make_task(project_id="p1", deadline=datetime(2024, 2, 1, 9, 0))

        assert view_service.filter_tasks([task], ViewKind.UPCOMING, now=FRIDAY) == [task]
        assert view_service.filter_tasks([task], ViewKind.TODAY, now=FRIDAY) == []

    def test_aware_now_is_compared_in_local_time(self):
        """Test that a timezone-aware reference time is accepted and read as local time."""
        task = make_task(project_id="p1", deadline=datetime(2024, 1, 5, 7, 0))
        now = FRIDAY.astimezone(UTC)

        assert view_service.filter_tasks([task], ViewKind.TODAY, now=now) == [task]
        assert view_service.filter_tasks([task], ViewKind.UPCOMING, now=now) == []

    def test_completed_tasks_hidden_outside_project_view(self):
        """Test that completed tasks appear only in the project view."""
        done = make_task(when=When.TODAY, project_id="p1", completed=True)

        assert view_service.filter_tasks([done], ViewKind.TODAY, now=FRIDAY) == []
        assert view_service.filter_tasks([done], ViewKind.FOCUS, focus_ids=[done.id], now=FRIDAY) == []
        assert view_service.filter_tasks([done], ViewKind.PROJECT, active_project_id="p1", now=FRIDAY) == [done]

    def test_project_view_without_project_is_empty(self):
        """Test that the project view needs an active project."""
        task = make_task(project_id="p1")

        assert view_service.filter_tasks([task], ViewKind.PROJECT, now=FRIDAY) == []

    def test_dashboard_is_empty(self, one_per_view):
        """Test that the dashboard view lists no tasks."""
        assert view_service.filter_tasks(list(one_per_view.values()), ViewKind.DASHBOARD, now=FRIDAY) == []

    def test_focus_view_uses_focus_ids(self, one_per_view):
        """Test that the focus view selects focused incomplete tasks."""
        tasks = list(one_per_view.values())
        focused = one_per_view[ViewKind.ANYTIME]

        result = view_service.filter_tasks(tasks, ViewKind.FOCUS, focus_ids={focused.id}, now=FRIDAY)

        assert result == [focused]

    def test_sort_is_stable_on_equal_order(self):
        """Test that tasks with equal order keep their input order."""
        first = make_task(title="first", order=1)
        zero = make_task(title="zero", order=0)
        second = make_task(title="second", order=1)

        result = view_service.filter_tasks([first, zero, second], ViewKind.INBOX, now=FRIDAY)

        assert [t.title for t in result] == ["zero", "first", "second"]


@pytest.mark.unit
class TestAggregates:
    """Tests for counts, time totals and age-based lists."""

    def test_count_tasks_by_view(self, one_per_view):
        """Test sidebar counts."""
        counts = view_service.count_tasks_by_view(list(one_per_view.values()), now=FRIDAY)

        assert (counts.inbox, counts.today, counts.upcoming, counts.anytime) == (1, 1, 1, 1)

    def test_today_total_time(self):
        """Test that only incomplete tasks due today contribute their estimate."""
        tasks = [
            make_task(when=When.TODAY, estimated_duration=Duration.HOUR_1),
            make_task(deadline=datetime(2024, 1, 5, 17, 0), estimated_duration=Duration.MIN_30),
            make_task(when=When.TODAY, estimated_duration=Duration.HOUR_2, completed=True),
            make_task(when=When.TODAY),
            make_task(when=When.ANYTIME, estimated_duration=Duration.HOUR_8),
        ]

        total = view_service.today_total_time(tasks, FRIDAY)

        assert (total.hours, total.minutes, total.total_minutes) == (1, 30, 90)

    def test_unknown_duration_label_is_zero(self):
        """Test that unmapped labels count as zero minutes."""
        assert duration_minutes("3h") == 0
        assert duration_minutes(None) == 0
        assert duration_minutes("4h") == 240

    def test_stale_and_abandoned_thresholds(self):
        """Test that stale and abandoned use independent thresholds."""
        four_days = make_task(when=When.ANYTIME, created_at=FRIDAY - timedelta(days=4))
        eight_days = make_task(when=When.ANYTIME, created_at=FRIDAY - timedelta(days=8))
        done = make_task(when=When.ANYTIME, created_at=FRIDAY - timedelta(days=10), completed=True)
        not_anytime = make_task(when=When.TODAY, created_at=FRIDAY - timedelta(days=10))
        tasks = [four_days, eight_days, done, not_anytime]

        assert view_service.stale_tasks(tasks, FRIDAY) == [four_days, eight_days]
        assert view_service.abandoned_tasks(tasks, FRIDAY) == [eight_days]

    def test_exactly_threshold_is_not_stale(self):
        """Test that the threshold is strict."""
        task = make_task(when=When.ANYTIME, created_at=FRIDAY - timedelta(days=3))

        assert view_service.stale_tasks([task], FRIDAY) == []

    def test_aggregates_accept_aware_now(self):
        """Test that time totals and age lists accept a timezone-aware reference time."""
        now = FRIDAY.astimezone(UTC)
        today = make_task(deadline=datetime(2024, 1, 5, 17, 0), estimated_duration=Duration.MIN_30)
        old = make_task(when=When.ANYTIME, created_at=FRIDAY - timedelta(days=8))

        assert view_service.today_total_time([today, old], now).total_minutes == 30
        assert view_service.abandoned_tasks([today, old], now) == [old]


@pytest.mark.unit
class TestQuickFind:
    """Tests for quick_find."""

    def test_ranks_exact_before_contains_before_words(self):
        """Test tiered ranking across all match kinds."""
        partial = make_task(title="Buy bread")
        contains = make_task(title="Buy milk")
        exact = make_task(title="milk")

        assert view_service.quick_find([partial, contains, exact], "milk") == [exact, contains]
        assert view_service.quick_find([partial, contains, exact], "buy eggs") == [partial, contains]

    def test_blank_query(self):
        """Test that a blank query finds nothing."""
        assert view_service.quick_find([make_task(title="Anything")], "   ") == []

    def test_limit(self):
        """Test that results are capped."""
        tasks = [make_task(title=f"report {i}") for i in range(15)]

        assert len(view_service.quick_find(tasks, "report")) == 10
