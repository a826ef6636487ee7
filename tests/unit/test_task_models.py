"""Unit tests for task domain models and request payloads."""

from datetime import UTC, date, datetime

import pytest
from pydantic import ValidationError

from reflectodo.domain import Priority, ReflectionRequest, Task, TaskDraft, TaskPatch, ToggleRequest
from tests.unit.factories import NOW, make_task


@pytest.mark.unit
class TestTaskDraft:
    """Tests for TaskDraft validation."""

    def test_defaults(self):
        draft = TaskDraft(title="Write report")

        assert draft.title == "Write report"
        assert draft.description is None
        assert draft.priority == Priority.MEDIUM
        assert draft.due_date is None

    def test_title_is_trimmed(self):
        assert TaskDraft(title="  Write report  ").title == "Write report"

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValidationError, match="Title cannot be empty"):
            TaskDraft(title=title)

    def test_blank_description_becomes_none(self):
        assert TaskDraft(title="Task", description="   ").description is None

    def test_due_date_truncated_to_day(self):
        draft = TaskDraft(title="Task", due_date="2026-10-20T15:45:00Z")

        assert draft.due_date == date(2026, 10, 20)

    def test_plain_date_string(self):
        assert TaskDraft(title="Task", due_date="2026-10-20").due_date == date(2026, 10, 20)

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError):
            TaskDraft(title="Task", priority="urgent")


@pytest.mark.unit
class TestTaskPatch:
    """Tests for TaskPatch."""

    def test_changes_only_include_set_fields(self):
        patch = TaskPatch(priority="high")

        assert patch.changes() == {"priority": Priority.HIGH}

    def test_empty_patch_has_no_changes(self):
        assert TaskPatch().changes() == {}

    def test_explicit_none_clears_due_date(self):
        assert TaskPatch(due_date=None).changes() == {"due_date": None}

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError, match="Title cannot be empty"):
            TaskPatch(title="  ")

    def test_null_title_rejected(self):
        with pytest.raises(ValidationError, match="Title cannot be empty"):
            TaskPatch(title=None)

    def test_null_priority_rejected(self):
        with pytest.raises(ValidationError, match="Priority cannot be empty"):
            TaskPatch.model_validate({"priority": None})

    def test_completion_fields_are_not_editable(self):
        patch = TaskPatch.model_validate({"title": "Renamed", "completed": True, "reflection": "sneaky"})

        assert patch.changes() == {"title": "Renamed"}


@pytest.mark.unit
class TestTask:
    """Tests for the Task model."""

    def test_parses_remote_row(self):
        """Rows from the remote table use empty strings for unset fields."""
        task = Task.model_validate(
            {
                "id": "abc123",
                "title": "Water plants",
                "description": "",
                "priority": "low",
                "due_date": "2026-10-20 00:00:00.000Z",
                "completed": False,
                "completed_at": "",
                "reflection": "",
                "created_at": "2026-10-18 09:00:00.000Z",
                "collectionName": "todos",
            }
        )

        assert task.description is None
        assert task.due_date == date(2026, 10, 20)
        assert task.completed_at is None
        assert task.reflection is None
        assert task.created_at == datetime(2026, 10, 18, 9, 0, tzinfo=UTC)

    def test_remote_due_date_keeps_day_west_of_utc(self, monkeypatch):
        monkeypatch.setattr("reflectodo.core.date_utils.settings.timezone", "America/New_York")

        task = Task.model_validate(
            {"id": "abc123", "title": "Water plants", "due_date": "2026-10-18 00:00:00.000Z", "created_at": NOW}
        )

        assert task.due_date == date(2026, 10, 18)

    def test_datetime_due_date_keeps_day_as_written(self, monkeypatch):
        monkeypatch.setattr("reflectodo.core.date_utils.settings.timezone", "Pacific/Auckland")

        task = make_task(due_date=datetime(2026, 10, 18, 23, 0, tzinfo=UTC))

        assert task.due_date == date(2026, 10, 18)

    def test_is_immutable(self):
        task = make_task()

        with pytest.raises(ValidationError):
            task.title = "Changed"  # type: ignore[misc]

    def test_model_copy_replaces_fields(self):
        task = make_task()
        done = task.model_copy(update={"completed": True, "completed_at": NOW})

        assert done.completed is True
        assert task.completed is False

    def test_is_active(self):
        assert make_task().is_active is True
        assert make_task(completed=True, completed_at=NOW).is_active is False

    def test_round_trips_through_json(self):
        task = make_task(due_date=date(2026, 10, 20), reflection=None)

        assert Task.model_validate(task.model_dump(mode="json")) == task


@pytest.mark.unit
class TestRequests:
    """Tests for toggle and reflection payloads."""

    def test_toggle_requires_completed(self):
        with pytest.raises(ValidationError):
            ToggleRequest.model_validate({})

    def test_reflection_optional(self):
        assert ReflectionRequest().reflection is None
