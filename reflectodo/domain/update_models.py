"""Update models for task edits and completion actions."""

from datetime import date
from typing import Any

from pydantic import BaseModel, field_validator

from reflectodo.domain.create_models import validate_title
from reflectodo.domain.task import Priority, blank_to_none, coerce_due_date


class TaskPatch(BaseModel):
    """Partial edit of a task; only explicitly set fields are applied.

    Completion state is deliberately absent: it moves only through toggling
    and the reflection flow.
    """

    title: str | None = None
    description: str | None = None
    priority: Priority | None = None
    due_date: date | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        """Validate a provided title is not blank."""
        if v is None:
            msg = "Title cannot be empty"
            raise ValueError(msg)
        return validate_title(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Priority | None) -> Priority:
        """Reject an explicit null; an omitted priority is left unchanged."""
        if v is None:
            msg = "Priority cannot be empty"
            raise ValueError(msg)
        return v

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, v: Any) -> Any:
        """Store blank descriptions as missing."""
        v = blank_to_none(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("due_date", mode="before")
    @classmethod
    def truncate_due_date(cls, v: Any) -> date | None:
        """Keep only the calendar day of the due date."""
        return coerce_due_date(v)

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually set, ready to merge into a task."""
        return self.model_dump(exclude_unset=True)


class ToggleRequest(BaseModel):
    """Target completion state for a task."""

    completed: bool


class ReflectionRequest(BaseModel):
    """Reflection text captured when a task is completed."""

    reflection: str | None = None
