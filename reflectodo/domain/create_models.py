"""Pydantic models for creating task records."""

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator

from reflectodo.domain.task import Priority, blank_to_none, coerce_due_date


def validate_title(v: str) -> str:
    """Trim a title and reject it when nothing is left."""
    title = v.strip()
    if not title:
        msg = "Title cannot be empty"
        raise ValueError(msg)
    return title


class TaskDraft(BaseModel):
    """Pydantic model for a task the user is about to add."""

    title: str = Field(..., description="Task title (trimmed, non-empty)")
    description: str | None = Field(default=None, description="Optional details")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    due_date: date | None = Field(default=None, description="Calendar day the task is due")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate the title is not blank."""
        return validate_title(v)

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
