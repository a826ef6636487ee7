"""Task domain model and enums."""

from datetime import date, datetime
from enum import StrEnum
from typing import Any

from dateutil import parser as dateutil_parser
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reflectodo.core.date_utils import parse_timestamp


class Priority(StrEnum):
    """How urgent a task is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def blank_to_none(value: Any) -> Any:
    """Treat empty strings (PocketBase's "unset") as missing values."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def coerce_due_date(value: Any) -> date | None:
    """Accept a date, a datetime, or an ISO string and keep the calendar day as written.

    Due dates carry no time of day, so no zone conversion is applied: PocketBase's
    ``"2026-10-18 00:00:00.000Z"`` is the 18th in every zone.
    """
    value = blank_to_none(value)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return dateutil_parser.isoparse(value).date()


class Task(BaseModel):
    """Task data transfer object.

    Instances are immutable; the store replaces a task wholesale on every change.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique task ID, assigned at creation")
    title: str = Field(..., min_length=1, description="Task title")
    description: str | None = Field(default=None, description="Optional details")
    priority: Priority = Field(default=Priority.MEDIUM, description="Task priority")
    due_date: date | None = Field(default=None, description="Calendar day the task is due")
    completed: bool = Field(default=False, description="Whether the task is done")
    completed_at: datetime | None = Field(default=None, description="When the task was marked complete")
    reflection: str | None = Field(default=None, description="Free-text note captured at completion")
    created_at: datetime = Field(..., description="Creation timestamp")

    @field_validator("description", "reflection", mode="before")
    @classmethod
    def _empty_text_is_none(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def _truncate_due_date(cls, v: Any) -> date | None:
        return coerce_due_date(v)

    @field_validator("completed_at", "created_at", mode="before")
    @classmethod
    def _parse_timestamps(cls, v: Any) -> datetime | None:
        v = blank_to_none(v)
        if v is None:
            return None
        return parse_timestamp(v)

    @property
    def is_active(self) -> bool:
        """True while the task still needs doing."""
        return not self.completed
