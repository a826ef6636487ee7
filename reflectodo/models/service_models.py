"""Pydantic models for derived views returned by the view builder.

These models give the list, dashboard, and timeline views typed shapes
that serialize directly to JSON.
"""

import datetime
from enum import StrEnum

from pydantic import BaseModel

from reflectodo.domain.task import Task


class TaskFilter(StrEnum):
    """Which tasks the list view shows."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortMode(StrEnum):
    """How the list view orders tasks (overdue tasks always lead)."""

    DATE = "date"
    PRIORITY = "priority"


class TimeRange(StrEnum):
    """Dashboard look-back window over task creation time."""

    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    ALL = "all"


class OverdueIntensity(BaseModel):
    """How strongly an overdue task is emphasized, growing with days overdue."""

    scale: float = 1.0
    glow: float = 0.0
    red_intensity: float = 0.0
    red_opacity: float = 0.0


class TaskView(BaseModel):
    """A task decorated with its overdue status and due-date label."""

    task: Task
    days_overdue: int
    is_overdue: bool
    relative_due: str
    overdue_intensity: OverdueIntensity


class TaskListView(BaseModel):
    """Filtered, sorted task list plus the count of tasks left to do."""

    filter: TaskFilter
    sort: SortMode
    active_count: int
    tasks: list[TaskView]


class PriorityCounts(BaseModel):
    """Number of tasks at each priority."""

    high: int = 0
    medium: int = 0
    low: int = 0


class DashboardMetrics(BaseModel):
    """Aggregate metrics over the time-range-filtered tasks."""

    time_range: TimeRange
    total: int
    completed: int
    active: int
    completion_rate: float
    overdue_count: int
    overdue_rate: float
    priority_counts: PriorityCounts
    avg_completion_time: float
    recent_completions: int
    activity_score: float
    productivity_score: int


class TrendPoint(BaseModel):
    """Tasks completed and created on one calendar day."""

    date: datetime.date
    label: str
    completed: int
    created: int


class PrioritySlice(BaseModel):
    """One non-empty slice of the priority distribution."""

    name: str
    value: int


class TimelineEntry(BaseModel):
    """A completed task placed on the timeline."""

    task: Task
    time_label: str


class TimelineGroup(BaseModel):
    """Completed tasks sharing one completion day."""

    date: datetime.date
    label: str
    entries: list[TimelineEntry]


class DashboardView(BaseModel):
    """Everything the dashboard shows for one time range."""

    metrics: DashboardMetrics
    trend: list[TrendPoint]
    priority_distribution: list[PrioritySlice]
