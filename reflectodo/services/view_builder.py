"""Derived views over the task collection.

Everything here is a pure function of a task sequence plus a reference
"today" or "now"; nothing mutates the store. Views are recomputed from the
current snapshot on every read.

Key Concepts:
- Overdue: an incomplete task whose due day is before today. Completed tasks
  are never overdue, whatever their due date.
- Time range: the dashboard only considers tasks created within the last
  7/30/90 days (or all of them).
- Productivity score: 40% completion rate, 30% on-time rate
  (100 - overdue rate), 30% recent activity.
"""

import logging
import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta

from reflectodo.core import date_utils
from reflectodo.core.config import constants
from reflectodo.core.logging import span
from reflectodo.domain.task import Priority, Task
from reflectodo.models.service_models import (
    DashboardMetrics,
    DashboardView,
    OverdueIntensity,
    PriorityCounts,
    PrioritySlice,
    SortMode,
    TaskFilter,
    TaskListView,
    TaskView,
    TimelineEntry,
    TimelineGroup,
    TimeRange,
    TrendPoint,
)


logger = logging.getLogger(__name__)


def task_days_overdue(task: Task, today: date | None = None) -> int:
    """Days a task is overdue; always 0 for completed or undated tasks."""
    if task.completed:
        return 0
    return date_utils.days_overdue(task.due_date, today)


def filter_tasks(tasks: Iterable[Task], task_filter: TaskFilter) -> list[Task]:
    """Select tasks by completion state."""
    if task_filter == TaskFilter.ACTIVE:
        return [task for task in tasks if not task.completed]
    if task_filter == TaskFilter.COMPLETED:
        return [task for task in tasks if task.completed]
    return list(tasks)


def _overdue_key(days_overdue: int, task: Task) -> tuple[int, int, int]:
    # Most overdue first; equal counts fall back to the earlier due date.
    return (0, -days_overdue, task.due_date.toordinal() if task.due_date else 0)


def _date_sort_key(task: Task, today: date) -> tuple[int, int, int]:
    days_overdue = task_days_overdue(task, today)
    if days_overdue > 0:
        return _overdue_key(days_overdue, task)
    if task.due_date is None:
        return (2, 0, 0)
    return (1, 0, task.due_date.toordinal())


def _priority_sort_key(task: Task, today: date) -> tuple[int, int, int]:
    days_overdue = task_days_overdue(task, today)
    if days_overdue > 0:
        return _overdue_key(days_overdue, task)
    return (1, 0, constants.PRIORITY_RANK[task.priority])


def sort_tasks(tasks: Iterable[Task], sort_mode: SortMode, today: date | None = None) -> list[Task]:
    """Order tasks for display; overdue tasks lead in every mode.

    Sorting is stable, so tasks with equal keys keep their incoming order.
    """
    reference = today or date_utils.today()
    if sort_mode == SortMode.PRIORITY:
        return sorted(tasks, key=lambda task: _priority_sort_key(task, reference))
    return sorted(tasks, key=lambda task: _date_sort_key(task, reference))


def overdue_intensity(days_overdue: int) -> OverdueIntensity:
    """Emphasis for an overdue task, saturating after a month."""
    if days_overdue <= 0:
        return OverdueIntensity()

    cap = constants.OVERDUE_INTENSITY_CAP_DAYS
    normalized = min(days_overdue, cap) / cap
    return OverdueIntensity(
        scale=1 + normalized * constants.OVERDUE_MAX_SCALE_BOOST,
        glow=normalized * constants.OVERDUE_MAX_GLOW_PX,
        red_intensity=normalized,
        red_opacity=min(constants.OVERDUE_BASE_OPACITY + normalized * (1 - constants.OVERDUE_BASE_OPACITY), 1.0),
    )


def build_task_view(task: Task, today: date | None = None) -> TaskView:
    reference = today or date_utils.today()
    days_overdue = task_days_overdue(task, reference)
    return TaskView(
        task=task,
        days_overdue=days_overdue,
        is_overdue=days_overdue > 0,
        relative_due=date_utils.format_relative_date(task.due_date, reference),
        overdue_intensity=overdue_intensity(days_overdue),
    )


def build_task_list(
    tasks: Sequence[Task],
    task_filter: TaskFilter = TaskFilter.ALL,
    sort_mode: SortMode = SortMode.DATE,
    today: date | None = None,
) -> TaskListView:
    """Filter, sort, and decorate tasks for the list view."""
    with span("view_builder.build_task_list"):
        reference = today or date_utils.today()
        ordered = sort_tasks(filter_tasks(tasks, task_filter), sort_mode, reference)
        return TaskListView(
            filter=task_filter,
            sort=sort_mode,
            active_count=sum(1 for task in tasks if not task.completed),
            tasks=[build_task_view(task, reference) for task in ordered],
        )


def range_days(time_range: TimeRange) -> int | None:
    """Length of a time range in days; None for the unbounded range."""
    return constants.TIME_RANGE_DAYS.get(time_range.value)


def filter_by_time_range(tasks: Iterable[Task], time_range: TimeRange, now: datetime | None = None) -> list[Task]:
    """Keep tasks created within the range (cutoff inclusive)."""
    days = range_days(time_range)
    if days is None:
        return list(tasks)
    cutoff = (now or date_utils.now()) - timedelta(days=days)
    return [task for task in tasks if task.created_at >= cutoff]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _percentage(part: int, whole: int) -> float:
    return part / whole * 100 if whole > 0 else 0.0


def compute_metrics(
    tasks: Iterable[Task],
    time_range: TimeRange = TimeRange.MONTH,
    now: datetime | None = None,
) -> DashboardMetrics:
    """Aggregate dashboard metrics over the tasks created within ``time_range``."""
    reference = now or date_utils.now()
    today = date_utils.calendar_day(reference)
    in_range = filter_by_time_range(tasks, time_range, reference)

    total = len(in_range)
    completed = sum(1 for task in in_range if task.completed)
    completion_rate = _percentage(completed, total)

    overdue_count = sum(1 for task in in_range if task_days_overdue(task, today) > 0)
    overdue_rate = _percentage(overdue_count, total)

    priorities = Counter(task.priority for task in in_range)
    priority_counts = PriorityCounts(
        high=priorities[Priority.HIGH],
        medium=priorities[Priority.MEDIUM],
        low=priorities[Priority.LOW],
    )

    durations = [
        date_utils.ceil_days(task.completed_at - task.created_at)
        for task in in_range
        if task.completed and task.completed_at is not None
    ]
    avg_completion_time = sum(durations) / len(durations) if durations else 0.0

    window = range_days(time_range) or constants.ALL_RANGE_ACTIVITY_WINDOW_DAYS
    activity_cutoff = reference - timedelta(days=window)
    recent_completions = sum(
        1 for task in in_range if task.completed_at is not None and task.completed_at >= activity_cutoff
    )
    activity_score = min(_percentage(recent_completions, total), 100.0)

    productivity_score = _round_half_up(
        completion_rate * constants.COMPLETION_WEIGHT
        + (100 - overdue_rate) * constants.ON_TIME_WEIGHT
        + activity_score * constants.ACTIVITY_WEIGHT
    )

    return DashboardMetrics(
        time_range=time_range,
        total=total,
        completed=completed,
        active=total - completed,
        completion_rate=completion_rate,
        overdue_count=overdue_count,
        overdue_rate=overdue_rate,
        priority_counts=priority_counts,
        avg_completion_time=avg_completion_time,
        recent_completions=recent_completions,
        activity_score=activity_score,
        productivity_score=productivity_score,
    )


def completion_trend(
    tasks: Iterable[Task],
    now: datetime | None = None,
    days: int = constants.TREND_DAYS,
) -> list[TrendPoint]:
    """Per-day completed and created counts for the last ``days`` days, oldest first."""
    today = date_utils.calendar_day(now or date_utils.now())

    completed_per_day: Counter[date] = Counter()
    created_per_day: Counter[date] = Counter()
    for task in tasks:
        created_per_day[date_utils.calendar_day(task.created_at)] += 1
        if task.completed_at is not None:
            completed_per_day[date_utils.calendar_day(task.completed_at)] += 1

    points = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        points.append(
            TrendPoint(
                date=day,
                label=date_utils.format_short_label(day),
                completed=completed_per_day[day],
                created=created_per_day[day],
            )
        )
    return points


def priority_distribution(counts: PriorityCounts) -> list[PrioritySlice]:
    """Non-empty priority slices in High, Medium, Low order."""
    slices = [
        PrioritySlice(name="High", value=counts.high),
        PrioritySlice(name="Medium", value=counts.medium),
        PrioritySlice(name="Low", value=counts.low),
    ]
    return [item for item in slices if item.value > 0]


def build_dashboard(
    tasks: Sequence[Task],
    time_range: TimeRange = TimeRange.MONTH,
    now: datetime | None = None,
) -> DashboardView:
    """Metrics, trend series, and priority distribution for one time range."""
    with span("view_builder.build_dashboard"):
        reference = now or date_utils.now()
        metrics = compute_metrics(tasks, time_range, reference)
        in_range = filter_by_time_range(tasks, time_range, reference)

        logger.debug(
            "Dashboard for %s: %d tasks, score %d", time_range.value, metrics.total, metrics.productivity_score
        )
        return DashboardView(
            metrics=metrics,
            trend=completion_trend(in_range, reference),
            priority_distribution=priority_distribution(metrics.priority_counts),
        )


def group_timeline(tasks: Iterable[Task], now: datetime | None = None) -> list[TimelineGroup]:
    """Group completed tasks by completion day, most recent day first.

    Within a day, tasks keep the order they arrived in.
    """
    reference = now or date_utils.now()
    groups: dict[date, list[TimelineEntry]] = {}
    for task in tasks:
        if not task.completed or task.completed_at is None:
            continue
        day = date_utils.calendar_day(task.completed_at)
        groups.setdefault(day, []).append(
            TimelineEntry(task=task, time_label=date_utils.format_time_ago(task.completed_at, reference))
        )

    return [
        TimelineGroup(date=day, label=date_utils.format_day_label(day), entries=groups[day])
        for day in sorted(groups, reverse=True)
    ]
