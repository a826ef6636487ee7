"""Calendar-day arithmetic and human-readable date labels.

Every comparison truncates both sides to a calendar day in the configured
timezone before subtracting, so a task due later today is never overdue.
"""

import math
from datetime import date, datetime, timedelta, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo

from dateutil import parser as dateutil_parser

from reflectodo.core.config import constants, settings


SECONDS_PER_DAY = 86400


@lru_cache(maxsize=8)
def _zone(name: str) -> tzinfo:
    return ZoneInfo(name)


def local_zone() -> tzinfo:
    """Timezone that defines where one calendar day ends and the next begins."""
    return _zone(settings.timezone)


def now() -> datetime:
    """Current moment as an aware datetime in the configured zone."""
    return datetime.now(local_zone())


def today() -> date:
    """Current calendar day in the configured zone."""
    return now().date()


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO timestamp, attaching the configured zone when none is given."""
    parsed = value if isinstance(value, datetime) else dateutil_parser.isoparse(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=local_zone())
    return parsed


def calendar_day(value: str | date | datetime) -> date:
    """Truncate a timestamp, date, or ISO string to its calendar day."""
    if isinstance(value, datetime):
        return parse_timestamp(value).astimezone(local_zone()).date()
    if isinstance(value, date):
        return value
    return calendar_day(parse_timestamp(value))


def days_until(due: date, reference: date | None = None) -> int:
    """Whole days from ``reference`` (default today) to ``due``; negative when past."""
    return (due - (reference or today())).days


def days_overdue(due: date | None, reference: date | None = None) -> int:
    """Number of days ``due`` lies before ``reference``; 0 when not yet due or undated."""
    if due is None:
        return 0
    return max(-days_until(due, reference), 0)


def format_short_label(day: date) -> str:
    """Short month/day label, e.g. "Oct 25"."""
    return f"{day:%b} {day.day}"


def format_day_label(day: date) -> str:
    """Long date label used for timeline headings, e.g. "October 18, 2026"."""
    return f"{day:%B} {day.day}, {day.year}"


def format_relative_date(due: date | None, reference: date | None = None) -> str:
    """Describe a due date relative to ``reference`` (default today)."""
    if due is None:
        return "No due date"

    diff = days_until(due, reference)
    if diff < 0:
        return "Overdue"
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff <= constants.SOON_WINDOW_DAYS:
        return f"{diff} days from now"
    return format_short_label(due)


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_time_ago(moment: datetime, reference: datetime | None = None) -> str:
    """Relative label for a past moment ("Just now", "3 hours ago", "Yesterday", ...)."""
    moment = parse_timestamp(moment)
    elapsed = (parse_timestamp(reference) if reference else now()) - moment
    seconds = elapsed.total_seconds()

    minutes = math.floor(seconds / 60)
    hours = math.floor(seconds / 3600)
    days = math.floor(seconds / SECONDS_PER_DAY)

    if minutes < 1:
        return "Just now"
    if minutes < 60:  # noqa: PLR2004
        return f"{_plural(minutes, 'minute')} ago"
    if hours < 24:  # noqa: PLR2004
        return f"{_plural(hours, 'hour')} ago"
    if days == 1:
        return "Yesterday"
    if days < 7:  # noqa: PLR2004
        return f"{days} days ago"
    local = moment.astimezone(local_zone())
    return f"{local.hour % 12 or 12}:{local:%M} {local:%p}"


def ceil_days(delta: timedelta) -> int:
    """Round a duration up to whole days."""
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)
