"""Unit tests for calendar-day arithmetic and date labels."""

from datetime import UTC, date, datetime, timedelta

import pytest

from reflectodo.core import date_utils
from tests.unit.factories import NOW, TODAY


@pytest.mark.unit
class TestDaysOverdue:
    """Tests for days_overdue and days_until."""

    def test_yesterday_is_one_day_overdue(self):
        assert date_utils.days_overdue(TODAY - timedelta(days=1), TODAY) == 1

    def test_due_today_is_not_overdue(self):
        assert date_utils.days_overdue(TODAY, TODAY) == 0

    def test_future_due_date_is_not_overdue(self):
        assert date_utils.days_overdue(TODAY + timedelta(days=3), TODAY) == 0

    def test_missing_due_date_is_not_overdue(self):
        assert date_utils.days_overdue(None, TODAY) == 0

    def test_never_decreases_as_today_advances(self):
        """Overdue count grows by one per day once the due day has passed."""
        due = TODAY
        counts = [date_utils.days_overdue(due, TODAY + timedelta(days=offset)) for offset in range(-3, 5)]

        assert counts == sorted(counts)
        assert counts == [0, 0, 0, 0, 1, 2, 3, 4]

    def test_days_until_is_negative_when_past(self):
        assert date_utils.days_until(TODAY - timedelta(days=2), TODAY) == -2


@pytest.mark.unit
class TestFormatRelativeDate:
    """Tests for format_relative_date."""

    def test_no_due_date(self):
        assert date_utils.format_relative_date(None, TODAY) == "No due date"

    def test_overdue(self):
        assert date_utils.format_relative_date(TODAY - timedelta(days=1), TODAY) == "Overdue"

    def test_today(self):
        assert date_utils.format_relative_date(TODAY, TODAY) == "Today"

    def test_tomorrow(self):
        assert date_utils.format_relative_date(TODAY + timedelta(days=1), TODAY) == "Tomorrow"

    @pytest.mark.parametrize("offset", [2, 5, 7])
    def test_within_a_week(self, offset):
        assert date_utils.format_relative_date(TODAY + timedelta(days=offset), TODAY) == f"{offset} days from now"

    def test_beyond_a_week_uses_short_label(self):
        assert date_utils.format_relative_date(date(2026, 10, 26), TODAY) == "Oct 26"


@pytest.mark.unit
class TestFormatTimeAgo:
    """Tests for format_time_ago."""

    def test_just_now(self):
        assert date_utils.format_time_ago(NOW - timedelta(seconds=30), NOW) == "Just now"

    def test_single_minute(self):
        assert date_utils.format_time_ago(NOW - timedelta(minutes=1), NOW) == "1 minute ago"

    def test_minutes(self):
        assert date_utils.format_time_ago(NOW - timedelta(minutes=5), NOW) == "5 minutes ago"

    def test_hours(self):
        assert date_utils.format_time_ago(NOW - timedelta(hours=3), NOW) == "3 hours ago"

    def test_yesterday(self):
        assert date_utils.format_time_ago(NOW - timedelta(days=1, hours=2), NOW) == "Yesterday"

    def test_days(self):
        assert date_utils.format_time_ago(NOW - timedelta(days=4), NOW) == "4 days ago"

    def test_older_moments_show_clock_time(self):
        moment = datetime(2026, 10, 1, 21, 5, tzinfo=UTC)

        assert date_utils.format_time_ago(moment, NOW) == "9:05 PM"


@pytest.mark.unit
class TestTimestampHelpers:
    """Tests for parsing, truncation, and labels."""

    def test_parse_timestamp_keeps_offset(self):
        parsed = date_utils.parse_timestamp("2026-10-18T08:30:00Z")

        assert parsed == datetime(2026, 10, 18, 8, 30, tzinfo=UTC)

    def test_parse_timestamp_attaches_zone_to_naive_values(self):
        parsed = date_utils.parse_timestamp("2026-10-18T08:30:00")

        assert parsed.tzinfo is not None

    def test_calendar_day_truncates_datetime(self):
        assert date_utils.calendar_day(datetime(2026, 10, 18, 23, 59, tzinfo=UTC)) == TODAY

    def test_calendar_day_accepts_iso_string(self):
        assert date_utils.calendar_day("2026-10-18T00:00:01Z") == TODAY

    def test_calendar_day_passes_dates_through(self):
        assert date_utils.calendar_day(TODAY) == TODAY

    def test_day_labels(self):
        assert date_utils.format_short_label(date(2026, 10, 5)) == "Oct 5"
        assert date_utils.format_day_label(TODAY) == "October 18, 2026"

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(hours=1), 1),
            (timedelta(days=2), 2),
            (timedelta(days=2, seconds=1), 3),
            (timedelta(0), 0),
        ],
    )
    def test_ceil_days(self, delta, expected):
        assert date_utils.ceil_days(delta) == expected
