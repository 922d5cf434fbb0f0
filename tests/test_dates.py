"""Tests for date helpers."""

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from smarttodo.core.dates import (
    format_date,
    format_datetime,
    hours_until_deadline,
    is_overdue,
    is_past,
    time_remaining_text,
)


@pytest.fixture
def now():
    return datetime(2026, 2, 20, 12, 0, tzinfo=timezone.utc)


class TestHoursUntilDeadline:
    def test_future(self, now):
        assert hours_until_deadline(now + timedelta(hours=5), now) == 5

    def test_past_is_negative(self, now):
        assert hours_until_deadline(now - timedelta(minutes=90), now) == -1.5


class TestOverdue:
    def test_past_deadline(self, now):
        assert is_past(now - timedelta(seconds=1), now) is True
        assert is_overdue(now - timedelta(hours=1), completed=False, now=now) is True

    def test_completed_never_overdue(self, now):
        assert is_overdue(now - timedelta(days=3), completed=True, now=now) is False

    def test_future_deadline(self, now):
        assert is_overdue(now + timedelta(hours=1), completed=False, now=now) is False


class TestFormatting:
    def test_format_date(self):
        assert format_date(datetime(2026, 2, 20, 10, 30, tzinfo=timezone.utc)) == "Feb 20, 2026"

    def test_format_datetime_morning(self):
        when = datetime(2026, 2, 20, 10, 30, tzinfo=timezone.utc)
        assert format_datetime(when) == "Feb 20, 2026 at 10:30 AM"

    def test_format_datetime_afternoon(self):
        when = datetime(2026, 2, 5, 15, 5, tzinfo=timezone.utc)
        assert format_datetime(when) == "Feb 5, 2026 at 3:05 PM"

    def test_midnight_and_noon(self):
        assert format_datetime(datetime(2026, 1, 1, 0, 0, tzinfo=timezone.utc)).endswith("12:00 AM")
        assert format_datetime(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)).endswith("12:00 PM")

    def test_converts_to_display_zone(self):
        when = datetime(2026, 2, 20, 15, 30, tzinfo=timezone.utc)
        assert format_datetime(when, ZoneInfo("America/Toronto")) == "Feb 20, 2026 at 10:30 AM"


class TestTimeRemainingText:
    def test_overdue(self, now):
        assert time_remaining_text(now - timedelta(hours=1), now) == "Overdue"

    def test_minutes(self, now):
        assert time_remaining_text(now + timedelta(minutes=30), now) == "30 mins left"

    def test_single_minute(self, now):
        assert time_remaining_text(now + timedelta(seconds=90), now) == "1 min left"

    def test_hours(self, now):
        assert time_remaining_text(now + timedelta(hours=5, minutes=40), now) == "5 hours left"

    def test_single_hour(self, now):
        assert time_remaining_text(now + timedelta(hours=1), now) == "1 hour left"

    def test_days(self, now):
        assert time_remaining_text(now + timedelta(days=3, hours=2), now) == "3 days left"
        assert time_remaining_text(now + timedelta(hours=25), now) == "1 day left"
