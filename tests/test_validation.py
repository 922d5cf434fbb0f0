"""Tests for data-entry validation."""

from datetime import datetime, timedelta, timezone

import pytest

from smarttodo.core.validation import (
    ValidationError,
    format_timestamp,
    parse_datetime,
    validate_deadline_after_start,
    validate_email,
    validate_future_date,
    validate_password,
    validate_password_match,
    validate_task_description,
    validate_task_title,
)


class TestParseDatetime:
    def test_zulu_suffix(self):
        assert parse_datetime("2026-02-20T10:30:00.000Z") == datetime(2026, 2, 20, 10, 30, tzinfo=timezone.utc)

    def test_offset_preserved(self):
        parsed = parse_datetime("2026-02-20T10:30:00-05:00")
        assert parsed.utcoffset() == timedelta(hours=-5)

    def test_naive_taken_as_utc(self):
        assert parse_datetime("2026-02-20T10:30").tzinfo == timezone.utc

    def test_datetime_passthrough(self):
        when = datetime(2026, 2, 20, tzinfo=timezone.utc)
        assert parse_datetime(when) is when

    @pytest.mark.parametrize("value", ["", "tomorrow", "2026-13-01", None])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_datetime(value)

    def test_format_timestamp(self):
        when = datetime(2026, 2, 20, 10, 30, 5, 123456, tzinfo=timezone.utc)
        assert format_timestamp(when) == "2026-02-20T10:30:05.123Z"


class TestAccountValidators:
    def test_email(self):
        assert validate_email("") == "Email is required"
        assert validate_email("not-an-email") == "Please enter a valid email address"
        assert validate_email(" user@example.com ") is None

    def test_password(self):
        assert validate_password("") == "Password is required"
        assert validate_password("12345") == "Password must be at least 6 characters"
        assert validate_password("123456") is None

    def test_password_match(self):
        assert validate_password_match("secret1", "") == "Please confirm your password"
        assert validate_password_match("secret1", "secret2") == "Passwords do not match"
        assert validate_password_match("secret1", "secret1") is None


class TestTaskValidators:
    def test_title(self):
        assert validate_task_title("   ") == "Title is required"
        assert validate_task_title("x" * 101) == "Title must be 100 characters or less"
        assert validate_task_title("x" * 100) is None

    def test_description_optional(self):
        assert validate_task_description("") is None
        assert validate_task_description("x" * 501) == "Description must be 500 characters or less"

    def test_future_date(self):
        now = datetime(2026, 2, 20, tzinfo=timezone.utc)
        assert validate_future_date(None, now) == "Date is required"
        assert validate_future_date("2026-02-19T00:00:00Z", now) == "Date cannot be in the past"
        assert validate_future_date("2026-02-21T00:00:00Z", now) is None

    def test_deadline_after_start(self):
        start = "2026-02-20T09:00:00Z"
        assert validate_deadline_after_start(start, "") == "Deadline is required"
        assert validate_deadline_after_start(start, start) == "Deadline must be after start date"
        assert validate_deadline_after_start(start, "2026-02-20T10:00:00Z") is None
        assert validate_deadline_after_start(start, "soon") == "Please enter a valid date"
