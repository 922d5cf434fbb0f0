"""Data-entry validation - the boundary in front of the ranking core.

Form validators return an error message, or None when the value is valid.
Parsers raise ValidationError so malformed values never reach the core.
"""

import re
from datetime import datetime, timezone

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_PASSWORD_LENGTH = 6
MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


class ValidationError(ValueError):
    """Raised when input cannot be accepted at the data-entry boundary."""

    pass


def parse_datetime(value: str | datetime) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware datetime.

    Naive values are taken as UTC. A trailing "Z" is accepted.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        if not value or not isinstance(value, str):
            raise ValidationError(f"Invalid timestamp: {value!r}")
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid timestamp: {value!r}") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """Serialize an aware datetime as an ISO 8601 UTC string with millisecond precision."""
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


# ============== Form Validators ==============


def validate_email(email: str) -> str | None:
    if not email or not email.strip():
        return "Email is required"
    if not EMAIL_RE.match(email.strip()):
        return "Please enter a valid email address"
    return None


def validate_password(password: str) -> str | None:
    if not password:
        return "Password is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


def validate_password_match(password: str, confirm_password: str) -> str | None:
    """Check the registration confirmation field."""
    if not confirm_password:
        return "Please confirm your password"
    if password != confirm_password:
        return "Passwords do not match"
    return None


def validate_task_title(title: str) -> str | None:
    if not title or not title.strip():
        return "Title is required"
    if len(title.strip()) > MAX_TITLE_LENGTH:
        return f"Title must be {MAX_TITLE_LENGTH} characters or less"
    return None


def validate_task_description(description: str) -> str | None:
    """Description is optional; only its length is checked."""
    if description and len(description) > MAX_DESCRIPTION_LENGTH:
        return f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less"
    return None


def validate_future_date(value: str | datetime | None, now: datetime | None = None) -> str | None:
    if not value:
        return "Date is required"
    try:
        when = parse_datetime(value)
    except ValidationError:
        return "Please enter a valid date"
    now = now or datetime.now(timezone.utc)
    if when < now:
        return "Date cannot be in the past"
    return None


def validate_deadline_after_start(
    start: str | datetime,
    deadline: str | datetime | None,
) -> str | None:
    if not deadline:
        return "Deadline is required"
    try:
        start_at = parse_datetime(start)
        deadline_at = parse_datetime(deadline)
    except ValidationError:
        return "Please enter a valid date"
    if deadline_at <= start_at:
        return "Deadline must be after start date"
    return None
