"""Pure date helpers for deadlines - no I/O dependencies.

Every function takes `now` explicitly (defaulting to the current UTC time) so
callers can sample the clock once and reuse it.
"""

from datetime import datetime, timezone, tzinfo

SECONDS_PER_HOUR = 3600


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def as_utc(when: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are returned unchanged."""
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when


def hours_until_deadline(deadline: datetime, now: datetime | None = None) -> float:
    """Hours remaining until deadline (negative if overdue)."""
    return (deadline - _now(now)).total_seconds() / SECONDS_PER_HOUR


def is_past(when: datetime, now: datetime | None = None) -> bool:
    return when < _now(now)


def is_overdue(deadline: datetime, completed: bool, now: datetime | None = None) -> bool:
    """Completed tasks are never overdue."""
    if completed:
        return False
    return is_past(deadline, now)


def _localize(when: datetime, tz: tzinfo | None) -> datetime:
    return when.astimezone(tz) if tz else when


def format_date(when: datetime, tz: tzinfo | None = None) -> str:
    """Format as e.g. "Feb 20, 2026"."""
    local = _localize(when, tz)
    return f"{local.strftime('%b')} {local.day}, {local.year}"


def format_datetime(when: datetime, tz: tzinfo | None = None) -> str:
    """Format as e.g. "Feb 20, 2026 at 10:30 AM"."""
    local = _localize(when, tz)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{format_date(local)} at {hour}:{local.minute:02d} {meridiem}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} left"


def time_remaining_text(deadline: datetime, now: datetime | None = None) -> str:
    """
    Human-readable time left before a deadline.

    "Overdue", "N min(s) left", "N hour(s) left" or "N day(s) left".
    """
    hours = hours_until_deadline(deadline, now)

    if hours < 0:
        return "Overdue"
    if hours < 1:
        return _plural(int(hours * 60), "min")
    if hours < 24:
        return _plural(int(hours), "hour")
    return _plural(int(hours // 24), "day")
