"""Pure task domain logic - no I/O dependencies.

Ranking combines priority weight with deadline urgency so the most important,
most time-sensitive tasks come first. Completed tasks always sink to the bottom.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from .dates import as_utc, hours_until_deadline, is_overdue
from .validation import ValidationError, format_timestamp, parse_datetime


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, value: "str | Priority") -> "Priority":
        """Parse a stored or user-entered priority. Raises ValidationError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid priority: {value!r}") from None


class Category(Enum):
    WORK = "work"
    PERSONAL = "personal"
    STUDY = "study"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "str | Category | None") -> "Category":
        if isinstance(value, cls):
            return value
        if not value:
            return cls.OTHER
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid category: {value!r}") from None


class TaskFilter(Enum):
    """Which tasks the list shows."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: "str | TaskFilter | None") -> "TaskFilter":
        """Unrecognized selections fall back to ALL."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.ALL


@dataclass(frozen=True)
class Task:
    """A user-owned task. Treated as an immutable value by the ranking core."""

    id: str
    title: str
    priority: Priority
    deadline: datetime
    completed: bool = False
    user_id: str = ""
    description: str = ""
    date_time: datetime | None = None
    category: Category = Category.OTHER
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        for name in ("deadline", "date_time", "created_at", "updated_at"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, as_utc(value))

    def hours_remaining(self, now: datetime | None = None) -> float:
        """Hours until deadline (negative if overdue)."""
        return hours_until_deadline(self.deadline, now)

    def is_overdue(self, now: datetime | None = None) -> bool:
        return is_overdue(self.deadline, self.completed, now)

    @classmethod
    def from_document(cls, data: dict, task_id: str | None = None) -> "Task":
        """
        Create Task from a stored document.

        Raises ValidationError for an unknown priority or an unparseable deadline.
        """
        try:
            ident = task_id or data["id"]
            title = data["title"]
            deadline = data["deadline"]
        except KeyError as e:
            raise ValidationError(f"Task document missing field: {e.args[0]}") from None

        return cls(
            id=ident,
            title=title,
            priority=Priority.parse(data.get("priority", "")),
            deadline=parse_datetime(deadline),
            completed=bool(data.get("completed", False)),
            user_id=data.get("userId", ""),
            description=data.get("description", "") or "",
            date_time=_optional_datetime(data.get("dateTime")),
            category=Category.parse(data.get("category")),
            created_at=_optional_datetime(data.get("createdAt")),
            updated_at=_optional_datetime(data.get("updatedAt")),
        )

    def to_document(self) -> dict:
        """Serialize to the stored camelCase shape (dates as ISO 8601 strings)."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "description": self.description,
            "dateTime": format_timestamp(self.date_time) if self.date_time else "",
            "deadline": format_timestamp(self.deadline),
            "priority": self.priority.value,
            "category": self.category.value,
            "completed": self.completed,
            "createdAt": format_timestamp(self.created_at) if self.created_at else "",
            "updatedAt": format_timestamp(self.updated_at) if self.updated_at else "",
        }


@dataclass(frozen=True)
class NewTask:
    """Task creation payload - everything except store-generated fields."""

    title: str
    deadline: datetime
    priority: Priority = Priority.MEDIUM
    date_time: datetime | None = None
    description: str = ""
    category: Category = Category.OTHER
    completed: bool = False

    def to_task(self, task_id: str, user_id: str, created_at: datetime) -> Task:
        return Task(
            id=task_id,
            title=self.title.strip(),
            priority=self.priority,
            deadline=self.deadline,
            completed=self.completed,
            user_id=user_id,
            description=self.description,
            date_time=self.date_time or created_at,
            category=self.category,
            created_at=created_at,
            updated_at=created_at,
        )


def _optional_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return parse_datetime(value)


UPDATABLE_FIELDS = ("title", "description", "date_time", "deadline", "priority", "category", "completed")


def normalize_changes(changes: dict) -> dict:
    """
    Validate a partial update, parsing values into their domain types.

    Raises ValidationError for unknown fields or invalid values.
    """
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    normalized = dict(changes)
    if "priority" in normalized:
        normalized["priority"] = Priority.parse(normalized["priority"])
    if "category" in normalized:
        normalized["category"] = Category.parse(normalized["category"])
    for key in ("deadline", "date_time"):
        if key in normalized:
            normalized[key] = parse_datetime(normalized[key])
    if "completed" in normalized:
        normalized["completed"] = bool(normalized["completed"])
    return normalized


def apply_changes(task: Task, changes: dict, updated_at: datetime) -> Task:
    """Return a copy of task with a partial update merged in."""
    return replace(task, **normalize_changes(changes), updated_at=updated_at)


# ============== Ranking ==============

COMPLETED_SCORE = -1000
MAX_HOURS_PENALTY = 1000

PRIORITY_WEIGHTS = {
    Priority.HIGH: 100,
    Priority.MEDIUM: 50,
    Priority.LOW: 10,
}

# (hours remaining below, bonus) - first match wins
URGENCY_BONUSES = (
    (0, 1000),
    (24, 500),
    (48, 200),
    (168, 50),
)


def urgency_bonus(hours_remaining: float) -> int:
    """Step bonus for deadline proximity. Overdue gets the largest."""
    for limit, bonus in URGENCY_BONUSES:
        if hours_remaining < limit:
            return bonus
    return 0


def _raw_score(task: Task, now: datetime) -> float:
    if task.completed:
        return COMPLETED_SCORE

    hours = task.hours_remaining(now)
    score = PRIORITY_WEIGHTS[task.priority] + urgency_bonus(hours)
    return score - min(hours, MAX_HOURS_PENALTY)


def score_task(task: Task, now: datetime | None = None) -> int:
    """
    Urgency/importance score - higher sorts first.

    Priority weight + urgency bonus - min(hours remaining, 1000), floored.
    Completed tasks get COMPLETED_SCORE regardless of priority or deadline.

    Pure function - no I/O.
    """
    return math.floor(_raw_score(task, now or datetime.now(timezone.utc)))


def sort_by_priority(tasks: Iterable[Task], now: datetime | None = None) -> list[Task]:
    """
    Sort tasks: incomplete first, then score descending, then deadline ascending.

    Compares unfloored scores, so two tasks whose scores floor to the same
    integer still rank by their exact values. Stable - full ties keep their
    input order. Pure function - no I/O.
    """
    now = now or datetime.now(timezone.utc)

    def sort_key(t: Task) -> tuple[bool, float, datetime]:
        # Negative score for descending sort
        return (t.completed, -_raw_score(t, now), t.deadline)

    return sorted(tasks, key=sort_key)


def filter_tasks(tasks: Iterable[Task], selection: "TaskFilter | str | None") -> list[Task]:
    """
    Filter tasks by completion status, preserving order.

    Unrecognized selections behave like ALL. Pure function - no I/O.
    """
    match TaskFilter.parse(selection):
        case TaskFilter.ACTIVE:
            return [t for t in tasks if not t.completed]
        case TaskFilter.COMPLETED:
            return [t for t in tasks if t.completed]
        case _:
            return list(tasks)


def sort_and_filter_tasks(
    tasks: Iterable[Task],
    selection: "TaskFilter | str | None" = TaskFilter.ALL,
    now: datetime | None = None,
) -> list[Task]:
    """Filter, then rank. This is what the task list displays."""
    return sort_by_priority(filter_tasks(tasks, selection), now)


@dataclass(frozen=True)
class TaskCounts:
    """Per-filter badge counts. all == active + completed."""

    all: int
    active: int
    completed: int

    def for_filter(self, selection: "TaskFilter | str | None") -> int:
        match TaskFilter.parse(selection):
            case TaskFilter.ACTIVE:
                return self.active
            case TaskFilter.COMPLETED:
                return self.completed
            case _:
                return self.all

    def as_dict(self) -> dict[str, int]:
        return {"all": self.all, "active": self.active, "completed": self.completed}


def get_task_counts(tasks: Iterable[Task]) -> TaskCounts:
    """Count tasks by completion status over the unfiltered collection."""
    tasks = list(tasks)
    completed = sum(1 for t in tasks if t.completed)
    return TaskCounts(all=len(tasks), active=len(tasks) - completed, completed=completed)
