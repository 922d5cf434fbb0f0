"""Functional core - pure business logic with no I/O."""

from .tasks import (
    Category,
    NewTask,
    Priority,
    Task,
    TaskCounts,
    TaskFilter,
    filter_tasks,
    get_task_counts,
    score_task,
    sort_and_filter_tasks,
    sort_by_priority,
)
from .task_state import TaskState
from .validation import ValidationError

__all__ = [
    # Tasks
    "Category",
    "NewTask",
    "Priority",
    "Task",
    "TaskCounts",
    "TaskFilter",
    "filter_tasks",
    "get_task_counts",
    "score_task",
    "sort_and_filter_tasks",
    "sort_by_priority",
    # State
    "TaskState",
    # Validation
    "ValidationError",
]
