"""Pure formatting of the task list for the terminal - no I/O dependencies."""

from datetime import datetime, timezone, tzinfo

from .dates import format_datetime, time_remaining_text
from .tasks import Priority, Task, TaskCounts, TaskFilter

PRIORITY_MARKERS = {
    Priority.HIGH: "!!!",
    Priority.MEDIUM: "!! ",
    Priority.LOW: "!  ",
}

FILTER_LABELS = {
    TaskFilter.ALL: "All",
    TaskFilter.ACTIVE: "Active",
    TaskFilter.COMPLETED: "Completed",
}


def format_task_line(task: Task, now: datetime | None = None, tz: tzinfo | None = None) -> str:
    """
    Format a single task for the list view.

    Pure function - no I/O.
    """
    now = now or datetime.now(timezone.utc)
    check = "x" if task.completed else " "

    if task.completed:
        urgency = "done"
    elif task.is_overdue(now):
        urgency = "OVERDUE"
    else:
        urgency = time_remaining_text(task.deadline, now)

    due = format_datetime(task.deadline, tz)
    return (
        f"[{check}] [{PRIORITY_MARKERS[task.priority]}] {task.title} "
        f"({urgency}, due {due}, {task.category.value}) #{task.id}"
    )


def format_filter_bar(counts: TaskCounts, selected: "TaskFilter | str | None") -> str:
    """Filter tabs with badge counts; the selected tab is bracketed."""
    selected = TaskFilter.parse(selected)
    tabs = []
    for selection, label in FILTER_LABELS.items():
        tab = f"{label} ({counts.for_filter(selection)})"
        tabs.append(f"[{tab}]" if selection is selected else tab)
    return " | ".join(tabs)


def empty_message(selection: "TaskFilter | str | None") -> str:
    match TaskFilter.parse(selection):
        case TaskFilter.ACTIVE:
            return "All caught up! You have no active tasks."
        case TaskFilter.COMPLETED:
            return "No completed tasks yet. Complete some tasks to see them here."
        case _:
            return "No tasks yet. Run 'todo add' to create your first task."


def format_task_list(
    tasks: list[Task],
    counts: TaskCounts,
    selection: "TaskFilter | str | None",
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Filter bar followed by the already-ranked tasks."""
    now = now or datetime.now(timezone.utc)
    body = "\n".join(format_task_line(t, now, tz) for t in tasks) or empty_message(selection)
    return f"{format_filter_bar(counts, selection)}\n\n{body}"
