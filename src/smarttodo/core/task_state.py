"""Client-side task state with optimistic-update transitions.

Pure functions over a frozen TaskState. The ranking core never sees this
state - callers pass `state.tasks` into it.
"""

from dataclasses import dataclass, field, replace

from .tasks import Task


@dataclass(frozen=True)
class TaskState:
    """Snapshot of the signed-in user's tasks."""

    tasks: tuple[Task, ...] = field(default_factory=tuple)
    loading: bool = False
    error: str | None = None


INITIAL_STATE = TaskState()


def tasks_loading(state: TaskState) -> TaskState:
    return replace(state, loading=True, error=None)


def tasks_loaded(state: TaskState, tasks: list[Task]) -> TaskState:
    """A full snapshot from the store replaces the whole list."""
    return TaskState(tasks=tuple(tasks), loading=False, error=None)


def tasks_error(state: TaskState, message: str) -> TaskState:
    return replace(state, loading=False, error=message)


def task_added(state: TaskState, task: Task) -> TaskState:
    # The store snapshot may already contain it
    if any(t.id == task.id for t in state.tasks):
        return task_updated(state, task)
    return replace(state, tasks=state.tasks + (task,), error=None)


def task_updated(state: TaskState, task: Task) -> TaskState:
    return replace(
        state,
        tasks=tuple(task if t.id == task.id else t for t in state.tasks),
        error=None,
    )


def task_deleted(state: TaskState, task_id: str) -> TaskState:
    return replace(state, tasks=tuple(t for t in state.tasks if t.id != task_id), error=None)


def find_task(state: TaskState, task_id: str) -> Task | None:
    return next((t for t in state.tasks if t.id == task_id), None)
