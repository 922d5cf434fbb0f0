"""Task repository interface."""

from typing import Iterator, Protocol

from smarttodo.core.tasks import NewTask, Task


class TaskStoreError(Exception):
    """Raised when the backing task store fails."""

    pass


class TaskNotFoundError(TaskStoreError):
    """Raised when a task id does not exist in the store."""

    pass


class TaskRepository(Protocol):
    """Interface for reading and writing a user's tasks on any backend."""

    def fetch_all(self, user_id: str) -> list[Task]:
        """Fetch all tasks owned by a user."""
        ...

    def add(self, user_id: str, new_task: NewTask) -> Task:
        """Create a task. The store assigns id and timestamps."""
        ...

    def update(self, task_id: str, *, user_id: str | None = None, **changes) -> None:
        """Apply a partial update to a task. With user_id, only that user's task matches."""
        ...

    def delete(self, task_id: str, *, user_id: str | None = None) -> None:
        """Remove a task. With user_id, only that user's task matches."""
        ...

    def watch(self, user_id: str, poll_interval: float | None = None) -> Iterator[list[Task]]:
        """Yield the user's task list each time it changes."""
        ...
