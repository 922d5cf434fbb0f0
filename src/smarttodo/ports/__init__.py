"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskNotFoundError, TaskRepository, TaskStoreError
from .auth_provider import AuthProvider

__all__ = [
    "TaskRepository",
    "TaskStoreError",
    "TaskNotFoundError",
    "AuthProvider",
]
