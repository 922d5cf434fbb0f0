"""Shared workflow layer between the CLI and the stores.

Resolves adapters from config, validates input at the data-entry boundary,
and keeps an optimistic client-side TaskState in sync with the store.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator

from .adapters.file_store import FileTaskStore
from .adapters.firebase_auth import AuthenticationError, FirebaseAuthAdapter, LocalAuthAdapter
from .adapters.firestore import FirestoreTaskStore
from .config import Config, Session
from .core import task_state
from .core.tasks import (
    Category,
    NewTask,
    Priority,
    Task,
    TaskCounts,
    TaskFilter,
    apply_changes,
    get_task_counts,
    sort_and_filter_tasks,
)
from .core.validation import (
    ValidationError,
    parse_datetime,
    validate_deadline_after_start,
    validate_email,
    validate_password,
    validate_password_match,
    validate_task_description,
    validate_task_title,
)
from .ports.auth_provider import AuthProvider
from .ports.task_repo import TaskRepository, TaskStoreError

logger = logging.getLogger(__name__)


def get_auth(config: Config) -> AuthProvider:
    """Resolve the auth provider for the configured backend."""
    if config.store_backend == "firestore":
        return FirebaseAuthAdapter(config.firebase_api_key)
    return LocalAuthAdapter()


def get_repository(config: Config, auth: AuthProvider) -> TaskRepository:
    """Resolve the task store for the configured backend."""
    if config.store_backend == "firestore":
        return FirestoreTaskStore(config.firebase_project_id, auth, config.poll_interval)
    return FileTaskStore(config.task_file, config.poll_interval)


def _check(*errors: str | None) -> None:
    """Raise the first validation error, if any."""
    for error in errors:
        if error:
            raise ValidationError(error)


def register(auth: AuthProvider, email: str, password: str, confirm_password: str) -> Session:
    _check(
        validate_email(email),
        validate_password(password),
        validate_password_match(password, confirm_password),
    )
    return auth.register(email, password)


def login(auth: AuthProvider, email: str, password: str) -> Session:
    _check(validate_email(email), validate_password(password))
    return auth.sign_in(email, password)


def build_new_task(
    title: str,
    deadline: str | datetime,
    start: str | datetime | None = None,
    priority: str | Priority = Priority.MEDIUM,
    category: str | Category | None = Category.OTHER,
    description: str = "",
    now: datetime | None = None,
) -> NewTask:
    """
    Validate user input and build a creation payload.

    The start time defaults to now. Raises ValidationError on the first problem.
    """
    now = now or datetime.now(timezone.utc)
    start = start or now
    _check(
        validate_task_title(title),
        validate_task_description(description),
        validate_deadline_after_start(start, deadline),
    )
    return NewTask(
        title=title.strip(),
        deadline=parse_datetime(deadline),
        priority=Priority.parse(priority),
        date_time=parse_datetime(start),
        description=description.strip() if description else "",
        category=Category.parse(category),
    )


@dataclass(frozen=True)
class TaskView:
    """What the list screen renders: ranked tasks plus badge counts."""

    tasks: list[Task]
    counts: TaskCounts
    selection: TaskFilter
    now: datetime


class TaskSession:
    """
    Signed-in user's task list.

    Store calls go through the repository; on success the local state is
    updated immediately so the view reflects the change before the next
    snapshot arrives.
    """

    def __init__(self, repo: TaskRepository, auth: AuthProvider):
        self.repo = repo
        self.auth = auth
        self.state = task_state.INITIAL_STATE

    def _require_user(self, action: str) -> str:
        session = self.auth.current_session()
        if not session:
            raise AuthenticationError(f"You must be logged in to {action}")
        return session.user_id

    def _fail(self, error: Exception) -> None:
        self.state = task_state.tasks_error(self.state, str(error))

    def refresh(self) -> task_state.TaskState:
        """Load the full task list from the store."""
        user_id = self._require_user("view tasks")
        self.state = task_state.tasks_loading(self.state)
        try:
            tasks = self.repo.fetch_all(user_id)
        except TaskStoreError as e:
            self._fail(e)
            raise
        self.state = task_state.tasks_loaded(self.state, tasks)
        return self.state

    def view(self, selection: TaskFilter | str | None = TaskFilter.ALL, now: datetime | None = None) -> TaskView:
        """Rank the current state for display. Re-derived on every call."""
        now = now or datetime.now(timezone.utc)
        tasks = list(self.state.tasks)
        return TaskView(
            tasks=sort_and_filter_tasks(tasks, selection, now),
            counts=get_task_counts(tasks),
            selection=TaskFilter.parse(selection),
            now=now,
        )

    def add_task(self, new_task: NewTask) -> Task:
        user_id = self._require_user("add tasks")
        try:
            task = self.repo.add(user_id, new_task)
        except TaskStoreError as e:
            self._fail(e)
            raise
        self.state = task_state.task_added(self.state, task)
        logger.info(f"Added task {task.id}: {task.title}")
        return task

    def update_task(self, task_id: str, **changes) -> None:
        user_id = self._require_user("update tasks")
        try:
            self.repo.update(task_id, user_id=user_id, **changes)
        except TaskStoreError as e:
            self._fail(e)
            raise
        existing = task_state.find_task(self.state, task_id)
        if existing:
            updated = apply_changes(existing, changes, datetime.now(timezone.utc))
            self.state = task_state.task_updated(self.state, updated)

    def toggle_completion(self, task_id: str, completed: bool) -> None:
        self.update_task(task_id, completed=completed)

    def delete_task(self, task_id: str) -> None:
        user_id = self._require_user("delete tasks")
        try:
            self.repo.delete(task_id, user_id=user_id)
        except TaskStoreError as e:
            self._fail(e)
            raise
        self.state = task_state.task_deleted(self.state, task_id)
        logger.info(f"Deleted task {task_id}")

    def watch(self, poll_interval: float | None = None) -> Iterator[task_state.TaskState]:
        """Yield the updated state every time the store's snapshot changes."""
        user_id = self._require_user("view tasks")
        try:
            for tasks in self.repo.watch(user_id, poll_interval):
                self.state = task_state.tasks_loaded(self.state, tasks)
                yield self.state
        except TaskStoreError as e:
            logger.error(f"Task subscription error: {e}")
            self._fail(e)
            raise
