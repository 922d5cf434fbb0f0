"""File-based task storage adapter."""

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from smarttodo.core.tasks import NewTask, Task, apply_changes
from smarttodo.core.validation import ValidationError
from smarttodo.ports.task_repo import TaskNotFoundError, TaskStoreError

from .polling import poll_snapshots

logger = logging.getLogger(__name__)


class FileTaskStore:
    """
    Local JSON task storage.

    Implements TaskRepository protocol. All users share one file; each
    document carries its userId like the remote store.
    """

    def __init__(self, path: Path | str, poll_interval: float = 5.0):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.poll_interval = poll_interval

    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            raise TaskStoreError(f"Corrupt task file {self.path}: {e}") from e
        if not isinstance(data, list):
            raise TaskStoreError(f"Corrupt task file {self.path}: expected a list")
        return data

    def _write(self, documents: list[dict]) -> None:
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(documents, indent=2))
        tmp.replace(self.path)

    def fetch_all(self, user_id: str) -> list[Task]:
        """Fetch all valid tasks for a user. Malformed documents are skipped."""
        tasks = []
        for doc in self._read():
            if doc.get("userId") != user_id:
                continue
            try:
                tasks.append(Task.from_document(doc))
            except ValidationError as e:
                logger.warning(f"Skipping malformed task {doc.get('id')!r}: {e}")
        return tasks

    def add(self, user_id: str, new_task: NewTask) -> Task:
        document = new_task.to_task(uuid.uuid4().hex, user_id, datetime.now(timezone.utc)).to_document()
        documents = self._read()
        documents.append(document)
        self._write(documents)
        logger.debug(f"Added task {document['id']}")
        # Stored timestamps are truncated to milliseconds
        return Task.from_document(document)

    @staticmethod
    def _owned(doc: dict, task_id: str, user_id: str | None) -> bool:
        return doc.get("id") == task_id and (user_id is None or doc.get("userId") == user_id)

    def update(self, task_id: str, *, user_id: str | None = None, **changes) -> None:
        documents = self._read()
        for i, doc in enumerate(documents):
            if self._owned(doc, task_id, user_id):
                task = apply_changes(Task.from_document(doc), changes, datetime.now(timezone.utc))
                documents[i] = task.to_document()
                self._write(documents)
                logger.debug(f"Updated task {task_id}: {sorted(changes)}")
                return
        raise TaskNotFoundError(f"Task not found: {task_id}")

    def delete(self, task_id: str, *, user_id: str | None = None) -> None:
        documents = self._read()
        remaining = [d for d in documents if not self._owned(d, task_id, user_id)]
        if len(remaining) == len(documents):
            raise TaskNotFoundError(f"Task not found: {task_id}")
        self._write(remaining)
        logger.debug(f"Deleted task {task_id}")

    def watch(self, user_id: str, poll_interval: float | None = None) -> Iterator[list[Task]]:
        return poll_snapshots(lambda: self.fetch_all(user_id), poll_interval or self.poll_interval)

