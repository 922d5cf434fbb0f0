"""Cloud Firestore adapter - REST client for task storage."""

import logging
from datetime import datetime, timezone
from typing import Iterator

import requests

from smarttodo.core.tasks import NewTask, Task, normalize_changes
from smarttodo.core.validation import ValidationError, format_timestamp
from smarttodo.ports.auth_provider import AuthProvider
from smarttodo.ports.task_repo import TaskNotFoundError, TaskStoreError

from .firebase_auth import AuthenticationError
from .polling import poll_snapshots

logger = logging.getLogger(__name__)

API_BASE = "https://firestore.googleapis.com/v1"
COLLECTION = "tasks"
REQUEST_TIMEOUT = 30

# Task field -> stored document key
DOCUMENT_KEYS = {
    "title": "title",
    "description": "description",
    "date_time": "dateTime",
    "deadline": "deadline",
    "priority": "priority",
    "category": "category",
    "completed": "completed",
}


def encode_value(value) -> dict:
    """Encode a Python value as a Firestore REST value."""
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    return {"stringValue": str(value)}


def decode_value(value: dict):
    """Decode a Firestore REST value into a Python value."""
    if "stringValue" in value:
        return value["stringValue"]
    if "booleanValue" in value:
        return value["booleanValue"]
    if "integerValue" in value:
        return int(value["integerValue"])
    if "timestampValue" in value:
        return value["timestampValue"]
    return None


def encode_fields(document: dict) -> dict:
    return {key: encode_value(value) for key, value in document.items()}


def decode_document(document: dict) -> dict:
    """Flatten a Firestore document into the stored task shape, id included."""
    data = {key: decode_value(value) for key, value in document.get("fields", {}).items()}
    data["id"] = document["name"].rsplit("/", 1)[-1]
    return data


def _document_value(value):
    if isinstance(value, datetime):
        return format_timestamp(value)
    return getattr(value, "value", value)


class FirestoreTaskStore:
    """
    Firestore REST adapter.

    Implements TaskRepository protocol. Tasks live in the top-level `tasks`
    collection, scoped to their owner by the `userId` field. No business
    logic - just I/O.
    """

    def __init__(self, project_id: str, auth: AuthProvider, poll_interval: float = 5.0):
        if not project_id:
            raise ValueError("Missing FIREBASE_PROJECT_ID. Add it to config/smarttodo.conf")
        self.project_id = project_id
        self.auth = auth
        self.poll_interval = poll_interval
        self._session = requests.Session()

    @property
    def documents_url(self) -> str:
        return f"{API_BASE}/projects/{self.project_id}/databases/(default)/documents"

    def _headers(self) -> dict:
        session = self.auth.current_session()
        if not session:
            raise AuthenticationError("Not signed in. Run 'todo login' first.")
        return {"Authorization": f"Bearer {session.id_token}"}

    def _request(self, method: str, url: str, **kwargs) -> dict | list:
        """Make authenticated API request, translating failures to TaskStoreError."""
        logger.debug(f"{method} {url}")
        try:
            resp = self._session.request(
                method, url, headers=self._headers(), timeout=REQUEST_TIMEOUT, **kwargs
            )
        except requests.RequestException as e:
            logger.error(f"Firestore request failed: {e}")
            raise TaskStoreError(f"Network error: {e}") from e

        if resp.status_code == 404:
            raise TaskNotFoundError(f"Task not found: {url.rsplit('/', 1)[-1]}")
        if not resp.ok:
            message = resp.text
            try:
                message = resp.json()["error"]["message"]
            except (ValueError, KeyError, TypeError):
                pass
            logger.warning(f"Firestore returned {resp.status_code}: {message}")
            raise TaskStoreError(f"Firestore error ({resp.status_code}): {message}")

        return resp.json() if resp.content else {}

    def _task_url(self, task_id: str) -> str:
        return f"{self.documents_url}/{COLLECTION}/{task_id}"

    def fetch_all(self, user_id: str) -> list[Task]:
        """Fetch all tasks owned by a user. Malformed documents are skipped."""
        query = {
            "structuredQuery": {
                "from": [{"collectionId": COLLECTION}],
                "where": {
                    "fieldFilter": {
                        "field": {"fieldPath": "userId"},
                        "op": "EQUAL",
                        "value": {"stringValue": user_id},
                    }
                },
            }
        }
        results = self._request("POST", f"{self.documents_url}:runQuery", json=query)

        tasks = []
        for row in results:
            # Empty results still return a row carrying only readTime
            if "document" not in row:
                continue
            data = decode_document(row["document"])
            try:
                tasks.append(Task.from_document(data))
            except ValidationError as e:
                logger.warning(f"Skipping malformed task {data['id']!r}: {e}")
        return tasks

    def add(self, user_id: str, new_task: NewTask) -> Task:
        now = datetime.now(timezone.utc)
        document = new_task.to_task("", user_id, now).to_document()
        del document["id"]

        created = self._request(
            "POST",
            f"{self.documents_url}/{COLLECTION}",
            json={"fields": encode_fields(document)},
        )
        task = Task.from_document(decode_document(created))
        logger.debug(f"Added task {task.id}")
        return task

    def _get_owned(self, task_id: str, user_id: str | None) -> None:
        """Raise TaskNotFoundError unless the task exists and, if given, belongs to user_id."""
        data = decode_document(self._request("GET", self._task_url(task_id)))
        if user_id is not None and data.get("userId") != user_id:
            raise TaskNotFoundError(f"Task not found: {task_id}")

    def update(self, task_id: str, *, user_id: str | None = None, **changes) -> None:
        normalized = normalize_changes(changes)
        if user_id is not None:
            self._get_owned(task_id, user_id)
        document = {DOCUMENT_KEYS[key]: _document_value(value) for key, value in normalized.items()}
        document["updatedAt"] = format_timestamp(datetime.now(timezone.utc))

        params = [("updateMask.fieldPaths", key) for key in document]
        params.append(("currentDocument.exists", "true"))
        self._request(
            "PATCH",
            self._task_url(task_id),
            params=params,
            json={"fields": encode_fields(document)},
        )
        logger.debug(f"Updated task {task_id}: {sorted(changes)}")

    def delete(self, task_id: str, *, user_id: str | None = None) -> None:
        # Firestore deletes are idempotent, so check existence first
        self._get_owned(task_id, user_id)
        self._request("DELETE", self._task_url(task_id))
        logger.debug(f"Deleted task {task_id}")

    def watch(self, user_id: str, poll_interval: float | None = None) -> Iterator[list[Task]]:
        return poll_snapshots(lambda: self.fetch_all(user_id), poll_interval or self.poll_interval)
