"""Tests for the shared workflow layer."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from smarttodo.adapters.file_store import FileTaskStore
from smarttodo.adapters.firebase_auth import AuthenticationError, FirebaseAuthAdapter, LocalAuthAdapter
from smarttodo.adapters.firestore import FirestoreTaskStore
from smarttodo.config import Config
from smarttodo.core.tasks import Category, NewTask, Priority, TaskFilter
from smarttodo.core.validation import ValidationError
from smarttodo.ports.task_repo import TaskNotFoundError, TaskStoreError
from smarttodo.workflows import (
    TaskSession,
    build_new_task,
    get_auth,
    get_repository,
    login,
    register,
)


@pytest.fixture
def now():
    return datetime(2026, 2, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def auth(tmp_path):
    auth = LocalAuthAdapter(tmp_path / ".session.json")
    auth.sign_in("me@example.com", "")
    return auth


@pytest.fixture
def session(tmp_path, auth):
    return TaskSession(FileTaskStore(tmp_path / "tasks.json"), auth)


def new_task(title, hours, priority=Priority.MEDIUM, base=None):
    base = base or datetime.now(timezone.utc)
    return NewTask(title=title, deadline=base + timedelta(hours=hours), priority=priority)


class TestResolveAdapters:
    def test_file_backend(self, tmp_path):
        config = Config(store_path=str(tmp_path / "t.json"))
        auth = get_auth(config)
        assert isinstance(auth, LocalAuthAdapter)
        assert isinstance(get_repository(config, auth), FileTaskStore)

    def test_firestore_backend(self):
        config = Config(store_backend="firestore", firebase_api_key="key", firebase_project_id="proj")
        auth = get_auth(config)
        assert isinstance(auth, FirebaseAuthAdapter)
        assert isinstance(get_repository(config, auth), FirestoreTaskStore)


class TestAccountWorkflows:
    def test_register_validates_before_calling_provider(self):
        auth = MagicMock()
        with pytest.raises(ValidationError, match="Passwords do not match"):
            register(auth, "a@b.com", "secret1", "secret2")
        auth.register.assert_not_called()

    def test_register(self):
        auth = MagicMock()
        register(auth, "a@b.com", "secret1", "secret1")
        auth.register.assert_called_once_with("a@b.com", "secret1")

    def test_login_rejects_bad_email(self):
        auth = MagicMock()
        with pytest.raises(ValidationError, match="valid email"):
            login(auth, "nope", "secret1")
        auth.sign_in.assert_not_called()


class TestBuildNewTask:
    def test_valid(self, now):
        task = build_new_task(
            "  Ship release ",
            "2026-02-21T09:00:00Z",
            priority="high",
            category="work",
            description="v2.0",
            now=now,
        )
        assert task.title == "Ship release"
        assert task.priority is Priority.HIGH
        assert task.category is Category.WORK
        assert task.date_time == now

    def test_deadline_before_start(self, now):
        with pytest.raises(ValidationError, match="after start"):
            build_new_task("Late", "2026-02-20T11:00:00Z", now=now)

    def test_title_required(self, now):
        with pytest.raises(ValidationError, match="Title is required"):
            build_new_task("", "2026-02-21T09:00:00Z", now=now)

    def test_invalid_priority(self, now):
        with pytest.raises(ValidationError, match="priority"):
            build_new_task("Thing", "2026-02-21T09:00:00Z", priority="critical", now=now)


class TestTaskSession:
    def test_requires_login(self, tmp_path):
        session = TaskSession(FileTaskStore(tmp_path / "tasks.json"), LocalAuthAdapter(tmp_path / "none.json"))
        with pytest.raises(AuthenticationError, match="You must be logged in to add tasks"):
            session.add_task(new_task("x", 5))

    def test_add_updates_state_immediately(self, session):
        task = session.add_task(new_task("Write tests", 5))
        assert session.state.tasks == (task,)

    def test_view_ranks_and_counts(self, session):
        now = datetime.now(timezone.utc)
        later = session.add_task(new_task("Later", 200, Priority.LOW, now))
        urgent = session.add_task(new_task("Urgent", 3, Priority.HIGH, now))
        done = session.add_task(new_task("Done", 1, Priority.HIGH, now))
        session.toggle_completion(done.id, True)

        view = session.view(TaskFilter.ALL, now)

        assert [t.title for t in view.tasks] == ["Urgent", "Later", "Done"]
        assert view.counts.as_dict() == {"all": 3, "active": 2, "completed": 1}

        active = session.view("active", now)
        assert [t.id for t in active.tasks] == [urgent.id, later.id]

    def test_unknown_filter_shows_all(self, session):
        session.add_task(new_task("One", 5))
        view = session.view("bogus")
        assert view.selection is TaskFilter.ALL
        assert len(view.tasks) == 1

    def test_refresh_matches_optimistic_state(self, session):
        session.add_task(new_task("A", 5))
        session.add_task(new_task("B", 10))
        optimistic = set(t.id for t in session.state.tasks)

        session.refresh()

        assert set(t.id for t in session.state.tasks) == optimistic
        assert session.state.loading is False

    def test_delete(self, session):
        task = session.add_task(new_task("Gone soon", 5))
        session.delete_task(task.id)
        assert session.state.tasks == ()
        assert session.refresh().tasks == ()

    def test_cannot_touch_another_users_task(self, tmp_path, session):
        task = session.add_task(new_task("Mine", 5))
        other_auth = LocalAuthAdapter(tmp_path / "other.json")
        other_auth.sign_in("someone@example.com", "")
        other = TaskSession(session.repo, other_auth)

        with pytest.raises(TaskNotFoundError):
            other.toggle_completion(task.id, True)
        with pytest.raises(TaskNotFoundError):
            other.delete_task(task.id)
        assert session.refresh().tasks == (task,)

    def test_store_error_recorded_and_raised(self, session):
        with pytest.raises(TaskNotFoundError):
            session.delete_task("missing")
        assert "missing" in session.state.error

    def test_refresh_error(self, auth):
        repo = MagicMock()
        repo.fetch_all.side_effect = TaskStoreError("offline")
        session = TaskSession(repo, auth)
        with pytest.raises(TaskStoreError):
            session.refresh()
        assert session.state.error == "offline"
        assert session.state.loading is False

    def test_watch_updates_state(self, auth, now):
        task = new_task("Watched", 5, base=now).to_task("w1", "u", now)
        repo = MagicMock()
        repo.watch.return_value = iter([[], [task]])
        session = TaskSession(repo, auth)

        states = list(session.watch(poll_interval=1))

        assert [s.tasks for s in states] == [(), (task,)]
        repo.watch.assert_called_once_with(auth.current_session().user_id, 1)
