"""Tests for client-side task state transitions."""

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from smarttodo.core import task_state
from smarttodo.core.tasks import Priority, Task


@pytest.fixture
def task():
    return Task(
        id="t1",
        title="Draft slides",
        priority=Priority.HIGH,
        deadline=datetime(2026, 2, 21, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def loaded(task):
    return task_state.tasks_loaded(task_state.INITIAL_STATE, [task])


class TestTransitions:
    def test_initial_state(self):
        state = task_state.INITIAL_STATE
        assert state.tasks == ()
        assert state.loading is False
        assert state.error is None

    def test_loading_clears_error(self):
        state = task_state.tasks_error(task_state.INITIAL_STATE, "boom")
        state = task_state.tasks_loading(state)
        assert state.loading is True
        assert state.error is None

    def test_loaded_replaces_list(self, loaded, task):
        other = replace(task, id="t2")
        state = task_state.tasks_loaded(loaded, [other])
        assert state.tasks == (other,)
        assert state.loading is False

    def test_error_keeps_tasks(self, loaded):
        state = task_state.tasks_error(loaded, "offline")
        assert state.error == "offline"
        assert len(state.tasks) == 1

    def test_added_appends(self, loaded, task):
        new = replace(task, id="t2", title="New")
        state = task_state.task_added(loaded, new)
        assert [t.id for t in state.tasks] == ["t1", "t2"]

    def test_added_twice_does_not_duplicate(self, loaded, task):
        confirmed = replace(task, title="Draft slides v2")
        state = task_state.task_added(loaded, confirmed)
        assert len(state.tasks) == 1
        assert state.tasks[0].title == "Draft slides v2"

    def test_updated_replaces_by_id(self, loaded, task):
        state = task_state.task_updated(loaded, replace(task, completed=True))
        assert state.tasks[0].completed is True

    def test_deleted(self, loaded):
        state = task_state.task_deleted(loaded, "t1")
        assert state.tasks == ()

    def test_transitions_do_not_mutate(self, loaded, task):
        task_state.task_deleted(loaded, "t1")
        assert loaded.tasks == (task,)

    def test_find_task(self, loaded, task):
        assert task_state.find_task(loaded, "t1") == task
        assert task_state.find_task(loaded, "missing") is None
