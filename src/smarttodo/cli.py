"""smarttodo CLI - ranked task list."""

import json
import logging
import sys
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import click

from .adapters.firebase_auth import AuthenticationError
from .config import load_config
from .core.display import format_filter_bar, format_task_list
from .core.tasks import Task, TaskFilter, score_task
from .core.validation import ValidationError, format_timestamp
from .ports.task_repo import TaskStoreError
from .workflows import TaskSession, build_new_task, get_auth, get_repository, login, register

logger = logging.getLogger(__name__)

FILTER_CHOICES = [f.value for f in TaskFilter]
PRIORITY_CHOICES = ["low", "medium", "high"]
CATEGORY_CHOICES = ["work", "personal", "study", "other"]

EXPECTED_ERRORS = (AuthenticationError, TaskStoreError, ValidationError, ValueError)


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _display_zone(name: str):
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, showing UTC")
        return ZoneInfo("UTC")


def _open_session() -> TaskSession:
    """Build a session for the configured backend and load the current tasks."""
    config = load_config()
    auth = get_auth(config)
    session = TaskSession(get_repository(config, auth), auth)
    session.refresh()
    return session


def _task_json(task: Task, score: int | None = None) -> dict:
    data = task.to_document()
    if score is not None:
        data["score"] = score
    return data


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """smarttodo - tasks ranked by priority and deadline."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


# ============== Auth ==============


@main.command("register")
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.option("--confirm", prompt="Confirm password", hide_input=True)
def register_cmd(email: str, password: str, confirm: str):
    """Create an account."""
    try:
        auth = get_auth(load_config())
        session = register(auth, email, password, confirm)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Registered and signed in as {session.email}")


@main.command("login")
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
def login_cmd(email: str, password: str):
    """Sign in."""
    try:
        auth = get_auth(load_config())
        session = login(auth, email, password)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Signed in as {session.email}")


@main.command()
def logout():
    """Sign out."""
    try:
        get_auth(load_config()).sign_out()
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo("Signed out.")


@main.command()
def whoami():
    """Show the signed-in user."""
    try:
        session = get_auth(load_config()).current_session()
    except EXPECTED_ERRORS as e:
        _fail(e)
    if not session:
        click.echo("Not signed in.")
        return
    click.echo(f"{session.email} ({session.user_id})")


# ============== Tasks ==============


@main.command("list")
@click.option("--filter", "-f", "selection", type=click.Choice(FILTER_CHOICES), default=None,
              help="Which tasks to show (default from config)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(selection: str | None, as_json: bool):
    """List tasks, most urgent first."""
    config = load_config()
    try:
        session = _open_session()
    except EXPECTED_ERRORS as e:
        _fail(e)

    view = session.view(selection or config.default_filter)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "filter": view.selection.value,
                    "now": format_timestamp(view.now),
                    "counts": view.counts.as_dict(),
                    "tasks": [_task_json(t, score_task(t, view.now)) for t in view.tasks],
                },
                indent=2,
            )
        )
        return

    click.echo(format_task_list(view.tasks, view.counts, view.selection, view.now, _display_zone(config.timezone)))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def counts(as_json: bool):
    """Show task counts per filter."""
    try:
        session = _open_session()
    except EXPECTED_ERRORS as e:
        _fail(e)

    view = session.view(TaskFilter.ALL)
    if as_json:
        click.echo(json.dumps(view.counts.as_dict(), indent=2))
    else:
        click.echo(format_filter_bar(view.counts, None))


@main.command()
@click.argument("title")
@click.option("--deadline", "-d", required=True, help="Deadline (ISO 8601, e.g. 2026-02-20T17:00)")
@click.option("--start", "-s", default=None, help="Scheduled start (ISO 8601), defaults to now")
@click.option("--priority", "-p", type=click.Choice(PRIORITY_CHOICES), default="medium")
@click.option("--category", "-c", type=click.Choice(CATEGORY_CHOICES), default="other")
@click.option("--description", default="", help="Details (max 500 chars)")
def add(title: str, deadline: str, start: str | None, priority: str, category: str, description: str):
    """Add a task."""
    try:
        new_task = build_new_task(title, deadline, start, priority, category, description)
        session = _open_session()
        task = session.add_task(new_task)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Added #{task.id}: {task.title}")


def _set_completed(task_id: str, completed: bool) -> None:
    try:
        session = _open_session()
        session.toggle_completion(task_id, completed)
    except EXPECTED_ERRORS as e:
        _fail(e)


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Mark a task complete."""
    _set_completed(task_id, True)
    click.echo(f"Completed #{task_id}")


@main.command()
@click.argument("task_id")
def undo(task_id: str):
    """Mark a task active again."""
    _set_completed(task_id, False)
    click.echo(f"Reopened #{task_id}")


@main.command()
@click.argument("task_id")
@click.option("--yes", is_flag=True, help="Skip confirmation")
def delete(task_id: str, yes: bool):
    """Delete a task."""
    if not yes and not click.confirm(f"Delete task #{task_id}?"):
        return
    try:
        session = _open_session()
        session.delete_task(task_id)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Deleted #{task_id}")


@main.command()
@click.option("--filter", "-f", "selection", type=click.Choice(FILTER_CHOICES), default=None)
@click.option("--interval", "-i", type=float, default=None, help="Seconds between store checks")
def watch(selection: str | None, interval: float | None):
    """Re-render the list whenever tasks change."""
    config = load_config()
    tz = _display_zone(config.timezone)
    selection = selection or config.default_filter

    try:
        auth = get_auth(config)
        session = TaskSession(get_repository(config, auth), auth)
        for _ in session.watch(interval):
            view = session.view(selection)
            click.clear()
            click.echo(format_task_list(view.tasks, view.counts, view.selection, view.now, tz))
    except EXPECTED_ERRORS as e:
        _fail(e)
    except KeyboardInterrupt:
        click.echo("\nStopped.")


if __name__ == "__main__":
    main()
