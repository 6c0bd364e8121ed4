# src/time_tracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..tasks.lifecycle import InconsistentTaskError, format_duration
from ..tasks.task_models import Failure, Outcome, Task
from ..tasks.task_store import StorageError

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

SHORT_ID_LEN = 8

STORAGE_ERROR_REPLY = "Storage error, the task was not changed. See the log for details."


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_ts(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M")


def _resolve_id(state: AppState, raw: str) -> tuple[str | None, str | None]:
    """
    Accept a full task id or a unique prefix of one (as shown by /list).

    Returns (task_id, error_message). Unknown ids are passed through so the
    coordinator reports them as not found.
    """
    raw = raw.strip().lower()
    try:
        if state.coordinator.get_task(raw) is not None:
            return raw, None
        tasks = state.coordinator.get_all_tasks()
    except StorageError:
        return None, STORAGE_ERROR_REPLY
    matches = [t.id for t in tasks if t.id.startswith(raw)]
    if len(matches) > 1:
        return None, f"Ambiguous task ID prefix: {raw} ({len(matches)} matches)."
    if len(matches) == 1:
        return matches[0], None
    return raw, None


def _describe(outcome: Outcome, ok_text: str) -> str:
    if outcome.ok:
        return ok_text
    if outcome.failure == Failure.STORAGE_FAILURE:
        return STORAGE_ERROR_REPLY
    return outcome.message or f"Operation failed ({outcome.failure})."


def _duration_text(state: AppState, task: Task) -> str:
    try:
        return format_duration(state.coordinator.get_duration(task))
    except InconsistentTaskError:
        logger.exception("Cannot compute duration for task id=%s", task.id)
        return "?"


def render_tasks(state: AppState, tasks: list[Task]) -> str:
    headers = ("ID", "Name", "Start", "Status", "Duration")
    rows = [
        (
            t.id[:SHORT_ID_LEN],
            t.name,
            _fmt_ts(t.start_time),
            t.status.value,
            _duration_text(state, t),
        )
        for t in tasks
    ]
    widths = [max([len(h), *(len(r[i]) for r in rows)]) for i, h in enumerate(headers)]

    sep = "+" + "+".join("-" * (w + 2) for w in widths) + "+"

    def fmt_row(cells) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

    lines = [sep, fmt_row(headers), sep]
    lines.extend(fmt_row(r) for r in rows)
    lines.append(sep)
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    try:
        total = str(state.task_store.count_tasks())
    except StorageError:
        logger.exception("count_tasks failed")
        total = "unknown (storage error)"
    return (
        "Status:\n"
        f"  Database: {getattr(settings, 'tasks_db_path', '?')}\n"
        f"  Lock slots: {state.coordinator.locks.size}\n"
        f"  Tasks: {total}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    name = " ".join(args)
    outcome = state.coordinator.add_task(name)
    return _describe(outcome, f"Task added. ID: {outcome.value}")


def cmd_list(state: AppState, args: list[str]) -> str:
    try:
        tasks = state.coordinator.get_all_tasks()
    except StorageError:
        return "Storage error, cannot list tasks. See the log for details."
    if not tasks:
        return "No tasks yet. Use /add <name> to create one."
    return render_tasks(state, tasks)


def cmd_rename(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /rename <id> <new name>"
    task_id, err = _resolve_id(state, args[0])
    if err:
        return err
    outcome = state.coordinator.update_task_name(task_id, " ".join(args[1:]))
    return _describe(outcome, "Task renamed.")


def _single_id_command(
    op: Callable[[AppState, str], Outcome[bool]],
    usage: str,
    ok_text: str,
) -> CommandHandler:
    def handler(state: AppState, args: list[str]) -> str:
        if len(args) != 1:
            return f"Usage: {usage}"
        task_id, err = _resolve_id(state, args[0])
        if err:
            return err
        return _describe(op(state, task_id), ok_text)

    return handler


cmd_delete = _single_id_command(
    lambda state, task_id: state.coordinator.delete_task(task_id), "/delete <id>", "Task deleted."
)
cmd_stop = _single_id_command(
    lambda state, task_id: state.coordinator.stop_task(task_id), "/stop <id>", "Task stopped."
)
cmd_finish = _single_id_command(
    lambda state, task_id: state.coordinator.finish_task(task_id), "/finish <id>", "Task finished."
)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage path, lock slots and task count.")
registry.register("add", cmd_add, help_text="Create a task: /add <name>.")
registry.register("list", cmd_list, help_text="Show all tasks with their durations.", aliases=["ls"])
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <id> <new name>.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>.", aliases=["rm"])
registry.register("stop", cmd_stop, help_text="Stop a running task: /stop <id>.")
registry.register("finish", cmd_finish, help_text="Finish a task: /finish <id>.")
