# src/time_tracker/tasks/lifecycle.py

from __future__ import annotations

"""
Task state machine and duration rules.

Transitions:
  (none)   --create--> ACTIVE
  ACTIVE   --stop----> STOPPED
  ACTIVE   --finish--> FINISHED
  STOPPED  --finish--> FINISHED
  any      --rename--> unchanged
  any      --delete--> removed

Everything else (stop on STOPPED/FINISHED, finish on FINISHED) is rejected.
Rejections are expected outcomes, not errors: callers report them as a no-op.
"""

from datetime import timedelta
from enum import StrEnum

from .task_models import Task, TaskStatus


class InconsistentTaskError(RuntimeError):
    """Persisted task data violates a lifecycle invariant."""


class Operation(StrEnum):
    CREATE = "create"
    STOP = "stop"
    FINISH = "finish"
    RENAME = "rename"
    DELETE = "delete"


_ALL_STATUSES = frozenset(TaskStatus)

_TRANSITIONS: dict[tuple[TaskStatus, Operation], TaskStatus] = {
    (TaskStatus.ACTIVE, Operation.STOP): TaskStatus.STOPPED,
    (TaskStatus.ACTIVE, Operation.FINISH): TaskStatus.FINISHED,
    (TaskStatus.STOPPED, Operation.FINISH): TaskStatus.FINISHED,
}


def is_blank(name: str | None) -> bool:
    return name is None or not str(name).strip()


def normalize_name(name: str | None) -> str:
    if is_blank(name):
        raise ValueError("task name must not be empty")
    return str(name).strip()


def allowed_from(operation: Operation) -> frozenset[TaskStatus]:
    """Statuses from which `operation` may be applied to an existing task."""
    if operation in (Operation.RENAME, Operation.DELETE):
        return _ALL_STATUSES
    return frozenset(src for (src, op) in _TRANSITIONS if op == operation)


def can_apply(status: TaskStatus, operation: Operation) -> bool:
    return status in allowed_from(operation)


def next_status(status: TaskStatus, operation: Operation) -> TaskStatus | None:
    """
    Status after applying `operation`, or None if the transition is rejected.

    RENAME keeps the status. DELETE and CREATE have no "next status" for an
    existing task and return None; use can_apply() for DELETE.
    """
    if operation == Operation.RENAME:
        return status
    return _TRANSITIONS.get((status, operation))


def get_duration(task: Task, now: float) -> timedelta:
    """
    Elapsed time of a task.

    ACTIVE: wall-clock time since start.
    STOPPED / FINISHED: frozen at stop_time - start_time.
    """
    if task.status == TaskStatus.ACTIVE:
        end = now
    else:
        if task.stop_time is None:
            raise InconsistentTaskError(
                f"task {task.id} is {task.status.value} but has no stop_time"
            )
        end = task.stop_time

    seconds = max(0.0, float(end) - float(task.start_time))
    return timedelta(seconds=seconds)


def format_duration(delta: timedelta) -> str:
    total_minutes = int(delta.total_seconds() // 60)
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h {minutes}m"
