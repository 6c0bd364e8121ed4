# src/time_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The coordinator depends on a Protocol instead of the concrete SQLite store.
This keeps storage swappable and makes testing easier.
"""

from typing import Iterable, Protocol

from ..tasks.task_models import Task, TaskStatus


class TaskRepo(Protocol):
    """
    Durable record of tasks keyed by id.

    Contract:
    - "absent" and "precondition not met" are reported as None / False
    - storage failures raise StorageError
    """

    def count_tasks(self) -> int: ...

    def add_task(
            self,
            *,
            name: str,
            start_time: float,
            status: TaskStatus = TaskStatus.ACTIVE,
    ) -> str: ...

    def list_tasks(self) -> list[Task]: ...
    def get_task(self, task_id: str) -> Task | None: ...
    def exists(self, task_id: str) -> bool: ...
    def update_name(self, task_id: str, name: str) -> bool: ...

    def update_status_and_stop_time(
            self,
            task_id: str,
            status: TaskStatus,
            *,
            stop_time: float,
            expected: TaskStatus | Iterable[TaskStatus],
    ) -> bool: ...

    def update_status(
            self,
            task_id: str,
            status: TaskStatus,
            *,
            expected: TaskStatus | Iterable[TaskStatus],
            stop_time: float | None = None,
    ) -> bool: ...

    def delete_task(self, task_id: str) -> bool: ...
