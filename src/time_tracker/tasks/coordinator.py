# src/time_tracker/tasks/coordinator.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import timedelta

from ..core.ports import TaskRepo
from . import lifecycle
from .lifecycle import Operation
from .lock_registry import LockRegistry
from .task_models import Failure, Outcome, Task, TaskStatus
from .task_store import StorageError

logger = logging.getLogger(__name__)


class TaskCoordinator:
    """
    Entry point for task operations; safe to call from many threads.

    Mutations of an existing task (rename/delete/stop/finish) run under the
    task's lock slot, and the existence/status check happens inside the lock,
    so check and write cannot interleave with another caller on the same id.
    Creation and reads take no lock.

    Every operation returns an Outcome; only programming errors raise.
    """

    def __init__(
        self,
        store: TaskRepo,
        locks: LockRegistry,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._locks = locks
        self._clock = clock
        logger.info("TaskCoordinator initialized (lock slots=%s)", locks.size)

    @property
    def locks(self) -> LockRegistry:
        return self._locks

    # ---- reads ----

    def get_all_tasks(self) -> list[Task]:
        try:
            return self._store.list_tasks()
        except StorageError:
            logger.exception("Failed to list tasks")
            raise

    def get_task(self, task_id: str) -> Task | None:
        try:
            return self._store.get_task(task_id)
        except StorageError:
            logger.exception("Failed to read task id=%s", task_id)
            raise

    def get_duration(self, task: Task) -> timedelta:
        return lifecycle.get_duration(task, self._clock())

    # ---- mutations ----

    def add_task(self, name: str) -> Outcome[str]:
        if lifecycle.is_blank(name):
            logger.warning("Rejected add_task: empty name")
            return Outcome.fail(Failure.INVALID_ARGUMENT, "Task name must not be empty.")

        clean = lifecycle.normalize_name(name)
        try:
            task_id = self._store.add_task(
                name=clean,
                start_time=self._clock(),
                status=TaskStatus.ACTIVE,
            )
        except StorageError as e:
            logger.exception("Error adding task name=%r", clean)
            return Outcome.fail(Failure.STORAGE_FAILURE, str(e))

        logger.info("Task added with ID: %s", task_id)
        return Outcome.success(task_id)

    def update_task_name(self, task_id: str, new_name: str) -> Outcome[bool]:
        if lifecycle.is_blank(new_name):
            logger.warning("Rejected rename of task id=%s: empty name", task_id)
            return Outcome.fail(Failure.INVALID_ARGUMENT, "Task name must not be empty.", False)

        clean = lifecycle.normalize_name(new_name)
        with self._locks.lock_for(task_id):
            try:
                if not self._store.exists(task_id):
                    return self._not_found(task_id, Operation.RENAME)
                if not self._store.update_name(task_id, clean):
                    # Removed between check and write by a writer outside this process.
                    return self._not_found(task_id, Operation.RENAME)
            except StorageError as e:
                return self._storage_failure(task_id, Operation.RENAME, e)

        logger.info("Task name updated to %r for ID: %s", clean, task_id)
        return Outcome.success(True)

    def delete_task(self, task_id: str) -> Outcome[bool]:
        with self._locks.lock_for(task_id):
            try:
                if not self._store.exists(task_id):
                    return self._not_found(task_id, Operation.DELETE)
                if not self._store.delete_task(task_id):
                    return self._not_found(task_id, Operation.DELETE)
            except StorageError as e:
                return self._storage_failure(task_id, Operation.DELETE, e)

        logger.info("Task deleted with ID: %s", task_id)
        return Outcome.success(True)

    def stop_task(self, task_id: str) -> Outcome[bool]:
        with self._locks.lock_for(task_id):
            try:
                task = self._store.get_task(task_id)
                if task is None:
                    return self._not_found(task_id, Operation.STOP)

                target = lifecycle.next_status(task.status, Operation.STOP)
                if target is None:
                    return self._rejected(task_id, Operation.STOP, task.status)

                changed = self._store.update_status_and_stop_time(
                    task_id,
                    target,
                    stop_time=self._clock(),
                    expected=lifecycle.allowed_from(Operation.STOP),
                )
                if not changed:
                    return self._rejected(task_id, Operation.STOP, task.status)
            except StorageError as e:
                return self._storage_failure(task_id, Operation.STOP, e)

        logger.info("Task stopped with ID: %s", task_id)
        return Outcome.success(True)

    def finish_task(self, task_id: str) -> Outcome[bool]:
        with self._locks.lock_for(task_id):
            try:
                task = self._store.get_task(task_id)
                if task is None:
                    return self._not_found(task_id, Operation.FINISH)

                target = lifecycle.next_status(task.status, Operation.FINISH)
                if target is None:
                    return self._rejected(task_id, Operation.FINISH, task.status)

                # stop_time only fills in when missing (finish without a prior stop).
                changed = self._store.update_status(
                    task_id,
                    target,
                    expected=lifecycle.allowed_from(Operation.FINISH),
                    stop_time=self._clock(),
                )
                if not changed:
                    return self._rejected(task_id, Operation.FINISH, task.status)
            except StorageError as e:
                return self._storage_failure(task_id, Operation.FINISH, e)

        logger.info("Task finished with ID: %s", task_id)
        return Outcome.success(True)

    # ---- failure helpers ----

    @staticmethod
    def _not_found(task_id: str, op: Operation) -> Outcome[bool]:
        logger.warning("Cannot %s task: no task with ID %s", op.value, task_id)
        return Outcome.fail(Failure.TASK_NOT_FOUND, f"No task with ID {task_id}.", False)

    @staticmethod
    def _rejected(task_id: str, op: Operation, status: TaskStatus) -> Outcome[bool]:
        logger.warning("Cannot %s task %s in status %s", op.value, task_id, status.value)
        return Outcome.fail(
            Failure.PRECONDITION_FAILED,
            f"Task {task_id} cannot be {_PAST_TENSE[op]} (status: {status.value}).",
            False,
        )

    @staticmethod
    def _storage_failure(task_id: str, op: Operation, err: StorageError) -> Outcome[bool]:
        logger.exception("Storage error during %s of task id=%s", op.value, task_id)
        return Outcome.fail(Failure.STORAGE_FAILURE, str(err), False)


_PAST_TENSE = {
    Operation.STOP: "stopped",
    Operation.FINISH: "finished",
    Operation.RENAME: "renamed",
    Operation.DELETE: "deleted",
}
