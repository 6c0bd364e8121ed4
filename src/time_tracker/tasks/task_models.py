# src/time_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    ACTIVE -> STOPPED -> FINISHED, or ACTIVE -> FINISHED directly.
    FINISHED is terminal.
    """

    ACTIVE = "active"
    STOPPED = "stopped"
    FINISHED = "finished"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            raise ValueError("task row has no status")
        try:
            return cls(raw)
        except ValueError:
            raise ValueError(f"unknown task status in storage: {raw!r}") from None


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    name: str
    status: TaskStatus
    start_time: float
    stop_time: float | None = None


class Failure(StrEnum):
    """Why a coordinator operation did not succeed."""

    INVALID_ARGUMENT = "invalid_argument"
    TASK_NOT_FOUND = "task_not_found"
    PRECONDITION_FAILED = "precondition_failed"
    STORAGE_FAILURE = "storage_failure"


@dataclass(slots=True, frozen=True)
class Outcome(Generic[T]):
    """
    Result of a coordinator operation.

    Exactly one of the two shapes:
    - success: failure is None, value holds the payload (task id or True)
    - failure: failure is set, value is None (or False for boolean operations)
    """

    value: T | None = None
    failure: Failure | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: T) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def fail(cls, failure: Failure, message: str = "", value: T | None = None) -> Outcome[T]:
        return cls(value=value, failure=failure, message=message)
