# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from time_tracker.core.state import AppState
from time_tracker.tasks.coordinator import TaskCoordinator
from time_tracker.tasks.lock_registry import LockRegistry
from time_tracker.tasks.task_store import TaskStore

from .fakes import FakeClock, InMemoryTaskRepo


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="time-tracker-test",
        log_level="DEBUG",
        console_enabled=True,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        log_dir=tmp_path,
        lock_slots=16,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.tasks_db_path)


@pytest.fixture()
def repo() -> InMemoryTaskRepo:
    return InMemoryTaskRepo()


@pytest.fixture()
def coordinator(store: TaskStore, clock: FakeClock) -> TaskCoordinator:
    """Coordinator over a real SQLite store (its correctness is part of what we test)."""
    return TaskCoordinator(store, LockRegistry(16), clock=clock)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, coordinator: TaskCoordinator) -> AppState:
    return AppState(settings=settings, task_store=store, coordinator=coordinator)
