# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from time_tracker.cli.bootstrap import create_initial_state
from time_tracker.config import DEFAULT_LOCK_SLOTS, Settings


@pytest.fixture()
def clean_env(monkeypatch):
    for name in (
        "TRACKER_APP_NAME",
        "TRACKER_LOG_LEVEL",
        "TRACKER_CONSOLE_ENABLED",
        "TRACKER_DATA_DIR",
        "TRACKER_TASKS_DB_PATH",
        "TRACKER_LOG_DIR",
        "TRACKER_LOCK_SLOTS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env) -> None:
    s = Settings.from_env()
    assert s.app_name == "time-tracker"
    assert s.log_level == "INFO"
    assert s.console_enabled is True
    assert s.data_dir == Path(".local/time_tracker")
    assert s.tasks_db_path == s.data_dir / "tasks.sqlite3"
    assert s.log_dir == s.data_dir
    assert s.lock_slots == DEFAULT_LOCK_SLOTS


def test_env_overrides(clean_env, tmp_path: Path) -> None:
    clean_env.setenv("TRACKER_DATA_DIR", str(tmp_path))
    clean_env.setenv("TRACKER_LOG_LEVEL", "debug")
    clean_env.setenv("TRACKER_CONSOLE_ENABLED", "off")
    clean_env.setenv("TRACKER_LOCK_SLOTS", "32")

    s = Settings.from_env()
    assert s.tasks_db_path == tmp_path / "tasks.sqlite3"
    assert s.log_level == "DEBUG"
    assert s.console_enabled is False
    assert s.lock_slots == 32


@pytest.mark.parametrize("raw", ["0", "-4", "many"])
def test_bad_lock_slots_fall_back(clean_env, raw: str) -> None:
    clean_env.setenv("TRACKER_LOCK_SLOTS", raw)
    assert Settings.from_env().lock_slots == DEFAULT_LOCK_SLOTS


def test_bootstrap_wires_store_and_locks(settings) -> None:
    settings.lock_slots = 8
    state = create_initial_state(settings=settings)

    assert state.coordinator.locks.size == 8
    assert settings.tasks_db_path.exists()

    task_id = state.coordinator.add_task("from bootstrap").value
    assert state.task_store.exists(task_id)
