# src/time_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing is read at import time; the first get_settings() call loads .env and builds it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TRACKER"

DEFAULT_LOCK_SLOTS = 16


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Front end ----
    console_enabled: bool

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    log_dir: Path

    # ---- Concurrency ----
    lock_slots: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "time-tracker").strip() or "time-tracker"
        log_level = _env(_k("LOG_LEVEL"), "INFO").strip().upper() or "INFO"

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/time_tracker"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        log_dir = _env_path(_k("LOG_DIR"), data_dir)

        lock_slots = _env_int(_k("LOCK_SLOTS"), DEFAULT_LOCK_SLOTS)
        if lock_slots < 1:
            lock_slots = DEFAULT_LOCK_SLOTS

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            log_dir=log_dir,
            lock_slots=lock_slots,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
