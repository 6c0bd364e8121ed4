# src/time_tracker/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.coordinator import TaskCoordinator
from .ports import TaskRepo


@dataclass
class AppState:
    # Settings object (config.Settings or a test double with the same attributes).
    settings: Any

    task_store: TaskRepo
    coordinator: TaskCoordinator
