# src/tasklist/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..tasks.task_manager import TaskManager


@dataclass
class AppState:
    # Settings object (real Settings or a test double with the same attributes).
    settings: Any

    manager: TaskManager
