# src/tasktrack/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..tasks.task_models import Task
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Settings object (real Settings or a test SimpleNamespace).
    settings: Any

    task_store: TaskStore

    # Asked before deleting an active task; None means "never confirm".
    confirm: Callable[[Task], bool] | None = None
