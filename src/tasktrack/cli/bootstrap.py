# src/tasktrack/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- takes settings (or loads them once),
- builds the JSON task file + TaskStore with the system clock,
- wires everything into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.ports import Clock
from ..core.state import AppState
from ..tasks.task_storage import TaskFile
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, clock: Clock | None = None, confirm=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and clock injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to
    get_settings().
    """
    if settings is None:
        settings = get_settings()

    storage = TaskFile(settings.data_file, settings.archive_file)
    store = TaskStore(storage, clock=clock or SystemClock())

    loaded = store.last_load
    if loaded.backup_path is not None:
        logger.warning("Recovered from a corrupt task file; old copy kept at %s", loaded.backup_path)
    if loaded.skipped:
        logger.warning("Ignored %d unreadable task records in %s", len(loaded.skipped), storage.path)

    return AppState(settings=settings, task_store=store, confirm=confirm)
