# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from tasktrack.core.state import AppState
from tasktrack.tasks.task_storage import TaskFile
from tasktrack.tasks.task_store import TaskStore

from .fakes import FrozenClock, ScriptedConfirm

NOW = datetime(2026, 10, 18, 9, 0, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the user's environment and ~/ files.
    """
    return SimpleNamespace(
        app_name="tasktrack-test",
        log_level="DEBUG",
        log_dir=tmp_path / "logs",
        log_to_file=False,
        data_file=tmp_path / "task-manager.json",
        archive_file=tmp_path / "task-manager-archive.json",
        due_soon_days=3,
        reminder_days=1,
    )


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture()
def task_file(settings: SimpleNamespace) -> TaskFile:
    return TaskFile(settings.data_file, settings.archive_file)


@pytest.fixture()
def store(task_file: TaskFile, clock: FrozenClock) -> TaskStore:
    return TaskStore(task_file, clock=clock)


@pytest.fixture()
def confirm() -> ScriptedConfirm:
    return ScriptedConfirm(answer=True)


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, confirm: ScriptedConfirm) -> AppState:
    """
    AppState wired with a real JSON-backed TaskStore and deterministic fakes.
    """
    return AppState(settings=settings, task_store=store, confirm=confirm)
