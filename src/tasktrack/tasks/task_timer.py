# src/tasktrack/tasks/task_timer.py

"""
Per-task time tracking.

Two states per task:
- idle:    timer_started_at is None
- running: timer_started_at holds the start moment

Only stop() changes time_spent, and only upwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..core.errors import StateError
from .task_models import Task


@dataclass(frozen=True, slots=True)
class TimerResult:
    task: Task
    changed: bool
    elapsed: timedelta = timedelta(0)


@dataclass(frozen=True, slots=True)
class TimeEntry:
    task: Task
    total: timedelta
    running: bool


def start(task: Task, now: datetime) -> bool:
    """Idle -> running. Returns False (no change) if already running."""
    if task.completed:
        raise StateError(f"task #{task.id} is already completed")
    if task.timer_started_at is not None:
        return False
    task.timer_started_at = now
    return True


def stop(task: Task, now: datetime) -> timedelta:
    """Running -> idle, accumulating the elapsed time. Idle -> zero, no change."""
    started = task.timer_started_at
    if started is None:
        return timedelta(0)
    elapsed = max(timedelta(0), now - started)
    task.time_spent += elapsed
    task.timer_started_at = None
    return elapsed


def live_elapsed(task: Task, now: datetime) -> timedelta:
    return task.live_time_spent(now)
