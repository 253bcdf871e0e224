# src/tasktrack/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The store depends on these Protocols instead of concrete implementations,
so tests can freeze time and answer confirmation prompts deterministically.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Task


class Clock(Protocol):
    """Single source of "now" (local wall time, naive)."""
    def now(self) -> datetime: ...


class Confirm(Protocol):
    """Gate for destructive operations: return True to go ahead."""
    def __call__(self, task: Task) -> bool: ...
