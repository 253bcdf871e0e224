# src/tasktrack/core/errors.py

"""
Error taxonomy shared by the store and the command layer.

Every error here is recoverable: command handlers turn it into a
"<kind>: <message>" reply and the session keeps going.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..tasks.task_models import Task


class TaskError(Exception):
    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def outcome(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ValidationError(TaskError):
    kind = "validation"


class DuplicateTaskError(ValidationError):
    """An active task already holds this title."""

    def __init__(self, existing: Task) -> None:
        super().__init__(f"an active task already exists with this text (#{existing.id})")
        self.existing = existing


class NotFoundError(TaskError):
    kind = "not_found"

    def __init__(self, ident: str) -> None:
        super().__init__(f"no task matches {ident!r}")
        self.ident = ident


class AmbiguousMatchError(TaskError):
    kind = "ambiguous"

    def __init__(self, ident: str, matches: list[Task]) -> None:
        ids = ", ".join(f"#{t.id}" for t in matches)
        super().__init__(f"{len(matches)} tasks match {ident!r} ({ids}); use an id or --all")
        self.ident = ident
        self.matches = list(matches)


class StorageError(TaskError):
    kind = "storage"

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class StateError(TaskError):
    kind = "state"
