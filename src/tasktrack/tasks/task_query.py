# src/tasktrack/tasks/task_query.py

"""
Read-only views over a task snapshot.

Nothing here mutates a Task or touches the disk; "now" is always passed in.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..core.errors import ValidationError
from .task_models import Priority, Task


class SortField(StrEnum):
    PRIORITY = "priority"
    DUE = "due"
    CREATED = "created"
    TEXT = "text"

    @classmethod
    def parse(cls, raw: str | SortField | None) -> SortField | None:
        if raw is None or isinstance(raw, SortField):
            return raw
        key = str(raw).strip().lower()
        aliases = {"duedate": "due", "due_date": "due", "createdat": "created", "title": "text"}
        try:
            return cls(aliases.get(key, key))
        except ValueError:
            valid = ", ".join(s.value for s in cls)
            raise ValidationError(f"invalid sort field {raw!r} (expected one of: {valid})") from None


_SORT_KEYS: dict[SortField, Callable[[Task], Any]] = {
    SortField.PRIORITY: lambda t: t.priority,
    SortField.DUE: lambda t: t.due_key,
    SortField.CREATED: lambda t: t.created_at,
    SortField.TEXT: lambda t: t.title.casefold(),
}


@dataclass(slots=True)
class TaskQuery:
    """All set filters must hold (AND)."""

    completed_only: bool = False
    pending_only: bool = False
    tag: str | None = None
    priority: Priority | None = None
    overdue: bool = False
    due_today: bool = False
    due_within_days: int | None = None
    search: str | None = None

    sort_by: SortField | None = None
    reverse: bool = False
    limit: int | None = None

    def matches(self, task: Task, now: datetime) -> bool:
        if self.completed_only and not task.completed:
            return False
        if self.pending_only and task.completed:
            return False
        if self.tag is not None and self.tag not in task.tags:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.overdue and not task.is_overdue(now):
            return False
        if self.due_today and not task.is_due_today(now):
            return False
        if self.due_within_days is not None and not task.is_due_within(now, self.due_within_days):
            return False
        if self.search and not task.matches_text(self.search):
            return False
        return True


def filter_tasks(tasks: Iterable[Task], query: TaskQuery, now: datetime) -> list[Task]:
    return [t for t in tasks if query.matches(t, now)]


def sort_tasks(tasks: Iterable[Task], by: SortField | str, *, reverse: bool = False) -> list[Task]:
    """Stable sort; ties keep input order in both directions."""
    field_ = SortField.parse(by)
    return sorted(tasks, key=_SORT_KEYS[field_], reverse=reverse)


def run_query(tasks: Iterable[Task], query: TaskQuery, now: datetime) -> list[Task]:
    out = filter_tasks(tasks, query, now)
    if query.sort_by is not None:
        out = sort_tasks(out, query.sort_by, reverse=query.reverse)
    elif query.reverse:
        out.reverse()
    if query.limit is not None:
        out = out[: max(0, int(query.limit))]
    return out


# ---- summaries ----


def _pct(part: int, whole: int) -> float:
    return round(100.0 * part / whole, 1) if whole else 0.0


@dataclass(slots=True)
class Summary:
    total: int
    completed: int
    pending: int
    completed_pct: float
    pending_pct: float
    by_priority: dict[Priority, int] = field(default_factory=dict)
    urgent: list[Task] = field(default_factory=list)
    overdue: list[Task] = field(default_factory=list)


def summarize(tasks: Iterable[Task], now: datetime) -> Summary:
    items = list(tasks)
    pending = [t for t in items if not t.completed]
    total = len(items)
    done = total - len(pending)

    by_priority = {p: 0 for p in Priority}
    for t in pending:
        by_priority[t.priority] += 1

    return Summary(
        total=total,
        completed=done,
        pending=len(pending),
        completed_pct=_pct(done, total),
        pending_pct=_pct(len(pending), total),
        by_priority=by_priority,
        urgent=[t for t in pending if t.priority is Priority.URGENT],
        overdue=sort_tasks([t for t in pending if t.is_overdue(now)], SortField.DUE),
    )


def due_soon(tasks: Iterable[Task], now: datetime, days: int) -> list[Task]:
    """Pending tasks due between today and today+days (inclusive), earliest first."""
    hits = [t for t in tasks if not t.completed and t.is_due_within(now, days)]
    return sort_tasks(hits, SortField.DUE)


@dataclass(slots=True)
class Reminders:
    overdue: list[Task] = field(default_factory=list)
    today: list[Task] = field(default_factory=list)
    upcoming: list[Task] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not (self.overdue or self.today or self.upcoming)


def reminders(tasks: Iterable[Task], now: datetime, days_ahead: int) -> Reminders:
    items = [t for t in tasks if not t.completed]
    return Reminders(
        overdue=sort_tasks([t for t in items if t.is_overdue(now)], SortField.DUE),
        today=sort_tasks([t for t in items if t.is_due_today(now)], SortField.DUE),
        upcoming=[
            t for t in due_soon(items, now, days_ahead) if not t.is_due_today(now)
        ],
    )
