# src/tasktrack/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import IntEnum

from ..core.errors import ValidationError

# Sort key standing in for an unset due date ("no due date" == infinitely far away).
FAR_FUTURE = datetime.max


class Priority(IntEnum):
    """
    Ordered task priority.

    Stored on disk by name ("Low", "Normal", ...), compared by value.
    """

    LOW = 0
    NORMAL = 1
    HIGH = 2
    URGENT = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, raw: str | Priority | None) -> Priority:
        if raw is None:
            return cls.NORMAL
        if isinstance(raw, Priority):
            return raw
        key = str(raw).strip().upper()
        try:
            return cls[key]
        except KeyError:
            valid = ", ".join(p.label for p in cls)
            raise ValidationError(f"invalid priority {raw!r} (expected one of: {valid})") from None


def normalize_tags(tags: list[str] | tuple[str, ...] | None) -> list[str]:
    """Strip, drop empties and duplicates, keep first-seen order."""
    out: list[str] = []
    for t in tags or []:
        s = str(t).strip()
        if s and s not in out:
            out.append(s)
    return out


@dataclass(slots=True)
class Task:
    id: int
    title: str
    created_at: datetime
    due_date: datetime | None = None

    completed: bool = False
    priority: Priority = Priority.NORMAL
    tags: list[str] = field(default_factory=list)
    notes: str = ""

    time_spent: timedelta = field(default_factory=timedelta)
    timer_started_at: datetime | None = None

    # ---- derived predicates ----

    @property
    def is_active(self) -> bool:
        return not self.completed

    @property
    def timer_running(self) -> bool:
        return self.timer_started_at is not None

    @property
    def due_key(self) -> datetime:
        return self.due_date if self.due_date is not None else FAR_FUTURE

    def due_day(self) -> date | None:
        return self.due_date.date() if self.due_date is not None else None

    def is_overdue(self, now: datetime) -> bool:
        """Due before today and still open. A task due today is never overdue."""
        day = self.due_day()
        return day is not None and not self.completed and day < now.date()

    def is_due_today(self, now: datetime) -> bool:
        return self.due_day() == now.date()

    def is_due_within(self, now: datetime, days: int) -> bool:
        day = self.due_day()
        if day is None:
            return False
        today = now.date()
        return today <= day <= today + timedelta(days=max(0, int(days)))

    def live_time_spent(self, now: datetime) -> timedelta:
        if self.timer_started_at is None:
            return self.time_spent
        return self.time_spent + max(timedelta(0), now - self.timer_started_at)

    def matches_text(self, needle: str) -> bool:
        n = needle.casefold()
        if n in self.title.casefold() or n in self.notes.casefold():
            return True
        return any(n in t.casefold() for t in self.tags)
