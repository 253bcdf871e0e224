# src/tasktrack/tasks/task_codec.py

"""
JSON record <-> Task conversion.

Record shape (one object per task):
    Id, Description, CreatedAt, DueDate, Completed, Priority,
    Tags, Notes, TimeSpent, TimerStartedAt

Timestamps are local time without offset, second precision
("2026-10-18T09:30:00"). Unset timestamps are written as "".
Durations are "[d.]hh:mm:ss[.ffffff]".
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Any

from ..core.errors import ValidationError
from .task_models import Priority, Task, normalize_tags

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

_DURATION_RE = re.compile(
    r"^(?P<neg>-)?(?:(?P<days>\d+)\.)?(?P<h>\d{1,2}):(?P<m>\d{2}):(?P<s>\d{2})(?:\.(?P<frac>\d{1,7}))?$"
)


class RecordError(ValueError):
    """A single record could not be decoded; the caller skips it."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"record #{index}: {reason}")
        self.index = index
        self.reason = reason


# ---- scalars ----


def format_timestamp(ts: datetime | None) -> str:
    if ts is None:
        return ""
    return ts.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(raw: Any) -> datetime | None:
    """Return None for empty input; raise ValueError for garbage."""
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None
    dt = datetime.fromisoformat(s)
    # Offsets written by other tools are folded into local naive time.
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt.replace(microsecond=0)


def format_duration(value: timedelta) -> str:
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)

    secs, us = divmod(total_us, 1_000_000)
    days, secs = divmod(secs, 86400)
    h, secs = divmod(secs, 3600)
    m, s = divmod(secs, 60)

    out = f"{sign}{days}." if days else sign
    out += f"{h:02d}:{m:02d}:{s:02d}"
    if us:
        out += f".{us:06d}"
    return out


def parse_duration(raw: Any) -> timedelta:
    if raw is None or str(raw).strip() == "":
        return timedelta(0)
    m = _DURATION_RE.match(str(raw).strip())
    if not m:
        raise ValueError(f"invalid duration {raw!r}")
    frac = (m.group("frac") or "").ljust(6, "0")[:6]
    value = timedelta(
        days=int(m.group("days") or 0),
        hours=int(m.group("h")),
        minutes=int(m.group("m")),
        seconds=int(m.group("s")),
        microseconds=int(frac or 0),
    )
    return -value if m.group("neg") else value


# ---- records ----


def encode_task(task: Task) -> dict[str, Any]:
    return {
        "Id": task.id,
        "Description": task.title,
        "CreatedAt": format_timestamp(task.created_at),
        "DueDate": format_timestamp(task.due_date),
        "Completed": task.completed,
        "Priority": task.priority.label,
        "Tags": list(task.tags),
        "Notes": task.notes,
        "TimeSpent": format_duration(task.time_spent),
        "TimerStartedAt": format_timestamp(task.timer_started_at),
    }


def decode_task(raw: Any, *, index: int, now: datetime) -> Task:
    """
    Decode one record into a Task or raise RecordError.

    Required: a positive integer Id and a non-empty Description (or Title).
    Everything else falls back to a safe default:
    - bad/missing CreatedAt -> now
    - bad/missing DueDate   -> unset
    - bad TimeSpent         -> zero
    """
    if not isinstance(raw, dict):
        raise RecordError(index, f"expected an object, got {type(raw).__name__}")

    task_id = raw.get("Id")
    if isinstance(task_id, bool) or not isinstance(task_id, int):
        try:
            task_id = int(str(task_id).strip())
        except (TypeError, ValueError):
            raise RecordError(index, f"invalid Id {raw.get('Id')!r}") from None
    if task_id <= 0:
        raise RecordError(index, f"non-positive Id {task_id}")

    title = raw.get("Description", raw.get("Title"))
    if not isinstance(title, str) or not title.strip():
        raise RecordError(index, "missing Description")

    created_at = _lenient(parse_timestamp, raw.get("CreatedAt")) or now
    due_date = _lenient(parse_timestamp, raw.get("DueDate"))
    timer_started_at = _lenient(parse_timestamp, raw.get("TimerStartedAt"))

    try:
        priority = Priority.parse(raw.get("Priority"))
    except ValidationError:
        priority = Priority.NORMAL

    tags_raw = raw.get("Tags")
    tags = normalize_tags(tags_raw if isinstance(tags_raw, list) else [])

    notes = raw.get("Notes")
    time_spent = _lenient(parse_duration, raw.get("TimeSpent")) or timedelta(0)

    return Task(
        id=task_id,
        title=title.strip(),
        created_at=created_at,
        due_date=due_date,
        completed=_as_bool(raw.get("Completed")),
        priority=priority,
        tags=tags,
        notes=notes if isinstance(notes, str) else "",
        time_spent=max(timedelta(0), time_spent),
        timer_started_at=timer_started_at,
    )


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _lenient(parse, value):
    try:
        return parse(value)
    except (TypeError, ValueError):
        return None
