# src/tasktrack/cli/render.py

"""Plain-text rendering of store and query results."""

from __future__ import annotations

from datetime import datetime, timedelta

from ..tasks.task_models import Priority, Task
from ..tasks.task_query import Reminders, Summary
from ..tasks.task_timer import TimeEntry


def fmt_duration(value: timedelta) -> str:
    total = max(0, int(value.total_seconds()))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h}:{m:02d}:{s:02d}"


def fmt_due(task: Task) -> str:
    if task.due_date is None:
        return "-"
    if task.due_date.time() == datetime.min.time():
        return task.due_date.strftime("%Y-%m-%d")
    return task.due_date.strftime("%Y-%m-%d %H:%M")


def _status(task: Task, now: datetime) -> str:
    if task.completed:
        return "DONE"
    if task.timer_running:
        return "RUN"
    if task.is_overdue(now):
        return "LATE"
    return "TODO"


def task_table(tasks: list[Task], now: datetime) -> str:
    if not tasks:
        return "No tasks found."
    lines = [f"{'ID':>4}  {'ST':<4}  {'PRIO':<6}  {'DUE':<16}  {'TIME':>8}  TEXT", "-" * 72]
    for t in tasks:
        tags = f"  [{', '.join(t.tags)}]" if t.tags else ""
        lines.append(
            f"{t.id:>4}  {_status(t, now):<4}  {t.priority.label:<6}  {fmt_due(t):<16}  "
            f"{fmt_duration(t.live_time_spent(now)):>8}  {t.title}{tags}"
        )
    return "\n".join(lines)


def task_detail(task: Task) -> str:
    parts = [f"#{task.id} {task.title}", f"priority={task.priority.label}", f"due={fmt_due(task)}"]
    if task.tags:
        parts.append("tags=" + ",".join(task.tags))
    if task.notes:
        parts.append(f"notes={task.notes!r}")
    return "  ".join(parts)


def summary_text(s: Summary, now: datetime) -> str:
    lines = [
        f"Total: {s.total}",
        f"Completed: {s.completed} ({s.completed_pct:.1f}%)",
        f"Pending: {s.pending} ({s.pending_pct:.1f}%)",
        "Pending by priority:",
    ]
    for p in sorted(Priority, reverse=True):
        lines.append(f"  {p.label:<7} {s.by_priority.get(p, 0)}")
    if s.urgent:
        lines.append("Urgent:")
        lines.extend(f"  #{t.id} {t.title}" for t in s.urgent)
    if s.overdue:
        lines.append("Overdue:")
        lines.extend(f"  #{t.id} {t.title} (due {fmt_due(t)})" for t in s.overdue)
    return "\n".join(lines)


def reminders_text(r: Reminders, days_ahead: int) -> str:
    if r.empty:
        return f"Nothing due in the next {days_ahead} day(s)."
    lines: list[str] = []
    for label, items in (("Overdue", r.overdue), ("Due today", r.today), ("Coming up", r.upcoming)):
        if not items:
            continue
        lines.append(f"{label}:")
        lines.extend(f"  #{t.id} {t.title} (due {fmt_due(t)})" for t in items)
    return "\n".join(lines)


def time_text(entries: list[TimeEntry]) -> str:
    if not entries:
        return "No time tracked yet."
    lines = []
    for e in entries:
        running = "  (running)" if e.running else ""
        lines.append(f"#{e.task.id:<4} {fmt_duration(e.total):>9}  {e.task.title}{running}")
    if len(entries) > 1:
        total = sum((e.total for e in entries), timedelta(0))
        lines.append(f"Total {fmt_duration(total):>10}")
    return "\n".join(lines)
