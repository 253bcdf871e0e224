# src/tasktrack/cli/commands.py

from __future__ import annotations

import argparse
import logging
import shlex
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from ..core.errors import DuplicateTaskError, TaskError, ValidationError
from ..core.state import AppState
from ..tasks import task_query
from ..tasks.task_models import Priority
from ..tasks.task_query import SortField, TaskQuery
from . import render

CommandEmitter = Callable[[str], None]
CommandHandler = Callable[[AppState, list[str], CommandEmitter | None], str]

logger = logging.getLogger(__name__)


class UsageError(ValidationError):
    kind = "usage"


@dataclass(frozen=True, slots=True)
class Reply:
    """Outcome of one command: text to show plus the error kind, if any."""

    text: str
    kind: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is None


class _ArgParser(argparse.ArgumentParser):
    """argparse that raises instead of printing + exiting."""

    def __init__(self, prog: str) -> None:
        super().__init__(prog=prog, add_help=False)

    def error(self, message: str):  # type: ignore[override]
        raise UsageError(f"{self.prog}: {message}")


class CommandRegistry:
    """Command registry used by the one-shot CLI and the console loop."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str | list[str],
        emit: CommandEmitter | None = None,
    ) -> Reply | None:
        """
        Handle "command args..." (a line or pre-split argv).
        Returns a Reply, or None for an empty line.
        """
        if isinstance(line, str):
            try:
                parts = shlex.split(line)
            except ValueError as e:
                return Reply(f"usage: {e}", "usage")
        else:
            parts = list(line)
        if not parts:
            return None

        name = parts[0].lstrip("/").lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return Reply(f"Unknown command: {name}. Use 'help' to list available commands.", "usage")

        try:
            return Reply(handler(state, args, emit))
        except TaskError as e:
            logger.debug("Command %s failed: %s", name, e.outcome())
            return Reply(f"{e.kind}: {e.message}", e.kind)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  {name:<8} {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def _parse_when(raw: str) -> date | datetime:
    s = raw.strip()
    try:
        if len(s) == 10:
            return date.fromisoformat(s)
        return datetime.fromisoformat(s.replace(" ", "T"))
    except ValueError:
        raise UsageError(f"invalid date {raw!r} (use YYYY-MM-DD or YYYY-MM-DDTHH:MM)") from None


def _split_tags(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    return [p for v in values for p in v.split(",")]


def _text(tokens: list[str]) -> str:
    return " ".join(tokens).strip()


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    p = _ArgParser("add")
    p.add_argument("text", nargs="+")
    p.add_argument("--due", type=_parse_when)
    p.add_argument("--tomorrow", action="store_true")
    p.add_argument("--next-week", action="store_true")
    p.add_argument("--no-due", action="store_true")
    p.add_argument("-p", "--priority", default="Normal")
    p.add_argument("-t", "--tag", "--tags", dest="tags", action="append")
    p.add_argument("-n", "--notes")
    ns = p.parse_args(args)

    try:
        task = state.task_store.add(
            _text(ns.text),
            ns.due,
            tomorrow=ns.tomorrow,
            next_week=ns.next_week,
            no_due=ns.no_due,
            priority=ns.priority,
            tags=_split_tags(ns.tags),
            notes=ns.notes,
        )
    except DuplicateTaskError as e:
        return f"Task already exists: {render.task_detail(e.existing)}"
    return f"Added {render.task_detail(task)}"


def cmd_list(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    p = _ArgParser("list")
    g = p.add_mutually_exclusive_group()
    g.add_argument("--completed", "--done", dest="completed", action="store_true")
    g.add_argument("--pending", "--todo", dest="pending", action="store_true")
    p.add_argument("--tag")
    p.add_argument("--priority")
    p.add_argument("--overdue", action="store_true")
    p.add_argument("--today", action="store_true")
    p.add_argument("--due-within", type=int)
    p.add_argument("-s", "--search")
    p.add_argument("--sort")
    p.add_argument("-r", "--reverse", action="store_true")
    p.add_argument("--limit", type=int)
    ns = p.parse_args(args)

    query = TaskQuery(
        completed_only=ns.completed,
        pending_only=ns.pending,
        tag=ns.tag,
        priority=Priority.parse(ns.priority) if ns.priority else None,
        overdue=ns.overdue,
        due_today=ns.today,
        due_within_days=ns.due_within,
        search=ns.search,
        sort_by=SortField.parse(ns.sort),
        reverse=ns.reverse,
        limit=ns.limit,
    )
    store = state.task_store
    now = store.now()
    return render.task_table(task_query.run_query(store.snapshot(), query, now), now)


def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    p = _ArgParser("done")
    p.add_argument("task", nargs="+")
    p.add_argument("-a", "--all", action="store_true")
    ns = p.parse_args(args)

    done = state.task_store.complete(_text(ns.task), all_matches=ns.all)
    lines = []
    for t in done:
        spent = f" (time spent {render.fmt_duration(t.time_spent)})" if t.time_spent else ""
        lines.append(f"Completed #{t.id} {t.title}{spent}")
    return "\n".join(lines)


def cmd_remove(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    p = _ArgParser("remove")
    p.add_argument("task", nargs="+")
    p.add_argument("-f", "--force", action="store_true")
    p.add_argument("--completed", action="store_true")
    ns = p.parse_args(args)

    removed = state.task_store.remove(
        _text(ns.task), force=ns.force, completed_only=ns.completed, confirm=state.confirm
    )
    if not removed:
        return "Nothing removed."
    return "\n".join(f"Removed #{t.id} {t.title}" for t in removed)


def cmd_update(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    p = _ArgParser("update")
    p.add_argument("task", nargs="+")
    p.add_argument("--text", "--title", dest="title")
    p.add_argument("--due", type=_parse_when)
    p.add_argument("-p", "--priority")
    p.add_argument("-t", "--tag", "--tags", dest="tags", action="append")
    p.add_argument("-n", "--notes")
    p.add_argument("--clear-due", action="store_true")
    p.add_argument("--clear-tags", action="store_true")
    p.add_argument("--clear-notes", action="store_true")
    ns = p.parse_args(args)

    task = state.task_store.update(
        _text(ns.task),
        title=ns.title,
        due_date=ns.due,
        priority=ns.priority,
        tags=_split_tags(ns.tags),
        notes=ns.notes,
        clear_due=ns.clear_due,
        clear_tags=ns.clear_tags,
        clear_notes=ns.clear_notes,
    )
    return f"Updated {render.task_detail(task)}"


def cmd_summary(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    store = state.task_store
    now = store.now()
    return render.summary_text(task_query.summarize(store.snapshot(), now), now)


def cmd_clear(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    p = _ArgParser("clear")
    p.add_argument("--archive", action="store_true")
    ns = p.parse_args(args)

    removed = state.task_store.clear_completed(archive=ns.archive)
    if not removed:
        return "No completed tasks to clear."
    where = f" (archived to {state.task_store.storage.archive_path})" if ns.archive else ""
    return f"Cleared {len(removed)} completed task(s){where}."


def _days_arg(prog: str, args: list[str], default: int) -> int:
    p = _ArgParser(prog)
    p.add_argument("days", nargs="?", type=int, default=default)
    ns = p.parse_args(args)
    if ns.days < 0:
        raise UsageError(f"{prog}: days must be >= 0")
    return ns.days


def cmd_due(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    days = _days_arg("due", args, getattr(state.settings, "due_soon_days", 3))
    store = state.task_store
    now = store.now()
    hits = task_query.due_soon(store.snapshot(), now, days)
    if not hits:
        return f"Nothing due in the next {days} day(s)."
    return render.task_table(hits, now)


def cmd_remind(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    days = _days_arg("remind", args, getattr(state.settings, "reminder_days", 1))
    store = state.task_store
    return render.reminders_text(task_query.reminders(store.snapshot(), store.now(), days), days)


def cmd_start(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        raise UsageError("start: task id or text required")
    res = state.task_store.start_timer(_text(args))
    if not res.changed:
        return f"Timer already running for #{res.task.id} {res.task.title}."
    return f"Timer started for #{res.task.id} {res.task.title}."


def cmd_stop(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if not args:
        raise UsageError("stop: task id or text required")
    res = state.task_store.stop_timer(_text(args))
    if not res.changed:
        return f"Timer is not running for #{res.task.id} {res.task.title}."
    return (
        f"Timer stopped for #{res.task.id} {res.task.title}: +{render.fmt_duration(res.elapsed)} "
        f"(total {render.fmt_duration(res.task.time_spent)})."
    )


def cmd_time(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    entries = state.task_store.time_report(_text(args) if args else None)
    return render.time_text(entries)


def cmd_reload(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    result = state.task_store.reload()
    msg = f"Reloaded {len(result.tasks)} task(s) from {state.task_store.storage.path}."
    if result.backup_path is not None:
        msg += f" File was corrupt; backup at {result.backup_path}."
    if result.skipped:
        msg += f" Skipped {len(result.skipped)} unreadable record(s)."
    return msg


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text="add TEXT [--due DATE|--tomorrow|--next-week|--no-due] [-p PRIO] [-t TAGS] [-n NOTES]",
    aliases=["a"],
)
registry.register(
    "list",
    cmd_list,
    help_text="list [--completed|--pending] [--tag T] [--priority P] [--overdue] [--today] "
    "[--due-within N] [-s TEXT] [--sort priority|due|created|text] [-r] [--limit N]",
    aliases=["ls"],
)
registry.register("done", cmd_done, help_text="done ID|TEXT [--all]", aliases=["complete"])
registry.register(
    "remove", cmd_remove, help_text="remove ID|ID,ID,...|TEXT [--force] [--completed]", aliases=["rm"]
)
registry.register(
    "update",
    cmd_update,
    help_text="update ID|TEXT [--text T] [--due D] [-p P] [-t TAGS] [-n NOTES] "
    "[--clear-due] [--clear-tags] [--clear-notes]",
    aliases=["edit"],
)
registry.register("summary", cmd_summary, help_text="Counts, priorities, urgent and overdue tasks.", aliases=["stats"])
registry.register("clear", cmd_clear, help_text="clear [--archive]  Drop completed tasks.")
registry.register("due", cmd_due, help_text="due [DAYS]  Pending tasks due soon.")
registry.register("remind", cmd_remind, help_text="remind [DAYS]  Overdue, today and upcoming.")
registry.register("start", cmd_start, help_text="start ID|TEXT  Start the timer.")
registry.register("stop", cmd_stop, help_text="stop ID|TEXT  Stop the timer.")
registry.register("time", cmd_time, help_text="time [ID|TEXT]  Tracked time.")
registry.register("reload", cmd_reload, help_text="Re-read the task file from disk.")
