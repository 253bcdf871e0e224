# src/tasktrack/tasks/task_store.py

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from pathlib import Path

from ..core.clock import SystemClock
from ..core.errors import (
    AmbiguousMatchError,
    DuplicateTaskError,
    NotFoundError,
    StateError,
    StorageError,
    ValidationError,
)
from ..core.ports import Clock, Confirm
from . import task_timer
from .task_models import Priority, Task, normalize_tags
from .task_storage import LoadResult, TaskFile
from .task_timer import TimeEntry, TimerResult

logger = logging.getLogger(__name__)


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        # Aware values are folded into local naive time like every stored timestamp.
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value.replace(microsecond=0)
    return datetime.combine(value, time.min)


def resolve_due_date(
    today: date,
    due_date: date | datetime | None = None,
    *,
    tomorrow: bool = False,
    next_week: bool = False,
    no_due: bool = False,
) -> datetime | None:
    """
    Pick the due date for a new task.

    Precedence: explicit date > tomorrow > next week > no_due > today.
    """
    if due_date is not None:
        return _as_datetime(due_date)
    if tomorrow:
        return _as_datetime(today + timedelta(days=1))
    if next_week:
        return _as_datetime(today + timedelta(days=7))
    if no_due:
        return None
    return _as_datetime(today)


def parse_id(ident: str) -> int | None:
    s = str(ident).strip()
    try:
        return int(s)
    except ValueError:
        return None


class TaskStore:
    """
    In-memory task collection backed by a JSON file.

    Identifier resolution (find):
    - an integer matches Id across all tasks (completed included)
    - anything else matches the title exactly, among active tasks by default

    Every mutation is applied in memory first and then saved with a full
    rewrite. A failed save raises StorageError but the in-memory change stays.
    """

    def __init__(self, storage: TaskFile | str | Path, *, clock: Clock | None = None) -> None:
        self._storage = storage if isinstance(storage, TaskFile) else TaskFile(storage)
        self._clock: Clock = clock or SystemClock()
        self._tasks: list[Task] = []
        self._next_id = 1
        self.last_load = self.reload()
        logger.info("TaskStore ready file=%s total=%s", self._storage.path, len(self._tasks))

    # ---- low-level helpers ----

    @property
    def storage(self) -> TaskFile:
        return self._storage

    @property
    def next_id(self) -> int:
        return self._next_id

    def now(self) -> datetime:
        return self._clock.now()

    def reload(self) -> LoadResult:
        result = self._storage.load(now=self.now())
        self._tasks = list(result.tasks)
        self._next_id = result.next_id
        self.last_load = result
        return result

    def _save(self) -> None:
        try:
            self._storage.save(self._tasks)
        except StorageError:
            logger.exception("Failed to save %d tasks to %s", len(self._tasks), self._storage.path)
            raise

    def _allocate_id(self) -> int:
        nid = self._next_id
        self._next_id += 1
        return nid

    def _active_with_title(self, title: str, *, exclude: Task | None = None) -> Task | None:
        for t in self._tasks:
            if t is not exclude and not t.completed and t.title == title:
                return t
        return None

    @staticmethod
    def _clean_title(title: str) -> str:
        text = (title or "").strip()
        if not text:
            raise ValidationError("task text must not be empty")
        return text

    # ---- queries ----

    def snapshot(self) -> list[Task]:
        return list(self._tasks)

    def count_tasks(self) -> int:
        return len(self._tasks)

    def get(self, task_id: int) -> Task | None:
        for t in self._tasks:
            if t.id == task_id:
                return t
        return None

    def find(
        self,
        ident: str,
        *,
        include_completed: bool = False,
        completed_only: bool = False,
    ) -> list[Task]:
        """
        Resolve ident to one or more tasks; raises NotFoundError on no match.
        """
        task_id = parse_id(ident)
        if task_id is not None:
            task = self.get(task_id)
            if task is None or (completed_only and not task.completed):
                raise NotFoundError(str(ident))
            return [task]

        text = str(ident).strip()
        matches = [
            t
            for t in self._tasks
            if t.title == text
            and (t.completed if completed_only else (include_completed or not t.completed))
        ]
        if not matches:
            raise NotFoundError(str(ident))
        return matches

    def resolve_one(self, ident: str, **scope: bool) -> Task:
        matches = self.find(ident, **scope)
        if len(matches) > 1:
            raise AmbiguousMatchError(str(ident), matches)
        return matches[0]

    # ---- mutations ----

    def add(
        self,
        title: str,
        due_date: date | datetime | None = None,
        *,
        tomorrow: bool = False,
        next_week: bool = False,
        no_due: bool = False,
        priority: Priority | str | None = Priority.NORMAL,
        tags: list[str] | None = None,
        notes: str | None = None,
    ) -> Task:
        text = self._clean_title(title)
        existing = self._active_with_title(text)
        if existing is not None:
            logger.info("Add rejected: active task #%s already has this text.", existing.id)
            raise DuplicateTaskError(existing)

        now = self.now()
        task = Task(
            id=0,
            title=text,
            created_at=now,
            due_date=resolve_due_date(
                now.date(), due_date, tomorrow=tomorrow, next_week=next_week, no_due=no_due
            ),
            priority=Priority.parse(priority),
            tags=normalize_tags(tags),
            notes=(notes or "").strip(),
        )
        task.id = self._allocate_id()
        self._tasks.append(task)
        logger.debug(
            "Task added id=%s priority=%s due=%s", task.id, task.priority.label, task.due_date
        )
        self._save()
        return task

    def update(
        self,
        ident: str,
        *,
        title: str | None = None,
        due_date: date | datetime | None = None,
        priority: Priority | str | None = None,
        tags: list[str] | None = None,
        notes: str | None = None,
        clear_due: bool = False,
        clear_tags: bool = False,
        clear_notes: bool = False,
    ) -> Task:
        supplied = (title, due_date, priority, tags, notes)
        if all(v is None for v in supplied) and not (clear_due or clear_tags or clear_notes):
            raise ValidationError("nothing to update")

        task = self.resolve_one(ident)

        # Validate everything before touching the task.
        new_title = None
        if title is not None:
            new_title = self._clean_title(title)
            if not task.completed:
                clash = self._active_with_title(new_title, exclude=task)
                if clash is not None:
                    raise DuplicateTaskError(clash)
        new_priority = Priority.parse(priority) if priority is not None else None

        if new_title is not None:
            task.title = new_title
        if new_priority is not None:
            task.priority = new_priority

        if clear_due:
            task.due_date = None
        elif due_date is not None:
            task.due_date = _as_datetime(due_date)

        if clear_tags:
            task.tags = []
        elif tags is not None:
            task.tags = normalize_tags(tags)

        if clear_notes:
            task.notes = ""
        elif notes is not None:
            task.notes = notes.strip()

        logger.debug("Task updated id=%s", task.id)
        self._save()
        return task

    def complete(self, ident: str, *, all_matches: bool = False) -> list[Task]:
        targets = self.find(ident)
        if len(targets) > 1 and not all_matches:
            raise AmbiguousMatchError(str(ident), targets)

        for t in targets:
            if t.completed:
                raise StateError(f"task #{t.id} is already completed")

        now = self.now()
        for t in targets:
            elapsed = task_timer.stop(t, now)
            if elapsed:
                logger.info("Timer stopped on completion id=%s elapsed=%s", t.id, elapsed)
            t.completed = True
            logger.debug("Task completed id=%s", t.id)

        self._save()
        return targets

    def remove(
        self,
        ident: str,
        *,
        force: bool = False,
        completed_only: bool = False,
        confirm: Confirm | None = None,
    ) -> list[Task]:
        """
        Delete tasks by id, comma-separated ids ("3,5,8") or exact text.

        Active tasks need confirm(task) -> True unless force is set; a task
        the gate declines is kept. Returns the tasks actually removed.
        """
        targets = self._removal_targets(ident, force=force, completed_only=completed_only)

        doomed: list[Task] = []
        for t in targets:
            if t.completed or force:
                doomed.append(t)
            elif confirm is not None and confirm(t):
                doomed.append(t)
            else:
                logger.info("Removal of task #%s not confirmed; kept.", t.id)

        if not doomed:
            return []

        doomed_ids = {t.id for t in doomed}
        self._tasks = [t for t in self._tasks if t.id not in doomed_ids]
        # Ids are never handed out twice in one session.
        self._next_id = max(self._next_id, max((t.id for t in self._tasks), default=0) + 1)
        logger.info("Removed tasks: %s", ", ".join(f"#{i}" for i in sorted(doomed_ids)))
        self._save()
        return doomed

    def _removal_targets(self, ident: str, *, force: bool, completed_only: bool) -> list[Task]:
        raw = str(ident).strip()
        if "," in raw:
            ids: list[int] = []
            for part in raw.split(","):
                if not part.strip():
                    continue
                tid = parse_id(part)
                if tid is None:
                    raise ValidationError(f"batch removal expects integer ids, got {part.strip()!r}")
                if tid not in ids:
                    ids.append(tid)
            if not ids:
                raise ValidationError("no ids given")
            targets = []
            for tid in ids:
                task = self.get(tid)
                if task is None:
                    raise NotFoundError(str(tid))
                targets.append(task)
        else:
            targets = self.find(raw, completed_only=completed_only)
            if len(targets) > 1 and not force:
                raise AmbiguousMatchError(raw, targets)

        if completed_only:
            for t in targets:
                if not t.completed:
                    raise StateError(f"task #{t.id} is not completed")
        return targets

    def clear_completed(self, *, archive: bool = False) -> list[Task]:
        done = [t for t in self._tasks if t.completed]
        if not done:
            return []

        if archive:
            # Raises StorageError before anything is removed.
            self._storage.append_archive(done)

        self._tasks = [t for t in self._tasks if not t.completed]
        logger.info("Cleared %d completed tasks (archived=%s)", len(done), archive)
        self._save()
        return done

    # ---- timers ----

    def start_timer(self, ident: str) -> TimerResult:
        task = self.resolve_one(ident)
        started = task_timer.start(task, self.now())
        if not started:
            return TimerResult(task=task, changed=False)
        logger.info("Timer started id=%s", task.id)
        self._save()
        return TimerResult(task=task, changed=True)

    def stop_timer(self, ident: str) -> TimerResult:
        task = self.resolve_one(ident)
        if not task.timer_running:
            return TimerResult(task=task, changed=False)
        elapsed = task_timer.stop(task, self.now())
        logger.info("Timer stopped id=%s elapsed=%s total=%s", task.id, elapsed, task.time_spent)
        self._save()
        return TimerResult(task=task, changed=True, elapsed=elapsed)

    def time_report(self, ident: str | None = None) -> list[TimeEntry]:
        """Live time per task; all tasks with tracked time when ident is None."""
        now = self.now()
        if ident is not None:
            task = self.resolve_one(ident, include_completed=True)
            return [TimeEntry(task, task_timer.live_elapsed(task, now), task.timer_running)]
        return [
            TimeEntry(t, task_timer.live_elapsed(t, now), t.timer_running)
            for t in self._tasks
            if t.timer_running or t.time_spent > timedelta(0)
        ]
