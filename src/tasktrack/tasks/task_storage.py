# src/tasktrack/tasks/task_storage.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import shutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.errors import StorageError
from .task_codec import RecordError, decode_task, encode_task
from .task_models import Task

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadResult:
    tasks: list[Task] = field(default_factory=list)
    skipped: list[RecordError] = field(default_factory=list)
    backup_path: Path | None = None

    @property
    def next_id(self) -> int:
        return max((t.id for t in self.tasks), default=0) + 1


class TaskFile:
    """
    JSON-file persistence for the task list plus its archive.

    - load(): never raises on a corrupt file; the bad file is copied to
      "<name>.backup" and an empty list is returned.
    - save(): full rewrite via a temp sibling + os.replace.
    - append_archive(): read-modify-write of the archive array.
    """

    def __init__(self, path: str | Path, archive_path: str | Path | None = None) -> None:
        self.path = Path(path).expanduser()
        self.archive_path = (
            Path(archive_path).expanduser()
            if archive_path is not None
            else self.path.with_name(f"{self.path.stem}-archive{self.path.suffix}")
        )

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".backup")

    # ---- load ----

    def load(self, *, now: datetime) -> LoadResult:
        if not self.path.exists():
            logger.info("Task file %s not found; starting empty.", self.path)
            return LoadResult()

        try:
            raw = self.path.read_bytes()
        except OSError as e:
            logger.warning("Failed to read %s (%s); starting empty.", self.path, e)
            return LoadResult()

        if not raw.strip():
            logger.info("Task file %s is empty; writing a fresh one.", self.path)
            try:
                self._write_json(self.path, [])
            except StorageError as e:
                logger.warning("Could not rewrite empty task file: %s", e)
            return LoadResult()

        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, list):
                raise ValueError(f"top-level JSON is {type(data).__name__}, expected array")
        except ValueError as e:
            backup = self._backup_corrupt_file()
            logger.warning(
                "Task file %s is corrupt (%s); backed up to %s and starting empty.",
                self.path,
                e,
                backup,
            )
            return LoadResult(backup_path=backup)

        result = LoadResult()
        seen: set[int] = set()
        for index, record in enumerate(data):
            try:
                task = decode_task(record, index=index, now=now)
                if task.id in seen:
                    raise RecordError(index, f"duplicate Id {task.id}")
            except RecordError as e:
                logger.warning("Skipping unreadable task in %s: %s", self.path, e)
                result.skipped.append(e)
                continue
            seen.add(task.id)
            result.tasks.append(task)

        logger.debug(
            "Loaded %d tasks from %s (skipped=%d)", len(result.tasks), self.path, len(result.skipped)
        )
        return result

    def _backup_corrupt_file(self) -> Path | None:
        backup = self.backup_path
        try:
            shutil.copy2(self.path, backup)
        except OSError:
            logger.exception("Failed to back up corrupt task file %s", self.path)
            return None
        return backup

    # ---- save ----

    def save(self, tasks: Iterable[Task]) -> None:
        self._write_json(self.path, [encode_task(t) for t in tasks])

    # ---- archive ----

    def read_archive(self) -> list[dict[str, Any]]:
        path = self.archive_path
        if not path.exists():
            return []
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise StorageError(f"cannot read archive {path}: {e}", path) from e
        if not raw.strip():
            return []
        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError as e:
            raise StorageError(f"archive {path} is not valid JSON: {e}", path) from e
        if not isinstance(data, list):
            raise StorageError(f"archive {path} does not hold a JSON array", path)
        return data

    def append_archive(self, tasks: Iterable[Task]) -> int:
        records = self.read_archive()
        added = [encode_task(t) for t in tasks]
        records.extend(added)
        self._write_json(self.archive_path, records)
        logger.info("Archived %d tasks to %s (total=%d)", len(added), self.archive_path, len(records))
        return len(added)

    # ---- low-level helpers ----

    @staticmethod
    def _write_json(path: Path, payload: list[dict[str, Any]]) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StorageError(f"failed to write {path}: {e}", path) from e
