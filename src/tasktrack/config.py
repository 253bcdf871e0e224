# src/tasktrack/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every value has a working default; nothing is required.
- CLI flags (--file/--archive) override the file locations per invocation.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTRACK"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path
    log_to_file: bool

    # ---- Storage ----
    data_file: Path
    archive_file: Path

    # ---- Views ----
    due_soon_days: int
    reminder_days: int

    @staticmethod
    def from_env() -> "Settings":
        home = Path.home()

        return Settings(
            app_name=_env(_k("APP_NAME"), "tasktrack"),
            log_level=_env(_k("LOG_LEVEL"), "WARNING"),
            log_dir=_env_path(_k("LOG_DIR"), home / ".tasktrack"),
            log_to_file=_env_bool(_k("LOG_TO_FILE"), True),
            data_file=_env_path(_k("DATA_FILE"), home / "task-manager.json"),
            archive_file=_env_path(_k("ARCHIVE_FILE"), home / "task-manager-archive.json"),
            due_soon_days=max(0, _env_int(_k("DUE_SOON_DAYS"), 3)),
            reminder_days=max(0, _env_int(_k("REMINDER_DAYS"), 1)),
        )

    def with_paths(self, *, data_file: str | Path | None, archive_file: str | Path | None) -> "Settings":
        out = self
        if data_file:
            data = Path(data_file).expanduser()
            out = replace(out, data_file=data, archive_file=data.with_name(f"{data.stem}-archive{data.suffix}"))
        if archive_file:
            out = replace(out, archive_file=Path(archive_file).expanduser())
        return out


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
