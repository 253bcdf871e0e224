# src/tasktrack/core/clock.py

from __future__ import annotations

from datetime import datetime


class SystemClock:
    """Wall clock, truncated to whole seconds to match the on-disk format."""

    def now(self) -> datetime:
        return datetime.now().replace(microsecond=0)
