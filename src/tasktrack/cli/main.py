# src/tasktrack/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either:
- runs a single command given on the command line ("tasktrack add ..."), or
- starts the interactive console loop when no command is given.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..cli.commands import registry
from ..config import get_settings
from ..connectors.console_connector import confirm_removal, run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tasktrack",
        description="Personal task tracker with time tracking (JSON storage).",
        epilog="Run without a command for the interactive console; 'tasktrack help' lists commands.",
    )
    p.add_argument("--file", help="Task file (default: ~/task-manager.json or TASKTRACK_DATA_FILE).")
    p.add_argument("--archive", help="Archive file (default: ~/task-manager-archive.json).")
    p.add_argument("command", nargs=argparse.REMAINDER, help="Command and its arguments.")
    return p


def main(argv: list[str] | None = None) -> int:
    ns = build_parser().parse_args(argv)
    settings = get_settings().with_paths(data_file=ns.file, archive_file=ns.archive)

    level_name = str(getattr(settings, "log_level", "WARNING")).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    setup_logging(
        log_dir=settings.log_dir if settings.log_to_file else None,
        console_level=console_level,
    )

    logger.info("Starting %s (file=%s)", settings.app_name, settings.data_file)

    state = create_initial_state(settings=settings, confirm=confirm_removal)

    if not ns.command:
        run_console_loop(state)
        return 0

    try:
        reply = registry.handle(state, ns.command)
    except Exception:
        logger.exception("Command crashed: %s", ns.command)
        print("Internal error while handling a command.", file=sys.stderr)
        return 2

    if reply is None:
        return 0
    if reply.ok:
        print(reply.text)
        return 0
    print(reply.text, file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
