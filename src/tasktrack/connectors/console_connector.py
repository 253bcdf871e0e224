# src/tasktrack/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

PROMPT = "tasktrack> "


def ask_yes_no(question: str) -> bool:
    try:
        answer = input(f"{question} [y/N] ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer in ("y", "yes")


def confirm_removal(task: Task) -> bool:
    return ask_yes_no(f"Delete pending task #{task.id} '{task.title}'?")


def run_console_loop(state: AppState) -> None:
    logger.info("Console started (file=%s).", state.task_store.storage.path)
    print("Type a command. Use 'help' for commands, 'exit' to quit.\n")

    if state.confirm is None:
        state.confirm = confirm_removal

    def emit(text: str) -> None:
        print(text, flush=True)

    while True:
        try:
            user_input = input(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            print()
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("exit", "quit", "/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            reply = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            print("Internal error while handling a command.")
            continue

        if reply is not None:
            print(reply.text)

    logger.info("Console finished.")
