# tests/test_commands.py

from __future__ import annotations

import json

from tasktrack.cli.commands import CommandRegistry, registry
from tasktrack.core.state import AppState

from .fakes import FrozenClock


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    called = []

    def handler(state, args, emit):
        called.append(args)
        if emit is not None:
            emit("note")
        return "ok"

    reg.register("ping", handler, "ping", aliases=["p"])

    assert reg.handle(state, "ping a 'b c'").text == "ok"
    assert reg.handle(state, ["p", "x"], emit=lambda _: None).ok
    assert called == [["a", "b c"], ["x"]]


def test_command_registry_unknown_and_empty(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "   ") is None
    reply = reg.handle(state, "nope")
    assert reply is not None and not reply.ok
    assert "Unknown command" in reply.text


def test_errors_become_structured_replies(state: AppState) -> None:
    reply = registry.handle(state, "done 42")
    assert reply.kind == "not_found"
    assert reply.text.startswith("not_found:")

    reply = registry.handle(state, "add Something --due someday")
    assert reply.kind == "usage"

    reply = registry.handle(state, "add Something --bogus")
    assert reply.kind == "usage"


def test_add_list_done_flow(state: AppState) -> None:
    assert registry.handle(state, 'add "Write report" --due 2026-10-20 -p high -t work,q4').ok
    reply = registry.handle(state, "add Write report")
    assert reply.ok
    assert reply.text.startswith("Task already exists: #1")

    listing = registry.handle(state, "list --pending --sort due").text
    assert "Write report" in listing and "[work, q4]" in listing

    assert registry.handle(state, "list --overdue").text == "No tasks found."

    done = registry.handle(state, "done 1")
    assert done.ok and "Completed #1" in done.text

    data = json.loads(state.task_store.storage.path.read_text("utf-8"))
    assert data[0]["Completed"] is True
    assert data[0]["Priority"] == "High"


def test_remove_uses_state_confirm(state: AppState) -> None:
    registry.handle(state, "add Temp")
    state.confirm.answer = False
    assert registry.handle(state, "rm Temp").text == "Nothing removed."

    state.confirm.answer = True
    assert registry.handle(state, "rm Temp").text == "Removed #1 Temp"


def test_timer_commands(state: AppState, clock: FrozenClock) -> None:
    registry.handle(state, "add X")
    assert "started" in registry.handle(state, "start X").text
    assert "already running" in registry.handle(state, "start X").text
    clock.advance(seconds=90)
    assert "+0:01:30" in registry.handle(state, "stop X").text
    assert "not running" in registry.handle(state, "stop 1").text
    assert "0:01:30" in registry.handle(state, "time").text


def test_update_summary_clear(state: AppState) -> None:
    registry.handle(state, "add A --no-due")
    registry.handle(state, "add B -p urgent")
    assert registry.handle(state, "update A --text A2 -n 'call first'").ok
    assert registry.handle(state, "update B --text A2").kind == "validation"

    registry.handle(state, "done A2")
    summary = registry.handle(state, "summary").text
    assert "Total: 2" in summary
    assert "Urgent:" in summary and "#2 B" in summary

    assert "archived" in registry.handle(state, "clear --archive").text
    assert registry.handle(state, "clear").text == "No completed tasks to clear."


def test_due_and_remind(state: AppState) -> None:
    registry.handle(state, "add Today")
    registry.handle(state, "add Soon --due 2026-10-20")
    registry.handle(state, "add Late --due 2026-10-10")

    due = registry.handle(state, "due 2").text
    assert "Today" in due and "Soon" in due and "Late" not in due

    remind = registry.handle(state, "remind 3").text
    assert remind.splitlines()[0] == "Overdue:"
    assert "Due today:" in remind and "Coming up:" in remind

    assert registry.handle(state, "due -1").kind == "usage"
