# tests/test_task_timer.py

from __future__ import annotations

from datetime import timedelta

import pytest

from tasktrack.core.errors import AmbiguousMatchError, StateError
from tasktrack.tasks import task_timer
from tasktrack.tasks.task_models import Task
from tasktrack.tasks.task_store import TaskStore

from .conftest import NOW
from .fakes import FrozenClock


def test_state_machine_on_plain_task() -> None:
    t = Task(id=1, title="X", created_at=NOW)

    assert task_timer.stop(t, NOW) == timedelta(0)
    assert task_timer.start(t, NOW) is True
    assert task_timer.start(t, NOW + timedelta(seconds=30)) is False
    assert t.timer_started_at == NOW

    assert task_timer.live_elapsed(t, NOW + timedelta(seconds=45)) == timedelta(seconds=45)
    assert t.time_spent == timedelta(0)

    assert task_timer.stop(t, NOW + timedelta(seconds=60)) == timedelta(seconds=60)
    assert t.time_spent == timedelta(seconds=60)
    assert t.timer_started_at is None


def test_stop_never_decreases_time_spent() -> None:
    t = Task(id=1, title="X", created_at=NOW, time_spent=timedelta(minutes=1))
    task_timer.start(t, NOW)
    assert task_timer.stop(t, NOW - timedelta(minutes=5)) == timedelta(0)
    assert t.time_spent == timedelta(minutes=1)


def test_start_stop_accumulates_elapsed(store: TaskStore, clock: FrozenClock) -> None:
    store.add("X")

    started = store.start_timer("X")
    assert started.changed

    clock.advance(seconds=90)
    stopped = store.stop_timer("X")

    assert stopped.changed
    assert stopped.elapsed == timedelta(seconds=90)
    assert stopped.task.time_spent == timedelta(seconds=90)
    assert not stopped.task.timer_running


def test_start_twice_is_a_noop(store: TaskStore, clock: FrozenClock) -> None:
    store.add("X")
    store.start_timer("X")
    first_start = store.find("X")[0].timer_started_at

    clock.advance(seconds=10)
    again = store.start_timer("X")

    assert not again.changed
    assert again.task.timer_started_at == first_start
    assert again.task.time_spent == timedelta(0)


def test_stop_when_idle_returns_zero(store: TaskStore) -> None:
    store.add("X")
    res = store.stop_timer("1")
    assert not res.changed
    assert res.elapsed == timedelta(0)


def test_running_timer_survives_reload(store: TaskStore, clock: FrozenClock) -> None:
    store.add("X")
    store.start_timer("X")
    clock.advance(minutes=2)

    store.reload()
    res = store.stop_timer("X")
    assert res.elapsed == timedelta(minutes=2)


def test_complete_force_stops_running_timer(store: TaskStore, clock: FrozenClock) -> None:
    store.add("X")
    store.start_timer("X")
    clock.advance(minutes=25)

    (done,) = store.complete("X")

    assert done.completed
    assert not done.timer_running
    assert done.time_spent == timedelta(minutes=25)


def test_cannot_start_timer_on_completed_task(store: TaskStore) -> None:
    store.add("X")
    store.complete("X")
    with pytest.raises(StateError):
        store.start_timer("1")


def test_timer_ambiguous_text(store: TaskStore) -> None:
    store.storage.path.write_text(
        '[{"Id": 1, "Description": "Twin"}, {"Id": 2, "Description": "Twin"}]', "utf-8"
    )
    store.reload()
    with pytest.raises(AmbiguousMatchError):
        store.start_timer("Twin")
    assert store.start_timer("2").changed


def test_time_report(store: TaskStore, clock: FrozenClock) -> None:
    store.add("A")
    store.add("B")
    store.add("C")
    store.start_timer("A")
    clock.advance(minutes=10)
    store.stop_timer("A")
    store.start_timer("B")
    clock.advance(minutes=3)

    report = {e.task.title: (e.total, e.running) for e in store.time_report()}
    assert report == {
        "A": (timedelta(minutes=10), False),
        "B": (timedelta(minutes=3), True),
    }

    (single,) = store.time_report("C")
    assert single.total == timedelta(0)
    # Live view only; nothing persisted or accumulated.
    assert store.find("B")[0].time_spent == timedelta(0)
