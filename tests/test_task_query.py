# tests/test_task_query.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from tasktrack.core.errors import ValidationError
from tasktrack.tasks import task_query
from tasktrack.tasks.task_models import Priority, Task
from tasktrack.tasks.task_query import SortField, TaskQuery

from .conftest import NOW


@pytest.fixture()
def tasks() -> list[Task]:
    def day(offset: int) -> datetime:
        return datetime(2026, 10, 18) + timedelta(days=offset)

    return [
        Task(id=1, title="Write report", created_at=NOW - timedelta(days=5), due_date=day(2),
             priority=Priority.HIGH, tags=["work"]),
        Task(id=2, title="Pay rent", created_at=NOW - timedelta(days=4), due_date=day(-1),
             priority=Priority.URGENT, tags=["home"]),
        Task(id=3, title="buy milk", created_at=NOW - timedelta(days=3), due_date=day(0),
             priority=Priority.NORMAL, tags=["home", "errand"], notes="oat milk"),
        Task(id=4, title="Archive mail", created_at=NOW - timedelta(days=2), due_date=day(-3),
             priority=Priority.LOW, completed=True),
        Task(id=5, title="Learn piano", created_at=NOW - timedelta(days=1),
             priority=Priority.NORMAL),
        Task(id=6, title="Fix bike", created_at=NOW, due_date=day(5),
             priority=Priority.URGENT, tags=["home"]),
    ]


def _ids(items: list[Task]) -> list[int]:
    return [t.id for t in items]


def test_scenario_pending_but_not_overdue() -> None:
    t = Task(id=1, title="Write report", created_at=NOW, due_date=NOW + timedelta(days=2),
             priority=Priority.HIGH)
    assert _ids(task_query.run_query([t], TaskQuery(pending_only=True), NOW)) == [1]
    assert task_query.run_query([t], TaskQuery(overdue=True), NOW) == []


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        (TaskQuery(), [1, 2, 3, 4, 5, 6]),
        (TaskQuery(completed_only=True), [4]),
        (TaskQuery(pending_only=True), [1, 2, 3, 5, 6]),
        (TaskQuery(tag="home"), [2, 3, 6]),
        (TaskQuery(priority=Priority.URGENT), [2, 6]),
        (TaskQuery(overdue=True), [2]),
        (TaskQuery(due_today=True), [3]),
        (TaskQuery(due_within_days=2), [1, 3]),
        (TaskQuery(search="MILK"), [3]),
        (TaskQuery(search="errand"), [3]),
        (TaskQuery(tag="home", priority=Priority.URGENT, pending_only=True), [2, 6]),
        (TaskQuery(tag="home", overdue=True), [2]),
    ],
)
def test_filters_are_anded(tasks: list[Task], query: TaskQuery, expected: list[int]) -> None:
    assert _ids(task_query.run_query(tasks, query, NOW)) == expected


def test_sort_by_priority_is_stable(tasks: list[Task]) -> None:
    asc = task_query.sort_tasks(tasks, SortField.PRIORITY)
    assert _ids(asc) == [4, 3, 5, 1, 2, 6]
    desc = task_query.sort_tasks(tasks, "priority", reverse=True)
    assert _ids(desc) == [2, 6, 1, 3, 5, 4]


def test_sort_by_due_puts_unset_last(tasks: list[Task]) -> None:
    assert _ids(task_query.sort_tasks(tasks, "due")) == [4, 2, 3, 1, 6, 5]
    assert _ids(task_query.sort_tasks(tasks, "due", reverse=True))[0] == 5


def test_sort_by_text_ignores_case(tasks: list[Task]) -> None:
    assert _ids(task_query.sort_tasks(tasks, "text")) == [4, 3, 6, 5, 2, 1]


def test_sort_then_limit(tasks: list[Task]) -> None:
    q = TaskQuery(pending_only=True, sort_by=SortField.CREATED, reverse=True, limit=2)
    assert _ids(task_query.run_query(tasks, q, NOW)) == [6, 5]


def test_invalid_sort_field() -> None:
    with pytest.raises(ValidationError):
        SortField.parse("colour")
    assert SortField.parse("DueDate") is SortField.DUE
    assert SortField.parse(None) is None


def test_query_does_not_mutate_input(tasks: list[Task]) -> None:
    before = [t.id for t in tasks]
    task_query.run_query(tasks, TaskQuery(sort_by=SortField.TEXT, limit=1), NOW)
    assert [t.id for t in tasks] == before


def test_summary(tasks: list[Task]) -> None:
    s = task_query.summarize(tasks, NOW)

    assert (s.total, s.completed, s.pending) == (6, 1, 5)
    assert s.completed_pct == pytest.approx(16.7)
    assert s.pending_pct == pytest.approx(83.3)
    assert s.by_priority == {
        Priority.LOW: 0,
        Priority.NORMAL: 2,
        Priority.HIGH: 1,
        Priority.URGENT: 2,
    }
    assert _ids(s.urgent) == [2, 6]
    assert _ids(s.overdue) == [2]


def test_summary_of_empty_collection() -> None:
    s = task_query.summarize([], NOW)
    assert (s.total, s.completed_pct, s.pending_pct) == (0, 0.0, 0.0)
    assert s.urgent == [] and s.overdue == []


def test_due_soon_window(tasks: list[Task]) -> None:
    assert _ids(task_query.due_soon(tasks, NOW, 3)) == [3, 1]
    assert _ids(task_query.due_soon(tasks, NOW, 0)) == [3]
    assert _ids(task_query.due_soon(tasks, NOW, 7)) == [3, 1, 6]


def test_reminders(tasks: list[Task]) -> None:
    r = task_query.reminders(tasks, NOW, 2)
    assert _ids(r.overdue) == [2]
    assert _ids(r.today) == [3]
    assert _ids(r.upcoming) == [1]
    assert not r.empty

    assert task_query.reminders([], NOW, 2).empty
