from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from uuid import uuid4

from planner.domain.entities import FieldChange, Subtask, TaskSnapshot
from planner.services.changes import EXTENDED_FIELDS, changes_to_json, diff_tasks

CREATED = datetime(2026, 1, 10, 8, 0)


def _task(**overrides) -> TaskSnapshot:
    values = dict(
        id=uuid4(),
        title="A",
        description=None,
        status="todo",
        priority=2,
        due_date=None,
        category="general",
        owner_id=None,
        assignee=None,
        subtasks=(),
        tags=frozenset(),
        created_at=CREATED,
        last_update_at=None,
        deleted=False,
    )
    values.update(overrides)
    return TaskSnapshot(**values)


def test_identical_snapshots_have_no_changes() -> None:
    plain = _task()
    rich = _task(
        description="Call them",
        due_date=date(2026, 2, 1),
        tags=frozenset({"urgent"}),
        subtasks=(Subtask("x"),),
    )

    assert diff_tasks(plain, plain) == []
    assert diff_tasks(rich, rich, EXTENDED_FIELDS) == []


def test_status_change() -> None:
    old = _task()
    new = replace(old, status="blocked")

    assert changes_to_json(diff_tasks(old, new)) == [{"field": "status", "from": "todo", "to": "blocked"}]


def test_fields_are_reported_in_declared_order() -> None:
    old = _task()
    new = replace(old, priority=4, title="B", description="now described")

    assert [change.field for change in diff_tasks(old, new)] == ["title", "description", "priority"]


def test_presence_change_counts_even_when_blank() -> None:
    old = _task(description=None)
    new = replace(old, description="")

    assert diff_tasks(old, new) == [FieldChange(field="description", old=None, new="")]


def test_unwatched_fields_are_ignored_by_default() -> None:
    old = _task()
    new = replace(
        old,
        category="logistics",
        due_date=date(2026, 2, 1),
        last_update_at=datetime(2026, 1, 11),
        subtasks=(Subtask("Call"),),
    )

    assert diff_tasks(old, new) == []


def test_extended_policy_serializes_dates_and_tags() -> None:
    old = _task(tags=frozenset({"b"}))
    new = replace(old, due_date=date(2026, 2, 1), tags=frozenset({"b", "a"}))

    assert changes_to_json(diff_tasks(old, new, EXTENDED_FIELDS)) == [
        {"field": "due_date", "from": None, "to": "2026-02-01"},
        {"field": "tags", "from": ["b"], "to": ["a", "b"]},
    ]


def test_empty_diff_serializes_to_empty_list() -> None:
    assert changes_to_json([]) == []
