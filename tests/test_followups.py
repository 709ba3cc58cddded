from __future__ import annotations

from datetime import date, datetime
from urllib.parse import parse_qs, urlparse
from uuid import uuid4

from planner.domain.entities import Subtask, TaskSnapshot
from planner.services.calendar_links import calendar_link
from planner.services.followups import follow_ups

NOW = datetime(2026, 6, 10, 15, 0)


def _task(**overrides) -> TaskSnapshot:
    values = dict(
        id=uuid4(),
        title="Send invites",
        description="Guest list in the shared drive",
        status="todo",
        priority=3,
        due_date=None,
        category="general",
        owner_id=None,
        assignee="Ana",
        subtasks=(),
        tags=frozenset(),
        created_at=NOW,
        last_update_at=None,
        deleted=False,
    )
    values.update(overrides)
    return TaskSnapshot(**values)


def test_follow_ups() -> None:
    tasks = [
        _task(title="Late", due_date=date(2026, 6, 8)),
        _task(title="Today", due_date=date(2026, 6, 10)),
        _task(title="Soon", due_date=date(2026, 6, 12)),
        _task(title="Later", due_date=date(2026, 6, 13)),
        _task(title="Nobody", assignee=None, due_date=date(2026, 6, 8)),
        _task(title="Finished", status="done", due_date=date(2026, 6, 8)),
        _task(title="Undated"),
    ]

    reminders = follow_ups(tasks, NOW)

    assert [reminder.message for reminder in reminders] == [
        "Ana is overdue on 'Late'",
        "Nudge Ana about 'Today' (Due in 0 days)",
        "Nudge Ana about 'Soon' (Due in 2 days)",
    ]
    assert reminders[0].overdue


def test_calendar_link_requires_due_date() -> None:
    assert calendar_link(_task()) is None


def test_calendar_link_lists_subtasks() -> None:
    task = _task(due_date=date(2026, 6, 20), subtasks=(Subtask("Draft", True), Subtask("Mail")))

    query = parse_qs(urlparse(calendar_link(task)).query)

    assert query["action"] == ["TEMPLATE"]
    assert query["text"] == ["DEADLINE: Send invites"]
    assert query["dates"] == ["20260620/20260620"]
    details = query["details"][0]
    assert details.startswith("CONTEXT:\nGuest list in the shared drive\n\nACTION PLAN:")
    assert "[x] Draft\n[ ] Mail" in details
