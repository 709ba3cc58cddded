from __future__ import annotations

from datetime import datetime
from typing import Iterable

from planner.domain.entities import FollowUp, TaskSnapshot

from .risk import days_until

NUDGE_WITHIN_DAYS = 2


def follow_ups(tasks: Iterable[TaskSnapshot], now: datetime) -> list[FollowUp]:
    """Reminders for assigned tasks that are overdue or due within two days."""
    reminders: list[FollowUp] = []
    for task in tasks:
        if task.due_date is None or not task.assignee or task.is_done:
            continue
        days_until_due = days_until(task.due_date, now)
        if days_until_due <= NUDGE_WITHIN_DAYS:
            reminders.append(
                FollowUp(task_id=task.id, assignee=task.assignee, title=task.title, days_until=days_until_due)
            )
    return reminders
