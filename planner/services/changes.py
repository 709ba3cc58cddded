from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from planner.domain.entities import FieldChange, TaskSnapshot

WATCHED_FIELDS: tuple[str, ...] = ("title", "description", "status", "priority")
EXTENDED_FIELDS: tuple[str, ...] = WATCHED_FIELDS + ("due_date", "category", "assignee", "tags")

_MISSING = object()


def diff_tasks(
    old: TaskSnapshot,
    new: TaskSnapshot,
    fields: tuple[str, ...] = WATCHED_FIELDS,
) -> list[FieldChange]:
    changes: list[FieldChange] = []
    for name in fields:
        before = getattr(old, name, _MISSING)
        after = getattr(new, name, _MISSING)
        if _differs(before, after):
            changes.append(
                FieldChange(
                    field=name,
                    old=None if before is _MISSING else before,
                    new=None if after is _MISSING else after,
                )
            )
    return changes


def _differs(before: Any, after: Any) -> bool:
    # a value present on only one side is a change even if both render alike
    if (before is None or before is _MISSING) != (after is None or after is _MISSING):
        return True
    return before != after


def changes_to_json(changes: list[FieldChange]) -> list[dict[str, Any]]:
    return [
        {"field": change.field, "from": _json_value(change.old), "to": _json_value(change.new)}
        for change in changes
    ]


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, tuple):
        return [_json_value(item) for item in value]
    return value
