from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional
from uuid import UUID

from planner.domain.entities import EventUpdate, NewEvent, NewTask, Subtask, TaskUpdate
from planner.domain.enums import DEFAULT_CATEGORY, DEFAULT_PRIORITY, MAX_PRIORITY, MIN_PRIORITY
from planner.domain.errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"

Form = Mapping[str, Any]


def parse_task_update(form: Form) -> TaskUpdate:
    """Build a partial update; blank inputs mean "no change"."""
    return TaskUpdate(
        title=_text(form, "title"),
        description=_text(form, "description"),
        status=_text(form, "status"),
        priority=_priority(form),
        due_date=_date(form, "due_date"),
        category=_text(form, "category"),
        owner_id=_optional_uuid(form, "owner_id"),
        assignee=_text(form, "assignee_text"),
        subtasks=_subtasks(form),
    )


def parse_new_task(form: Form) -> NewTask:
    event_id = _optional_uuid(form, "event_id")
    if event_id is None:
        raise ValidationError("You must select an Event.")
    title = _text(form, "title")
    if title is None:
        raise ValidationError("Title is required.")
    return NewTask(
        event_id=event_id,
        title=title,
        description=_text(form, "description"),
        priority=_priority(form) or DEFAULT_PRIORITY,
        due_date=_date(form, "due_date"),
        category=_text(form, "category") or DEFAULT_CATEGORY,
        owner_id=_optional_uuid(form, "owner_id"),
        assignee=_text(form, "assignee_text"),
    )


def parse_new_event(form: Form) -> NewEvent:
    name = _text(form, "name")
    if name is None:
        raise ValidationError("Event name is required.")
    event_date = _date(form, "event_date")
    if event_date is None:
        raise ValidationError("Event date must be YYYY-MM-DD.")
    return NewEvent(name=name, event_date=event_date, template_id=_optional_uuid(form, "template_id"))


def parse_event_update(form: Form) -> EventUpdate:
    return EventUpdate(
        name=_text(form, "name"),
        event_date=_date(form, "event_date"),
        location=_text(form, "location"),
        summary=_text(form, "summary"),
    )


def ai_requested(form: Form) -> bool:
    return _text(form, "action") == "generate_ai" or _text(form, "use_ai") == "true"


def parse_uuid(value: Any, label: str = "id") -> UUID:
    try:
        return UUID(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid {label}") from exc


def parse_task_ids(form: Form) -> list[UUID]:
    ids = []
    for raw in _values(form, "task_ids"):
        try:
            ids.append(UUID(raw.strip()))
        except ValueError:
            continue
    return ids


def _values(form: Form, key: str) -> list[str]:
    value = form.get(key)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def _text(form: Form, key: str) -> Optional[str]:
    values = _values(form, key)
    if not values:
        return None
    return values[0].strip() or None


def _priority(form: Form) -> Optional[int]:
    raw = _text(form, "priority")
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return max(MIN_PRIORITY, min(MAX_PRIORITY, value))


def _date(form: Form, key: str) -> Optional[date]:
    raw = _text(form, key)
    if raw is None:
        return None
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        return None


def _optional_uuid(form: Form, key: str) -> Optional[UUID]:
    raw = _text(form, key)
    if raw is None:
        return None
    try:
        return UUID(raw)
    except ValueError:
        return None


def _subtasks(form: Form) -> Optional[tuple[Subtask, ...]]:
    subtasks = []
    for index, title in enumerate(_values(form, "subtask_title")):
        if not title.strip():
            continue
        done = _text(form, f"subtask_done_{index}") == "on"
        subtasks.append(Subtask(title=title.strip(), is_done=done))
    return tuple(subtasks) or None
