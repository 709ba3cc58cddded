from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from .enums import DEFAULT_CATEGORY, DEFAULT_PRIORITY, RiskLevel, TaskStatus


@dataclass(frozen=True)
class Subtask:
    title: str
    is_done: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "is_done": self.is_done}


@dataclass(frozen=True)
class TaskSnapshot:
    id: UUID
    title: str
    description: Optional[str]
    status: str
    priority: int
    due_date: Optional[date]
    category: str
    owner_id: Optional[UUID]
    assignee: Optional[str]
    subtasks: tuple[Subtask, ...]
    tags: frozenset[str]
    created_at: datetime
    last_update_at: Optional[datetime]
    deleted: bool
    event_id: Optional[UUID] = None

    @property
    def is_done(self) -> bool:
        return self.status == TaskStatus.DONE.value


@dataclass(frozen=True)
class FieldChange:
    field: str
    old: Any
    new: Any


@dataclass(frozen=True)
class ChangeEvent:
    task_id: UUID
    event_type: str
    changes: list[dict[str, Any]]
    created_at: datetime
    id: int | None = None


@dataclass(frozen=True)
class RiskAssessment:
    score: int
    reasons: tuple[str, ...]
    level: RiskLevel


@dataclass(frozen=True)
class ScoredTask:
    snapshot: TaskSnapshot
    score: int
    reasons: tuple[str, ...]
    level: RiskLevel


@dataclass(frozen=True)
class TaskUpdate:
    """Incoming partial update. ``None`` and ``""`` both mean "leave as is"."""

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[int] = None
    due_date: Optional[date] = None
    category: Optional[str] = None
    owner_id: Optional[UUID] = None
    assignee: Optional[str] = None
    subtasks: Optional[tuple[Subtask, ...]] = None

    def present_fields(self) -> dict[str, Any]:
        present: dict[str, Any] = {}
        for item in fields(self):
            if item.name == "subtasks":
                continue
            value = getattr(self, item.name)
            if value is None or value == "":
                continue
            present[item.name] = value
        return present


@dataclass(frozen=True)
class NewTask:
    event_id: UUID
    title: str
    description: Optional[str] = None
    status: str = TaskStatus.TODO.value
    priority: int = DEFAULT_PRIORITY
    due_date: Optional[date] = None
    category: str = DEFAULT_CATEGORY
    owner_id: Optional[UUID] = None
    assignee: Optional[str] = None
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class EventEntity:
    id: UUID
    name: str
    event_date: date
    location: Optional[str]
    summary: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class EventUpdate:
    name: Optional[str] = None
    event_date: Optional[date] = None
    location: Optional[str] = None
    summary: Optional[str] = None

    def present_fields(self) -> dict[str, Any]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name) not in (None, "")
        }


@dataclass(frozen=True)
class EventSummary:
    id: UUID
    name: str
    info: str
    countdown: str
    completed_tasks: int
    total_tasks: int


@dataclass(frozen=True)
class PersonEntity:
    id: UUID
    name: str
    email: Optional[str]


@dataclass(frozen=True)
class TemplateTaskEntity:
    title: str
    description: Optional[str]
    priority: int
    category: str
    relative_due_days: Optional[int]


@dataclass(frozen=True)
class TemplateEntity:
    id: UUID
    name: str
    tasks: tuple[TemplateTaskEntity, ...] = ()


@dataclass(frozen=True)
class FollowUp:
    task_id: UUID
    assignee: str
    title: str
    days_until: int

    @property
    def overdue(self) -> bool:
        return self.days_until < 0

    @property
    def message(self) -> str:
        if self.overdue:
            return f"{self.assignee} is overdue on '{self.title}'"
        return f"Nudge {self.assignee} about '{self.title}' (Due in {self.days_until} days)"


@dataclass(frozen=True)
class NewEvent:
    name: str
    event_date: date
    template_id: Optional[UUID] = None
