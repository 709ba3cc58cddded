from __future__ import annotations

import math
from datetime import date, datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from planner.domain.entities import (
    EventEntity,
    EventSummary,
    EventUpdate,
    PersonEntity,
    TemplateEntity,
)
from planner.domain.errors import NotFoundError
from planner.infra.models import utcnow
from planner.infra.repository import EventRepository


class EventService:
    def __init__(self, repo: EventRepository, clock: Callable[[], datetime] = utcnow) -> None:
        self._repo = repo
        self._clock = clock

    def list_events(self, now: datetime | None = None) -> list[EventSummary]:
        now = now or self._clock()
        summaries = []
        for event, completed, total in self._repo.list_events():
            info = event.event_date.strftime("%b %d, %Y")
            if event.location:
                info += f" • {event.location}"
            summaries.append(
                EventSummary(
                    id=event.id,
                    name=event.name,
                    info=info,
                    countdown=countdown(event.event_date, now),
                    completed_tasks=completed,
                    total_tasks=total,
                )
            )
        return summaries

    def get_event(self, event_id: UUID) -> Optional[EventEntity]:
        return self._repo.get_event(event_id)

    def create_event(self, name: str, event_date: date, template_id: UUID | None = None) -> EventEntity:
        tasks = []
        if template_id is not None:
            template = self._repo.get_template(template_id)
            if template is None:
                raise NotFoundError(f"Template {template_id} not found")
            tasks = _tasks_from_template(template, event_date)
        return self._repo.create_event(name, event_date, tasks)

    def update_event(self, event_id: UUID, update: EventUpdate) -> EventEntity:
        return self._repo.update_event(event_id, update.present_fields())

    def list_templates(self) -> list[TemplateEntity]:
        return self._repo.list_templates()

    def list_people(self) -> list[PersonEntity]:
        return self._repo.list_people()


def countdown(event_date: date, now: datetime) -> str:
    start = datetime(event_date.year, event_date.month, event_date.day, tzinfo=now.tzinfo)
    days_left = math.ceil((start - now).total_seconds() / 86400)
    if days_left < 0:
        return "Event passed"
    if days_left == 0:
        return "Today!"
    return f"{days_left} days left"


def _tasks_from_template(template: TemplateEntity, event_date: date) -> list[dict]:
    tasks = []
    for item in template.tasks:
        tasks.append(
            {
                "title": item.title,
                "description": item.description,
                "priority": item.priority,
                "category": item.category,
                "due_date": event_date - timedelta(days=item.relative_due_days or 0),
            }
        )
    return tasks
