from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _empty_list() -> list:
    return []


class EventModel(Base):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    event_date = Column(Date, nullable=False)
    location = Column(String(200), nullable=True)
    summary = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class PersonModel(Base):
    __tablename__ = "people"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(120), nullable=False)
    email = Column(String(200), nullable=True)


class TemplateModel(Base):
    __tablename__ = "templates"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)


class TemplateTaskModel(Base):
    __tablename__ = "template_tasks"

    id = Column(Integer, primary_key=True)
    template_id = Column(Uuid, ForeignKey("templates.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(Integer, nullable=False, default=3)
    category = Column(String(50), nullable=False, default="general")
    relative_due_days = Column(Integer, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="todo", index=True)
    priority = Column(Integer, nullable=False, default=3)
    due_date = Column(Date, nullable=True)
    category = Column(String(50), nullable=False, default="general")
    owner_id = Column(Uuid, ForeignKey("people.id", ondelete="SET NULL"), nullable=True)
    assignee_text = Column(String(120), nullable=True)
    subtasks = Column(JSON, nullable=True)
    tags = Column(JSON, nullable=False, default=_empty_list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_update_at = Column(DateTime, nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)


class TaskEventModel(Base):
    __tablename__ = "task_events"

    id = Column(Integer, primary_key=True)
    task_id = Column(Uuid, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(String(30), nullable=False)
    changes = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
