from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, Optional, TypeVar
from uuid import UUID

from sqlalchemy import and_, case, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from planner.domain.entities import (
    ChangeEvent,
    EventEntity,
    PersonEntity,
    Subtask,
    TaskSnapshot,
    TemplateEntity,
    TemplateTaskEntity,
)
from planner.domain.enums import DEFAULT_CATEGORY, TaskStatus
from planner.domain.errors import NotFoundError, PersistenceError, PlannerError, RollbackFailureError
from planner.domain.filters import TaskFilters

from .models import (
    EventModel,
    PersonModel,
    TaskEventModel,
    TaskModel,
    TemplateModel,
    TemplateTaskModel,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_DONE = TaskStatus.DONE.value

# snapshot field name -> column name, where they differ
_COLUMN_NAMES = {"assignee": "assignee_text"}


def _subtasks_from_json(raw: Any) -> tuple[Subtask, ...]:
    if not raw:
        return ()
    return tuple(
        Subtask(title=str(item.get("title", "")), is_done=bool(item.get("is_done", False)))
        for item in raw
        if isinstance(item, dict)
    )


def _subtasks_to_json(subtasks: Iterable[Subtask]) -> list[dict[str, Any]] | None:
    payload = [subtask.to_dict() for subtask in subtasks]
    return payload or None


def _to_snapshot(model: TaskModel) -> TaskSnapshot:
    return TaskSnapshot(
        id=model.id,
        title=model.title,
        description=model.description,
        status=model.status,
        priority=model.priority,
        due_date=model.due_date,
        category=model.category,
        owner_id=model.owner_id,
        assignee=model.assignee_text,
        subtasks=_subtasks_from_json(model.subtasks),
        tags=frozenset(model.tags or ()),
        created_at=model.created_at,
        last_update_at=model.last_update_at,
        deleted=model.deleted,
        event_id=model.event_id,
    )


def _to_change_event(model: TaskEventModel) -> ChangeEvent:
    return ChangeEvent(
        id=model.id,
        task_id=model.task_id,
        event_type=model.event_type,
        changes=list(model.changes or []),
        created_at=model.created_at,
    )


def _to_event(model: EventModel) -> EventEntity:
    return EventEntity(
        id=model.id,
        name=model.name,
        event_date=model.event_date,
        location=model.location,
        summary=model.summary,
        created_at=model.created_at,
    )


def _to_columns(data: dict[str, Any]) -> dict[str, Any]:
    columns: dict[str, Any] = {}
    for key, value in data.items():
        if key == "subtasks":
            value = _subtasks_to_json(value)
        elif key == "tags":
            value = sorted(value)
        columns[_COLUMN_NAMES.get(key, key)] = value
    return columns


def _apply_filters(stmt, filters: TaskFilters) -> object:
    stmt = stmt.where(TaskModel.deleted.is_(False))
    if filters.event_id is not None:
        stmt = stmt.where(TaskModel.event_id == filters.event_id)
    if not filters.include_done:
        stmt = stmt.where(TaskModel.status != STATUS_DONE)
    if filters.with_due_date:
        stmt = stmt.where(TaskModel.due_date.is_not(None))
    return stmt


class _SessionRepository:
    def __init__(self, session_factory: sessionmaker, clock: Callable[[], datetime] = utcnow) -> None:
        self._session_factory = session_factory
        self._clock = clock

    def _transaction(self, work: Callable[[Session], T]) -> T:
        """Run ``work`` in one transaction: commit on success, roll back on any error."""
        session = self._session_factory()
        try:
            try:
                session.begin()
                result = work(session)
                session.commit()
            except Exception as exc:
                self._rollback(session, exc)
                if isinstance(exc, PlannerError):
                    raise
                if isinstance(exc, SQLAlchemyError):
                    raise PersistenceError(str(exc)) from exc
                raise
            return result
        finally:
            session.close()

    @staticmethod
    def _rollback(session: Session, exc: Exception) -> None:
        try:
            session.rollback()
        except Exception as rollback_exc:
            logger.critical("Rollback failed after %r: %r", exc, rollback_exc)
            raise RollbackFailureError(exc, rollback_exc) from rollback_exc
        logger.error("Transaction rolled back: %s", exc)


class TaskUnitOfWork:
    """Task queries bound to one open transaction."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self._session = session
        self._clock = clock

    def get_task(self, task_id: UUID) -> Optional[TaskSnapshot]:
        task = self._session.get(TaskModel, task_id)
        return _to_snapshot(task) if task else None

    def create_task(self, data: dict[str, Any]) -> TaskSnapshot:
        columns = _to_columns(data)
        columns.setdefault("category", DEFAULT_CATEGORY)
        columns.setdefault("tags", [])
        columns.setdefault("created_at", self._clock())
        task = TaskModel(**columns)
        self._session.add(task)
        self._session.flush()
        return _to_snapshot(task)

    def update_task(self, task_id: UUID, data: dict[str, Any]) -> TaskSnapshot:
        task = self._session.get(TaskModel, task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        for key, value in _to_columns(data).items():
            setattr(task, key, value)
        task.last_update_at = self._clock()
        self._session.flush()
        return _to_snapshot(task)

    def insert_change_event(self, task_id: UUID, event_type: str, changes: list[dict[str, Any]]) -> ChangeEvent:
        event = TaskEventModel(
            task_id=task_id,
            event_type=event_type,
            changes=changes,
            created_at=self._clock(),
        )
        self._session.add(event)
        self._session.flush()
        return _to_change_event(event)


class TaskRepository(_SessionRepository):
    def run_in_transaction(self, work: Callable[[TaskUnitOfWork], T]) -> T:
        return self._transaction(lambda session: work(TaskUnitOfWork(session, self._clock)))

    def list_tasks(self, filters: TaskFilters) -> list[TaskSnapshot]:
        with self._session_factory() as session:
            stmt = _apply_filters(select(TaskModel), filters)
            stmt = stmt.order_by(
                TaskModel.due_date.is_(None),
                TaskModel.due_date.asc(),
                TaskModel.priority.desc(),
                TaskModel.created_at.desc(),
            )
            return [_to_snapshot(task) for task in session.scalars(stmt)]

    def get_task(self, task_id: UUID) -> Optional[TaskSnapshot]:
        with self._session_factory() as session:
            task = session.get(TaskModel, task_id)
            return _to_snapshot(task) if task else None

    def create_task(self, data: dict[str, Any]) -> TaskSnapshot:
        return self.run_in_transaction(lambda uow: uow.create_task(data))

    def soft_delete_tasks(self, task_ids: list[UUID]) -> int:
        if not task_ids:
            return 0

        def _delete(session: Session) -> int:
            result = session.execute(
                update(TaskModel)
                .where(TaskModel.id.in_(task_ids), TaskModel.deleted.is_(False))
                .values(deleted=True)
            )
            return result.rowcount or 0

        return self._transaction(_delete)

    def list_change_events(self, task_id: UUID) -> list[ChangeEvent]:
        with self._session_factory() as session:
            stmt = (
                select(TaskEventModel)
                .where(TaskEventModel.task_id == task_id)
                .order_by(TaskEventModel.created_at.asc(), TaskEventModel.id.asc())
            )
            return [_to_change_event(event) for event in session.scalars(stmt)]


class EventRepository(_SessionRepository):
    def list_events(self) -> list[tuple[EventEntity, int, int]]:
        """Events with their (completed, total) counts of live tasks."""
        with self._session_factory() as session:
            stmt = (
                select(
                    EventModel,
                    func.count(case((TaskModel.status == STATUS_DONE, TaskModel.id))).label("completed"),
                    func.count(TaskModel.id).label("total"),
                )
                .outerjoin(
                    TaskModel,
                    and_(TaskModel.event_id == EventModel.id, TaskModel.deleted.is_(False)),
                )
                .group_by(EventModel.id)
                .order_by(EventModel.event_date.asc())
            )
            return [(_to_event(row[0]), row.completed, row.total) for row in session.execute(stmt)]

    def get_event(self, event_id: UUID) -> Optional[EventEntity]:
        with self._session_factory() as session:
            event = session.get(EventModel, event_id)
            return _to_event(event) if event else None

    def create_event(self, name: str, event_date: date, tasks: list[dict[str, Any]] | None = None) -> EventEntity:
        def _create(session: Session) -> EventEntity:
            event = EventModel(name=name, event_date=event_date, created_at=self._clock())
            session.add(event)
            session.flush()
            uow = TaskUnitOfWork(session, self._clock)
            for data in tasks or []:
                uow.create_task({**data, "event_id": event.id})
            return _to_event(event)

        return self._transaction(_create)

    def update_event(self, event_id: UUID, data: dict[str, Any]) -> EventEntity:
        def _update(session: Session) -> EventEntity:
            event = session.get(EventModel, event_id)
            if event is None:
                raise NotFoundError(f"Event {event_id} not found")
            for key, value in data.items():
                setattr(event, key, value)
            session.flush()
            return _to_event(event)

        return self._transaction(_update)

    def list_templates(self) -> list[TemplateEntity]:
        with self._session_factory() as session:
            templates = session.scalars(select(TemplateModel).order_by(TemplateModel.name.asc())).all()
            return [TemplateEntity(id=template.id, name=template.name) for template in templates]

    def get_template(self, template_id: UUID) -> Optional[TemplateEntity]:
        with self._session_factory() as session:
            template = session.get(TemplateModel, template_id)
            if template is None:
                return None
            rows = session.scalars(
                select(TemplateTaskModel)
                .where(TemplateTaskModel.template_id == template_id)
                .order_by(TemplateTaskModel.sort_order.asc(), TemplateTaskModel.id.asc())
            )
            tasks = tuple(
                TemplateTaskEntity(
                    title=row.title,
                    description=row.description,
                    priority=row.priority,
                    category=row.category,
                    relative_due_days=row.relative_due_days,
                )
                for row in rows
            )
            return TemplateEntity(id=template.id, name=template.name, tasks=tasks)

    def list_people(self) -> list[PersonEntity]:
        with self._session_factory() as session:
            people = session.scalars(select(PersonModel).order_by(PersonModel.name.asc()))
            return [PersonEntity(id=person.id, name=person.name, email=person.email) for person in people]
