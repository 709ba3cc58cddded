from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Callable, Optional
from uuid import UUID

from planner.domain.entities import (
    ChangeEvent,
    FollowUp,
    NewTask,
    ScoredTask,
    Subtask,
    TaskSnapshot,
    TaskUpdate,
)
from planner.domain.enums import ChangeEventType
from planner.domain.errors import NotFoundError
from planner.domain.filters import TaskFilters
from planner.infra.models import utcnow
from planner.infra.repository import TaskRepository, TaskUnitOfWork

from .changes import changes_to_json, diff_tasks
from .followups import follow_ups
from .risk import score_tasks
from .subtasks import SubtaskGenerator

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(
        self,
        repo: TaskRepository,
        generator: Optional[SubtaskGenerator] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repo
        self._generator = generator or SubtaskGenerator()
        self._clock = clock

    def get_task(self, task_id: UUID) -> TaskSnapshot | None:
        task = self._repo.get_task(task_id)
        if task is None or task.deleted:
            return None
        return task

    def create_task(self, new_task: NewTask, use_ai: bool = False) -> TaskSnapshot:
        data = self._normalize_data(vars(new_task))
        if use_ai:
            data["subtasks"] = self._generator.generate(new_task.title, new_task.description)
        return self._repo.create_task(data)

    def update_task(self, task_id: UUID, update: TaskUpdate, trigger_ai: bool = False) -> TaskSnapshot:
        """Apply a partial update and record its audit event in one transaction.

        AI suggestions are fetched before the transaction opens and appended
        after the manual subtasks. Raises NotFoundError, PersistenceError or
        RollbackFailureError; on any of them nothing was committed.
        """
        suggested = self._suggest_subtasks(task_id, update) if trigger_ai else []

        def _work(uow: TaskUnitOfWork) -> TaskSnapshot:
            old = uow.get_task(task_id)
            if old is None or old.deleted:
                raise NotFoundError(f"Task {task_id} not found")

            data = self._normalize_data(update.present_fields())
            manual = list(update.subtasks or ())
            if manual or suggested:
                data["subtasks"] = (manual or list(old.subtasks)) + suggested

            new = uow.update_task(task_id, data)
            changes = diff_tasks(old, new)
            if changes:
                uow.insert_change_event(task_id, ChangeEventType.UPDATED.value, changes_to_json(changes))
            return new

        task = self._repo.run_in_transaction(_work)
        logger.info("Task %s updated", task_id)
        return task

    def delete_task(self, task_id: UUID) -> None:
        self._repo.soft_delete_tasks([task_id])

    def delete_tasks(self, task_ids: list[UUID]) -> int:
        return self._repo.soft_delete_tasks(task_ids)

    def history(self, task_id: UUID) -> list[ChangeEvent]:
        return self._repo.list_change_events(task_id)

    def event_board(
        self,
        event_id: UUID,
        show_all: bool = False,
        now: datetime | None = None,
    ) -> dict[str, list[ScoredTask]]:
        tasks = self._repo.list_tasks(TaskFilters(event_id=event_id, include_done=show_all))
        grouped: dict[str, list[ScoredTask]] = {}
        for scored in score_tasks(tasks, now or self._clock()):
            grouped.setdefault(scored.snapshot.category, []).append(scored)
        return grouped

    def risk_briefing(self, now: datetime | None = None, limit: int | None = None) -> list[ScoredTask]:
        tasks = self._repo.list_tasks(TaskFilters())
        ranked = sorted(score_tasks(tasks, now or self._clock()), key=lambda scored: -scored.score)
        return ranked[:limit] if limit is not None else ranked

    def follow_ups(self, now: datetime | None = None) -> list[FollowUp]:
        tasks = self._repo.list_tasks(TaskFilters(with_due_date=True))
        return follow_ups(tasks, now or self._clock())

    def _suggest_subtasks(self, task_id: UUID, update: TaskUpdate) -> list[Subtask]:
        title = update.title
        description = update.description
        if not title:
            current = self.get_task(task_id)
            if current is None:
                raise NotFoundError(f"Task {task_id} not found")
            title = current.title
            description = description or current.description
        return self._generator.generate(title, description)

    @staticmethod
    def _normalize_data(data: dict) -> dict:
        normalized = dict(data)
        if isinstance(normalized.get("status"), Enum):
            normalized["status"] = normalized["status"].value
        return normalized
