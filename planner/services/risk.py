from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from planner.domain.entities import RiskAssessment, ScoredTask, TaskSnapshot
from planner.domain.enums import RiskLevel, TaskStatus

OVERDUE_POINTS = 50
DUE_SOON_POINTS = 30
DUE_SOON_DAYS = 3
STALE_LONG_POINTS = 30
STALE_LONG_DAYS = 14
STALE_SHORT_POINTS = 10
STALE_SHORT_DAYS = 7
BLOCKED_POINTS = 25
PRIORITY_WEIGHT = 5

HIGH_THRESHOLD = 50
MEDIUM_THRESHOLD = 25


def score_task(task: TaskSnapshot, now: datetime) -> RiskAssessment:
    score = 0
    reasons: list[str] = []

    if task.due_date is not None:
        days_until_due = days_until(task.due_date, now)
        if days_until_due < 0:
            score += OVERDUE_POINTS
            reasons.append("OVERDUE")
        elif days_until_due <= DUE_SOON_DAYS:
            score += DUE_SOON_POINTS
            reasons.append("Due Soon")

    if task.status != TaskStatus.DONE.value:
        last_touch = task.last_update_at or task.created_at
        stale_days = days_since(last_touch, now)
        if stale_days >= STALE_LONG_DAYS:
            score += STALE_LONG_POINTS
            reasons.append("Stale (14d)")
        elif stale_days >= STALE_SHORT_DAYS:
            score += STALE_SHORT_POINTS
            reasons.append("Stale (7d)")

    if task.status == TaskStatus.BLOCKED.value:
        score += BLOCKED_POINTS
        reasons.append("Blocked")

    score += task.priority * PRIORITY_WEIGHT

    return RiskAssessment(score=score, reasons=tuple(reasons), level=risk_level(score))


def risk_level(score: int) -> RiskLevel:
    if score >= HIGH_THRESHOLD:
        return RiskLevel.HIGH
    if score >= MEDIUM_THRESHOLD:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def score_tasks(tasks: Iterable[TaskSnapshot], now: datetime) -> list[ScoredTask]:
    scored = []
    for task in tasks:
        assessment = score_task(task, now)
        scored.append(
            ScoredTask(
                snapshot=task,
                score=assessment.score,
                reasons=assessment.reasons,
                level=assessment.level,
            )
        )
    return scored


def days_until(due: date, now: datetime) -> int:
    """Calendar days from today to ``due``; negative once the date has passed."""
    return (due - now.date()).days


def days_since(moment: datetime, now: datetime) -> int:
    return (now - moment).days
