from __future__ import annotations

from enum import StrEnum


class TaskStatus(StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "med"
    HIGH = "high"


class ChangeEventType(StrEnum):
    UPDATED = "UPDATED"


MIN_PRIORITY = 1
MAX_PRIORITY = 5
DEFAULT_PRIORITY = 3
DEFAULT_CATEGORY = "general"
