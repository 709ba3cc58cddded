from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class TaskFilters:
    event_id: Optional[UUID] = None
    include_done: bool = False
    with_due_date: bool = False
