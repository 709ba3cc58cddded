from __future__ import annotations

from urllib.parse import urlencode

from planner.domain.entities import TaskSnapshot

GOOGLE_CALENDAR_URL = "https://calendar.google.com/calendar/render"


def calendar_link(task: TaskSnapshot) -> str | None:
    if task.due_date is None:
        return None

    lines = [f"CONTEXT:\n{task.description or ''}\n\nACTION PLAN:"]
    for subtask in task.subtasks:
        mark = "[x]" if subtask.is_done else "[ ]"
        lines.append(f"{mark} {subtask.title}")
    details = "\n".join(lines) + "\n\n(Generated by Event Planner)"

    day = task.due_date.strftime("%Y%m%d")
    query = urlencode(
        {
            "action": "TEMPLATE",
            "text": f"DEADLINE: {task.title}",
            "details": details,
            "dates": f"{day}/{day}",
        }
    )
    return f"{GOOGLE_CALENDAR_URL}?{query}"
