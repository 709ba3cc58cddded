from __future__ import annotations

import argparse
import json
import logging
import sys

from planner.config import get_settings
from planner.domain.errors import PlannerError
from planner.infra.db import create_schema, init_db, make_engine, make_session_factory
from planner.infra.logging import setup_logging
from planner.infra.repository import EventRepository, TaskRepository
from planner.services.calendar_links import calendar_link
from planner.services.event_service import EventService
from planner.services.forms import parse_new_event, parse_uuid
from planner.services.subtasks import build_subtask_generator
from planner.services.task_service import TaskService

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="planner", description="Event planner maintenance commands")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="check the connection and create missing tables")

    briefing = sub.add_parser("briefing", help="live tasks ranked by risk")
    briefing.add_argument("--limit", type=int, default=10)

    sub.add_parser("follow-ups", help="assignees to nudge about due tasks")

    history = sub.add_parser("history", help="audit trail of one task")
    history.add_argument("task_id")

    show = sub.add_parser("show", help="one task with its subtasks and calendar link")
    show.add_argument("task_id")

    sub.add_parser("events", help="events with countdown and task progress")

    new_event = sub.add_parser("new-event", help="create an event, optionally from a template")
    new_event.add_argument("name")
    new_event.add_argument("event_date", help="YYYY-MM-DD")
    new_event.add_argument("--template", dest="template_id", default="")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(settings)

    engine = make_engine(settings.database_url)
    if args.command == "init-db":
        init_db(engine)
        create_schema(engine)
        print("Database ready.")
        return 0

    session_factory = make_session_factory(engine)
    service = TaskService(
        TaskRepository(session_factory),
        generator=build_subtask_generator(settings),
    )
    events = EventService(EventRepository(session_factory))

    try:
        if args.command == "briefing":
            for scored in service.risk_briefing(limit=args.limit):
                reasons = ", ".join(scored.reasons) or "-"
                print(f"[{scored.level.value:>4}] {scored.score:>3}  {scored.snapshot.title}  ({reasons})")
        elif args.command == "follow-ups":
            reminders = service.follow_ups()
            for reminder in reminders:
                print(reminder.message)
            if not reminders:
                print("No urgent follow-ups needed.")
        elif args.command == "history":
            for event in service.history(parse_uuid(args.task_id, "task id")):
                stamp = event.created_at.strftime("%Y-%m-%d %H:%M:%S")
                print(f"{stamp} {event.event_type} {json.dumps(event.changes)}")
        elif args.command == "show":
            task = service.get_task(parse_uuid(args.task_id, "task id"))
            if task is None:
                print("Task not found", file=sys.stderr)
                return 1
            print(f"{task.title} [{task.status}] priority {task.priority}")
            for subtask in task.subtasks:
                print(f"  {'[x]' if subtask.is_done else '[ ]'} {subtask.title}")
            link = calendar_link(task)
            if link:
                print(link)
        elif args.command == "events":
            for summary in events.list_events():
                print(
                    f"{summary.name} | {summary.info} | {summary.countdown} | "
                    f"{summary.completed_tasks}/{summary.total_tasks} done"
                )
        elif args.command == "new-event":
            request = parse_new_event(
                {"name": args.name, "event_date": args.event_date, "template_id": args.template_id}
            )
            if args.template_id and request.template_id is None:
                parse_uuid(args.template_id, "template id")
            created = events.create_event(request.name, request.event_date, template_id=request.template_id)
            print(f"Created event {created.id}")
    except PlannerError as exc:
        logger.error("Command %s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
