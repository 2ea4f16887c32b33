"""
CLI (Command Line Interface).

Quick terminal commands on top of the same store and create-flows the
interactive mode uses, e.g.:

    classboard overview
    classboard list notes
    classboard add-semester --name "2026.1" --focus "Algorithms"
    classboard add-class --title "Calculus" --day Mon --time 08:00
    classboard export-agenda agenda.ics
    classboard interactive

Every command loads all collections first (one concurrent batch), exactly
like the dashboard does on startup.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional

from rich.logging import RichHandler
from rich.markup import escape

from classboard.backend import NOT_CONFIGURED_MESSAGE, RestClient, get_client
from classboard.config import get_config
from classboard.export_ics import export_agenda_to_ics
from classboard.flows import FLOWS, FlowOutcome, edit_draft, load_all, select_semester, submit
from classboard.model import ACTIVITY_STATUSES, AGENDA_TYPES, ATTENDANCE_STATUSES, CLASS_TIMES, NOTE_TAGS, WEEKDAYS
from classboard.render import console, print_collection, print_semesters, print_summary, println, record_line
from classboard.state import Store

COLLECTIONS = ("semesters", "classes", "notes", "activities", "agenda", "exams", "attendance")

# sub-command -> (create-flow, draft fields filled from the arguments)
ADD_COMMANDS: dict[str, tuple[str, tuple[str, ...]]] = {
    "add-semester": ("semester", ("name", "focus")),
    "add-class": ("class", ("title", "teacher", "day", "time")),
    "add-note": ("note", ("class_id", "topic", "detail", "tag")),
    "add-activity": ("activity", ("class_id", "title", "due_date", "status")),
    "add-agenda": ("agenda", ("type", "title", "date", "time", "class_id")),
    "add-exam": ("exam", ("class_id", "exam", "grade", "max")),
    "add-attendance": ("attendance", ("class_id", "date", "status")),
}

REQUIRED_HINTS = {
    "semester": "--name",
    "class": "--title, --day, --time and an existing semester",
    "note": "--class-id, --detail and a valid --tag",
    "activity": "--class-id, --title and a valid --status",
    "agenda": "--title, --date and a valid --type",
    "exam": "--class-id and --exam",
    "attendance": "--class-id, --date and a valid --status",
}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _open_store() -> tuple[Optional[Store], Optional[RestClient]]:
    """
    Create a store and load everything into it.
    Returns (None, None) when the backend is not configured.
    """
    cfg = get_config()
    if not cfg.has_backend_config:
        println(f"[bold red]Error:[/] {NOT_CONFIGURED_MESSAGE}")
        return None, None

    client = get_client(cfg)
    store = Store()
    load_all(store, client=client)
    return store, client


def _report_error(store: Store) -> int:
    if store.state.error:
        println(f"[bold red]Error:[/] {escape(store.state.error)}")
        return 1
    return 0


def _cmd_overview(store: Store) -> int:
    print_summary(store.state)
    print_semesters(store.state)
    return 1 if store.state.error else 0


def _cmd_list(args: argparse.Namespace, store: Store) -> int:
    if _report_error(store):
        return 1
    print_collection(args.collection, getattr(store.state, args.collection))
    return 0


def _cmd_add(args: argparse.Namespace, store: Store, client: RestClient) -> int:
    """
    Fill one draft from the arguments and run its create-flow.
    """
    if store.state.error:
        # a partially failed load does not block a create-flow
        println(f"[yellow]Warning:[/] {escape(store.state.error)}")

    entity, fields = ADD_COMMANDS[args.command]
    if entity == "class" and args.semester_id and not select_semester(store, args.semester_id):
        println(f"Unknown semester: {escape(args.semester_id)}")
        return 1

    edit_draft(store, entity, **{f: (getattr(args, f) or "") for f in fields})
    outcome = submit(store, entity, client=client)

    if outcome is FlowOutcome.INVALID:
        println(f"Missing or invalid input. Required: {REQUIRED_HINTS[entity]}.")
        return 1
    if outcome is FlowOutcome.FAILED:
        return _report_error(store)

    flow = FLOWS[entity]
    println(f"Added {entity}: {escape(record_line(flow.collection, flow.newest(store.state)))}")
    return 0


def _cmd_export_agenda(args: argparse.Namespace, store: Store) -> int:
    if _report_error(store):
        return 1

    out_path = (args.out or "").strip()
    if not out_path:
        println("Please provide output .ics path.")
        return 1
    if not store.state.agenda:
        println("No agenda items to export.")
        return 0

    n = export_agenda_to_ics(store.state.agenda, out_path)
    println(f"Exported {n} agenda items to: {escape(out_path)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="classboard", description="classboard CLI")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("overview", help="Show summary metrics and semesters")

    p_list = sub.add_parser("list", help="List one collection")
    p_list.add_argument("collection", choices=COLLECTIONS, help="Collection to list")

    p = sub.add_parser("add-semester", help="Register a semester")
    p.add_argument("--name", default="", help="Semester name (required)")
    p.add_argument("--focus", default="", help="Main focus of the semester")

    p = sub.add_parser("add-class", help="Add a class to the selected semester")
    p.add_argument("--semester-id", default="", help="Semester ID (default: first semester)")
    p.add_argument("--title", default="", help="Class title (required)")
    p.add_argument("--teacher", default="", help="Teacher name")
    p.add_argument("--day", default="", choices=WEEKDAYS, help="Weekday (required)")
    p.add_argument("--time", default="", choices=CLASS_TIMES, help="Start time (required)")

    p = sub.add_parser("add-note", help="Save a comment, question or review note")
    p.add_argument("--class-id", default="", help="Class ID (required)")
    p.add_argument("--topic", default="", help="Topic")
    p.add_argument("--detail", default="", help="Note text (required)")
    p.add_argument("--tag", default="comment", choices=NOTE_TAGS)

    p = sub.add_parser("add-activity", help="Add an activity")
    p.add_argument("--class-id", default="", help="Class ID (required)")
    p.add_argument("--title", default="", help="Activity title (required)")
    p.add_argument("--due-date", default="", help="Due date (YYYY-MM-DD)")
    p.add_argument("--status", default="planned", choices=ACTIVITY_STATUSES)

    p = sub.add_parser("add-agenda", help="Add an agenda event")
    p.add_argument("--type", default="class-session", choices=AGENDA_TYPES)
    p.add_argument("--title", default="", help="Event title (required)")
    p.add_argument("--date", default="", help="Date YYYY-MM-DD (required)")
    p.add_argument("--time", default="", help="Time HH:MM")
    p.add_argument("--class-id", default="", help="Class ID (optional)")

    p = sub.add_parser("add-exam", help="Record an exam grade")
    p.add_argument("--class-id", default="", help="Class ID (required)")
    p.add_argument("--exam", default="", help="Exam label (required)")
    p.add_argument("--grade", default="", help="Grade (default 0)")
    p.add_argument("--max", default="10", help="Maximum grade (default 10)")

    p = sub.add_parser("add-attendance", help="Record attendance")
    p.add_argument("--class-id", default="", help="Class ID (required)")
    p.add_argument("--date", default="", help="Date YYYY-MM-DD (required)")
    p.add_argument("--status", default="present", choices=ATTENDANCE_STATUSES)

    p_export = sub.add_parser("export-agenda", help="Export agenda items to .ics")
    p_export.add_argument("out", type=str, help="Output file path (e.g. agenda.ics)")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    store, client = _open_store()
    if store is None or client is None:
        raise SystemExit(1)

    if args.command == "overview":
        raise SystemExit(_cmd_overview(store))
    if args.command == "list":
        raise SystemExit(_cmd_list(args, store))
    if args.command in ADD_COMMANDS:
        raise SystemExit(_cmd_add(args, store, client))
    if args.command == "export-agenda":
        raise SystemExit(_cmd_export_agenda(args, store))

    if args.command == "interactive":
        from classboard.interactive import run_interactive

        run_interactive(store, client)
        raise SystemExit(0)

    raise SystemExit(2)
