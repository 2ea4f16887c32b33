from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.markup import escape

from classboard.export_ics import export_agenda_to_ics
from classboard.flows import FLOWS, FlowOutcome, edit_draft, load_all, select_semester, submit
from classboard.model import ACTIVITY_STATUSES, AGENDA_TYPES, ATTENDANCE_STATUSES, CLASS_TIMES, NOTE_TAGS, WEEKDAYS
from classboard.render import print_collection, print_semesters, print_summary, println, prompt, record_line
from classboard.service import TableClient
from classboard.state import Store, active_semester_classes

# (draft field, label, allowed values or None)
FormField = tuple[str, str, Optional[tuple[str, ...]]]

FORMS: dict[str, list[FormField]] = {
    "semester": [("name", "Semester name", None), ("focus", "Focus", None)],
    "class": [
        ("title", "Class title", None),
        ("teacher", "Teacher", None),
        ("day", "Weekday", WEEKDAYS),
        ("time", "Time", CLASS_TIMES),
    ],
    "note": [
        ("class_id", "Class ID", None),
        ("topic", "Topic", None),
        ("detail", "Comment or question", None),
        ("tag", "Tag", NOTE_TAGS),
    ],
    "activity": [
        ("class_id", "Class ID", None),
        ("title", "Activity", None),
        ("due_date", "Due date (YYYY-MM-DD)", None),
        ("status", "Status", ACTIVITY_STATUSES),
    ],
    "agenda": [
        ("type", "Type", AGENDA_TYPES),
        ("class_id", "Class ID (optional)", None),
        ("title", "Title", None),
        ("date", "Date (YYYY-MM-DD)", None),
        ("time", "Time (HH:MM)", None),
    ],
    "exam": [
        ("class_id", "Class ID", None),
        ("exam", "Exam", None),
        ("grade", "Grade", None),
        ("max", "Max", None),
    ],
    "attendance": [
        ("class_id", "Class ID", None),
        ("date", "Date (YYYY-MM-DD)", None),
        ("status", "Status", ATTENDANCE_STATUSES),
    ],
}

MENU: list[tuple[str, str]] = [
    ("1", "Select semester"),
    ("2", "Add semester"),
    ("3", "Add class to active semester"),
    ("4", "Add note"),
    ("5", "Add activity"),
    ("6", "Add agenda event"),
    ("7", "Add exam grade"),
    ("8", "Record attendance"),
    ("9", "View a collection"),
    ("10", "Export agenda .ics"),
    ("11", "Reload data"),
    ("0", "Exit"),
]

CREATE_CHOICES = {
    "2": "semester",
    "3": "class",
    "4": "note",
    "5": "activity",
    "6": "agenda",
    "7": "exam",
    "8": "attendance",
}


def run_interactive(store: Store, client: TableClient) -> None:
    """
    Interactive menu loop. The store is expected to be loaded already.
    """
    while True:
        print_summary(store.state)

        choice = prompt("\n" + "".join(f"[{k}] {label}\n" for k, label in MENU) + "Select: ").strip()

        if choice == "0":
            println("Bye.")
            return

        if choice == "1":
            _flow_select_semester(store)
        elif choice in CREATE_CHOICES:
            _flow_create(store, client, CREATE_CHOICES[choice])
        elif choice == "9":
            _flow_view(store)
        elif choice == "10":
            _flow_export(store)
        elif choice == "11":
            store.update(error="")
            if load_all(store, client=client):
                println("Data reloaded.")
        else:
            println("Invalid choice.")


def _flow_select_semester(store: Store) -> None:
    print_semesters(store.state)
    if not store.state.semesters:
        return

    pick = prompt("Semester ID [blank = back]: ").strip()
    if not pick:
        return
    if select_semester(store, pick):
        println(f"Active semester: {escape(pick)}")
    else:
        println(f"Unknown semester: {escape(pick)}")


def _show_class_options(store: Store, entity: str) -> None:
    if entity == "semester":
        return
    if entity == "class":
        print_collection("classes", active_semester_classes(store.state), title="Classes of the active semester")
    else:
        print_collection("classes", store.state.classes, title="Classes")


def _fill_draft(store: Store, entity: str) -> None:
    """
    Ask for every field of one draft. Blank keeps the current value
    (so a failed submit can be retried), '-' clears it.
    """
    flow = FLOWS[entity]
    for field, label, choices in FORMS[entity]:
        current = getattr(getattr(store.state, flow.draft_field), field)
        options = f" ({'/'.join(choices)})" if choices else ""
        value = prompt(f"{label}{options} [{current}]: ").strip()
        if value == "-":
            value = ""
        elif not value:
            value = current
        if choices and value and value not in choices:
            println(f"Invalid value: {escape(value)}")
            value = current
        edit_draft(store, entity, **{field: value})


def _flow_create(store: Store, client: TableClient, entity: str) -> None:
    flow = FLOWS[entity]
    _show_class_options(store, entity)
    _fill_draft(store, entity)

    outcome = submit(store, entity, client=client)
    if outcome is FlowOutcome.INVALID:
        println("Required fields missing, nothing was saved.")
        return
    if outcome is FlowOutcome.FAILED:
        println(f"[bold red]Not saved:[/] {escape(store.state.error)} (your input is kept, try again)")
        return

    println(f"Saved: {escape(record_line(flow.collection, flow.newest(store.state)))}")


def _flow_view(store: Store) -> None:
    names = ["semesters", "classes", "notes", "activities", "agenda", "exams", "attendance"]
    for i, name in enumerate(names, start=1):
        println(f"{i}) {name}")

    pick = prompt("Choose collection [blank = back]: ").strip()
    if not pick:
        return
    if not pick.isdigit() or not (1 <= int(pick) <= len(names)):
        println("Out of range.")
        return

    name = names[int(pick) - 1]
    if name == "semesters":
        print_semesters(store.state)
    else:
        print_collection(name, getattr(store.state, name))


def _flow_export(store: Store) -> None:
    if not store.state.agenda:
        println("No agenda items.")
        return

    downloads = Path.home() / "Downloads"
    default_name = "classboard-agenda.ics"

    out_in = prompt(f"Please enter desired file name, default is [{default_name}]: ").strip()
    out_path = downloads / out_in if out_in else downloads / default_name

    # enforce .ics extension
    if out_path.suffix.lower() != ".ics":
        out_path = out_path.with_suffix(".ics")

    n = export_agenda_to_ics(store.state.agenda, out_path)
    println(f"\nExported {n} agenda items.")
    println(f"Saved to: {escape(str(out_path.resolve()))}")
