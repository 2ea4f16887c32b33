"""
Terminal rendering shared by the CLI and the interactive mode.

Everything is printed through one rich Console; tables use the same
simple box style for every collection.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from classboard.state import AppState, active_semester, classes_by_semester, dashboard_summary

console = Console()


def println(msg: str = "") -> None:
    console.print(msg)


def prompt(msg: str) -> str:
    return console.input(msg, markup=False)


def _class_title(record: Any) -> str:
    klass = getattr(record, "klass", None)
    return klass.title if klass and klass.title else "(no class)"


def _num(x: float) -> str:
    return f"{x:g}"


Column = tuple[str, Callable[[Any], str]]

COLUMNS: dict[str, list[Column]] = {
    "semesters": [
        ("ID", lambda r: str(r.id)),
        ("Name", lambda r: r.name),
        ("Focus", lambda r: r.focus),
    ],
    "classes": [
        ("ID", lambda r: str(r.id)),
        ("Semester", lambda r: str(r.semester_id)),
        ("Title", lambda r: r.title),
        ("Teacher", lambda r: r.teacher),
        ("Schedule", lambda r: r.schedule),
    ],
    "notes": [
        ("Topic", lambda r: r.topic or "(note)"),
        ("Class", _class_title),
        ("Tag", lambda r: r.tag),
        ("Detail", lambda r: r.detail),
    ],
    "activities": [
        ("Title", lambda r: r.title),
        ("Class", _class_title),
        ("Due", lambda r: r.due_date or "-"),
        ("Status", lambda r: r.status),
    ],
    "agenda": [
        ("Date", lambda r: r.date),
        ("Time", lambda r: r.time or ""),
        ("Type", lambda r: r.type),
        ("Title", lambda r: r.title),
        ("Class", lambda r: r.klass.title if r.klass else ""),
    ],
    "exams": [
        ("Exam", lambda r: r.exam),
        ("Class", _class_title),
        ("Grade", lambda r: f"{_num(r.grade)}/{_num(r.max)}"),
    ],
    "attendance": [
        ("Date", lambda r: r.date),
        ("Class", _class_title),
        ("Status", lambda r: r.status),
    ],
}


def record_line(collection: str, record: Any) -> str:
    return " | ".join(getter(record) for _, getter in COLUMNS[collection] if getter(record))


def print_collection(collection: str, records: Sequence[Any], title: str | None = None) -> None:
    if not records:
        println(f"No {collection} yet.")
        return

    table = Table(title=title or collection.capitalize(), box=box.SIMPLE)
    for header, _ in COLUMNS[collection]:
        table.add_column(header)
    for r in records:
        table.add_row(*(Text(getter(r)) for _, getter in COLUMNS[collection]))
    console.print(table)


def print_summary(state: AppState) -> None:
    summary = dashboard_summary(state)
    println("\n=== classboard ===")
    if state.loading:
        println("Loading data from the backend...")
    if state.error:
        println(f"[bold red]Error:[/] {escape(state.error)}")
    println(
        f"Active semester: [bold cyan]{escape(summary.active_semester_name or '-')}[/] | "
        f"Classes: [yellow]{summary.class_count}[/] | "
        f"Activities: [yellow]{summary.activity_count}[/]"
    )
    println(
        f"Attendance: [green]{summary.attendance_rate}%[/] | "
        f"Average grade: [green]{summary.average_grade:.1f}[/]"
    )


def print_semesters(state: AppState) -> None:
    if not state.semesters:
        println("No semesters yet.")
        return

    groups = classes_by_semester(state.classes)
    active = active_semester(state)
    table = Table(title="Semesters", box=box.SIMPLE)
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Focus")
    table.add_column("Classes", justify="right")
    for s in state.semesters:
        name = f"[bold cyan]{escape(s.name)}[/] *" if active is not None and s.id == active.id else escape(s.name)
        table.add_row(str(s.id), name, escape(s.focus) or "-", str(len(groups.get(s.id, []))))
    console.print(table)
