"""
Data access layer.

One fetch/add pair per record type. Rules:
- stateless: nothing is kept between calls
- each call is exactly one round trip (no retries, no caching)
- child tables are always read with their parent class joined in, on fetch
  AND on insert, so a freshly created row has the same shape as a loaded one
- errors (ConfigurationError, BackendError) propagate unchanged

Every function takes an optional `client`; without one, a client is built
from the environment configuration (which fails fast when unconfigured).
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from classboard.backend import get_client
from classboard.model import (
    Activity,
    AgendaItem,
    Attendance,
    Exam,
    Note,
    RecordId,
    SchoolClass,
    Semester,
)

logger = logging.getLogger(__name__)


class TableClient(Protocol):
    """
    Minimal table API the data access layer needs (see `RestClient`).
    """

    def select(self, table: str, columns: str, order: str, ascending: bool = True) -> list[dict[str, Any]]: ...
    def insert_one(self, table: str, payload: dict[str, Any], columns: str) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# Table contract
# ---------------------------------------------------------------------------

CLASS_JOIN = "class:classes(id,title)"

SEMESTER_COLUMNS = "id,name,focus,created_at"
CLASS_COLUMNS = "id,semester_id,title,teacher,schedule,created_at"
NOTE_COLUMNS = f"id,topic,detail,tag,created_at,{CLASS_JOIN}"
ACTIVITY_COLUMNS = f"id,title,due_date,status,created_at,{CLASS_JOIN}"
AGENDA_COLUMNS = f"id,type,title,date,time,created_at,{CLASS_JOIN}"
EXAM_COLUMNS = f"id,exam,grade,max,created_at,{CLASS_JOIN}"
ATTENDANCE_COLUMNS = f"id,date,status,created_at,{CLASS_JOIN}"


def _client(client: Optional[TableClient]) -> TableClient:
    return client if client is not None else get_client()


def _insert(client: Optional[TableClient], table: str, payload: dict[str, Any], columns: str) -> dict[str, Any]:
    row = _client(client).insert_one(table, payload, columns)
    logger.info("Created %s row id=%s", table, row.get("id"))
    return row


# ---------------------------------------------------------------------------
# Fetch
# ---------------------------------------------------------------------------


def fetch_semesters(client: Optional[TableClient] = None) -> list[Semester]:
    rows = _client(client).select("semesters", SEMESTER_COLUMNS, order="created_at", ascending=True)
    return [Semester.from_row(r) for r in rows]


def fetch_classes(client: Optional[TableClient] = None) -> list[SchoolClass]:
    rows = _client(client).select("classes", CLASS_COLUMNS, order="created_at", ascending=True)
    return [SchoolClass.from_row(r) for r in rows]


def fetch_notes(client: Optional[TableClient] = None) -> list[Note]:
    rows = _client(client).select("notes", NOTE_COLUMNS, order="created_at", ascending=False)
    return [Note.from_row(r) for r in rows]


def fetch_activities(client: Optional[TableClient] = None) -> list[Activity]:
    rows = _client(client).select("activities", ACTIVITY_COLUMNS, order="created_at", ascending=False)
    return [Activity.from_row(r) for r in rows]


def fetch_agenda_items(client: Optional[TableClient] = None) -> list[AgendaItem]:
    rows = _client(client).select("agenda_items", AGENDA_COLUMNS, order="date", ascending=True)
    return [AgendaItem.from_row(r) for r in rows]


def fetch_exams(client: Optional[TableClient] = None) -> list[Exam]:
    rows = _client(client).select("exams", EXAM_COLUMNS, order="created_at", ascending=False)
    return [Exam.from_row(r) for r in rows]


def fetch_attendance(client: Optional[TableClient] = None) -> list[Attendance]:
    rows = _client(client).select("attendance", ATTENDANCE_COLUMNS, order="created_at", ascending=False)
    return [Attendance.from_row(r) for r in rows]


# ---------------------------------------------------------------------------
# Add
# ---------------------------------------------------------------------------
# Inputs are already validated and trimmed by the create-flows.


def add_semester(name: str, focus: str, client: Optional[TableClient] = None) -> Semester:
    row = _insert(client, "semesters", {"name": name, "focus": focus}, SEMESTER_COLUMNS)
    return Semester.from_row(row)


def add_class(
    semester_id: RecordId,
    title: str,
    teacher: str,
    schedule: str,
    client: Optional[TableClient] = None,
) -> SchoolClass:
    payload = {"semester_id": semester_id, "title": title, "teacher": teacher, "schedule": schedule}
    return SchoolClass.from_row(_insert(client, "classes", payload, CLASS_COLUMNS))


def add_note(
    class_id: RecordId,
    topic: str,
    detail: str,
    tag: str,
    client: Optional[TableClient] = None,
) -> Note:
    payload = {"class_id": class_id, "topic": topic, "detail": detail, "tag": tag}
    return Note.from_row(_insert(client, "notes", payload, NOTE_COLUMNS))


def add_activity(
    class_id: RecordId,
    title: str,
    due_date: Optional[str],
    status: str,
    client: Optional[TableClient] = None,
) -> Activity:
    # an empty date input means "no due date", not an invalid date
    payload = {"class_id": class_id, "title": title, "due_date": due_date or None, "status": status}
    return Activity.from_row(_insert(client, "activities", payload, ACTIVITY_COLUMNS))


def add_agenda_item(
    class_id: Optional[RecordId],
    type: str,
    title: str,
    date: str,
    time: Optional[str],
    client: Optional[TableClient] = None,
) -> AgendaItem:
    payload = {
        "class_id": class_id or None,
        "type": type,
        "title": title,
        "date": date,
        "time": time or None,
    }
    return AgendaItem.from_row(_insert(client, "agenda_items", payload, AGENDA_COLUMNS))


def add_exam(
    class_id: RecordId,
    exam: str,
    grade: float,
    max: float,
    client: Optional[TableClient] = None,
) -> Exam:
    payload = {"class_id": class_id, "exam": exam, "grade": grade, "max": max}
    return Exam.from_row(_insert(client, "exams", payload, EXAM_COLUMNS))


def add_attendance(
    class_id: RecordId,
    date: str,
    status: str,
    client: Optional[TableClient] = None,
) -> Attendance:
    payload = {"class_id": class_id, "date": date, "status": status}
    return Attendance.from_row(_insert(client, "attendance", payload, ATTENDANCE_COLUMNS))
