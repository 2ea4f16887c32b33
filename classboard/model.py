"""
Central data model definitions used across the project.

This module defines the canonical structure of the seven record types and
of their drafts so that:
- all modules share the same field names
- backend rows are normalized in exactly one place (`from_row`)
- form input stays raw text until a create-flow validates and coerces it

Records are frozen: once the backend has confirmed a row, it never changes
inside this application.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

RecordId = Union[int, str]


# ---------------------------------------------------------------------------
# Allowed values
# ---------------------------------------------------------------------------

NOTE_TAGS = ("comment", "question", "review")
ACTIVITY_STATUSES = ("planned", "in-progress", "done")
AGENDA_TYPES = ("class-session", "exam", "submission", "study")
ATTENDANCE_STATUSES = ("present", "absent", "excused")

# Options offered by the class form
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
CLASS_TIMES = (
    "07:00",
    "08:00",
    "09:00",
    "10:00",
    "11:00",
    "13:00",
    "14:00",
    "15:00",
    "16:00",
    "18:00",
    "19:00",
    "20:00",
    "21:00",
)

DEFAULT_EXAM_MAX = 10.0


def _text(x: Any) -> str:
    return "" if x is None else str(x)


def as_number(x: Any, default: float = 0.0) -> float:
    """
    Coerce a backend or form value to float.
    Empty and non-numeric values become `default`.
    """
    if x is None or isinstance(x, bool):
        return default
    if isinstance(x, (int, float)):
        return float(x)
    s = str(x).strip()
    if not s:
        return default
    try:
        return float(s)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ClassRef:
    """
    Parent class as joined into child rows (`class:classes(id,title)`).
    """

    id: RecordId
    title: str

    @classmethod
    def from_row(cls, row: Any) -> Optional["ClassRef"]:
        if not isinstance(row, dict) or row.get("id") is None:
            return None
        return cls(id=row["id"], title=_text(row.get("title")))


@dataclass(frozen=True)
class Semester:
    id: RecordId
    name: str
    focus: str
    created_at: Optional[str]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Semester":
        return cls(
            id=row["id"],
            name=_text(row.get("name")),
            focus=_text(row.get("focus")),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class SchoolClass:
    """
    One class (discipline) of a semester.

    `schedule` is stored as one string: "<day> <time>", e.g. "Mon 08:00".
    """

    id: RecordId
    semester_id: RecordId
    title: str
    teacher: str
    schedule: str
    created_at: Optional[str]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SchoolClass":
        return cls(
            id=row["id"],
            semester_id=row.get("semester_id"),
            title=_text(row.get("title")),
            teacher=_text(row.get("teacher")),
            schedule=_text(row.get("schedule")),
            created_at=row.get("created_at"),
        )


@dataclass(frozen=True)
class Note:
    id: RecordId
    topic: str
    detail: str
    tag: str
    created_at: Optional[str]
    klass: Optional[ClassRef]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Note":
        return cls(
            id=row["id"],
            topic=_text(row.get("topic")),
            detail=_text(row.get("detail")),
            tag=_text(row.get("tag")),
            created_at=row.get("created_at"),
            klass=ClassRef.from_row(row.get("class")),
        )


@dataclass(frozen=True)
class Activity:
    id: RecordId
    title: str
    due_date: Optional[str]
    status: str
    created_at: Optional[str]
    klass: Optional[ClassRef]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Activity":
        return cls(
            id=row["id"],
            title=_text(row.get("title")),
            due_date=row.get("due_date") or None,
            status=_text(row.get("status")),
            created_at=row.get("created_at"),
            klass=ClassRef.from_row(row.get("class")),
        )


@dataclass(frozen=True)
class AgendaItem:
    """
    One agenda entry. The class association is optional.
    """

    id: RecordId
    type: str
    title: str
    date: str
    time: Optional[str]
    created_at: Optional[str]
    klass: Optional[ClassRef]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "AgendaItem":
        return cls(
            id=row["id"],
            type=_text(row.get("type")),
            title=_text(row.get("title")),
            date=_text(row.get("date")),
            time=row.get("time") or None,
            created_at=row.get("created_at"),
            klass=ClassRef.from_row(row.get("class")),
        )


@dataclass(frozen=True)
class Exam:
    id: RecordId
    exam: str
    grade: float
    max: float
    created_at: Optional[str]
    klass: Optional[ClassRef]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Exam":
        return cls(
            id=row["id"],
            exam=_text(row.get("exam")),
            grade=as_number(row.get("grade")),
            max=as_number(row.get("max"), DEFAULT_EXAM_MAX),
            created_at=row.get("created_at"),
            klass=ClassRef.from_row(row.get("class")),
        )


@dataclass(frozen=True)
class Attendance:
    id: RecordId
    date: str
    status: str
    created_at: Optional[str]
    klass: Optional[ClassRef]

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Attendance":
        return cls(
            id=row["id"],
            date=_text(row.get("date")),
            status=_text(row.get("status")),
            created_at=row.get("created_at"),
            klass=ClassRef.from_row(row.get("class")),
        )


# ---------------------------------------------------------------------------
# Drafts (raw form input, one per create-flow)
# ---------------------------------------------------------------------------
# Defaults are the shape a form resets to after a successful submit.


@dataclass(frozen=True)
class SemesterDraft:
    name: str = ""
    focus: str = ""


@dataclass(frozen=True)
class ClassDraft:
    title: str = ""
    teacher: str = ""
    day: str = ""
    time: str = ""


@dataclass(frozen=True)
class NoteDraft:
    class_id: str = ""
    topic: str = ""
    detail: str = ""
    tag: str = "comment"


@dataclass(frozen=True)
class ActivityDraft:
    class_id: str = ""
    title: str = ""
    due_date: str = ""
    status: str = "planned"


@dataclass(frozen=True)
class AgendaDraft:
    type: str = "class-session"
    title: str = ""
    date: str = ""
    time: str = ""
    class_id: str = ""


@dataclass(frozen=True)
class ExamDraft:
    """
    Grade and max stay text until submit; empty max means the default of 10.
    """

    class_id: str = ""
    exam: str = ""
    grade: str = ""
    max: str = "10"


@dataclass(frozen=True)
class AttendanceDraft:
    class_id: str = ""
    date: str = ""
    status: str = "present"
