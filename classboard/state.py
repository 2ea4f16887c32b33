"""
Application state and derived values.

`AppState` is immutable. The only way to change it is through a `Store`,
which swaps the whole state object per update (one atomic transition).

Derived values (attendance rate, average grade, grouping of classes per
semester) are plain functions over the state and are never stored.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Sequence

from classboard.model import (
    Activity,
    ActivityDraft,
    AgendaDraft,
    AgendaItem,
    Attendance,
    AttendanceDraft,
    ClassDraft,
    Exam,
    ExamDraft,
    Note,
    NoteDraft,
    RecordId,
    SchoolClass,
    Semester,
    SemesterDraft,
    as_number,
)


@dataclass(frozen=True)
class AppState:
    # Collections, each in its canonical order
    semesters: tuple[Semester, ...] = ()
    classes: tuple[SchoolClass, ...] = ()
    notes: tuple[Note, ...] = ()
    activities: tuple[Activity, ...] = ()
    agenda: tuple[AgendaItem, ...] = ()
    exams: tuple[Exam, ...] = ()
    attendance: tuple[Attendance, ...] = ()

    # One draft per create-flow
    semester_draft: SemesterDraft = field(default_factory=SemesterDraft)
    class_draft: ClassDraft = field(default_factory=ClassDraft)
    note_draft: NoteDraft = field(default_factory=NoteDraft)
    activity_draft: ActivityDraft = field(default_factory=ActivityDraft)
    agenda_draft: AgendaDraft = field(default_factory=AgendaDraft)
    exam_draft: ExamDraft = field(default_factory=ExamDraft)
    attendance_draft: AttendanceDraft = field(default_factory=AttendanceDraft)

    loading: bool = False
    error: str = ""
    selected_semester_id: Optional[RecordId] = None


Listener = Callable[[AppState], None]


class Store:
    """
    Holds the current `AppState` and is the single update channel for it.
    """

    def __init__(self, state: Optional[AppState] = None) -> None:
        self._state = state if state is not None else AppState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def dispatch(self, transition: Callable[[AppState], AppState]) -> AppState:
        """
        Apply a pure `AppState -> AppState` transition and notify listeners.
        """
        self._state = transition(self._state)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def update(self, **changes: Any) -> AppState:
        return self.dispatch(lambda s: replace(s, **changes))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


def _round_half_up(x: float) -> int:
    # round() would give 12 for 12.5 (banker's rounding)
    return int(math.floor(x + 0.5))


def attendance_rate(records: Sequence[Attendance]) -> int:
    """
    Percentage of "present" records, 0..100. Empty -> 0.
    """
    if not records:
        return 0
    present = sum(1 for r in records if r.status == "present")
    return _round_half_up(100 * present / len(records))


def average_grade(records: Sequence[Exam]) -> float:
    """
    Mean grade with one decimal, ties round up (8.25 -> 8.3).
    Empty -> 0; missing grades count as 0.
    """
    if not records:
        return 0.0
    total = sum(as_number(r.grade) for r in records)
    return _round_half_up(10 * total / len(records)) / 10


def classes_by_semester(classes: Sequence[SchoolClass]) -> dict[RecordId, list[SchoolClass]]:
    groups: dict[RecordId, list[SchoolClass]] = defaultdict(list)
    for c in classes:
        groups[c.semester_id].append(c)
    return dict(groups)


def find_semester(semesters: Sequence[Semester], semester_id: Any) -> Optional[Semester]:
    """
    Look up a semester by id. Ids are compared as text so that a value typed
    on the command line ("3") matches a numeric backend id (3).
    """
    if semester_id is None or str(semester_id).strip() == "":
        return None
    wanted = str(semester_id).strip()
    for s in semesters:
        if str(s.id) == wanted:
            return s
    return None


def active_semester(state: AppState) -> Optional[Semester]:
    return find_semester(state.semesters, state.selected_semester_id)


def active_semester_classes(state: AppState) -> list[SchoolClass]:
    if state.selected_semester_id is None:
        return []
    return classes_by_semester(state.classes).get(state.selected_semester_id, [])


@dataclass(frozen=True)
class DashboardSummary:
    active_semester_name: Optional[str]
    class_count: int
    activity_count: int
    attendance_rate: int
    average_grade: float


def dashboard_summary(state: AppState) -> DashboardSummary:
    sem = active_semester(state)
    return DashboardSummary(
        active_semester_name=sem.name if sem else None,
        class_count=len(active_semester_classes(state)),
        activity_count=len(state.activities),
        attendance_rate=attendance_rate(state.attendance),
        average_grade=average_grade(state.exams),
    )
