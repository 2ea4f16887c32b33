"""
Orchestration: initial load and the create-flows.

Initial load
    All seven collections are fetched concurrently (thread pool, fan-out and
    join). The store is only touched afterwards, on the calling thread, in a
    single update. Collections that loaded are applied even when another
    fetch failed; the first failure's message goes into the error slot.

Create-flow (one generic `CreateFlow`, seven instances in FLOWS)
    validate draft -> insert -> merge confirmed record + reset draft
    - invalid draft: nothing happens (no request, no state change)
    - rejected insert: error slot is set, draft and collection are kept
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional

from classboard import service
from classboard.backend import NOT_CONFIGURED_MESSAGE, ClassboardError, get_client
from classboard.config import AppConfig, get_config
from classboard.model import (
    ACTIVITY_STATUSES,
    AGENDA_TYPES,
    ATTENDANCE_STATUSES,
    DEFAULT_EXAM_MAX,
    NOTE_TAGS,
    ActivityDraft,
    AgendaDraft,
    AttendanceDraft,
    ClassDraft,
    ExamDraft,
    NoteDraft,
    SemesterDraft,
    as_number,
)
from classboard.service import TableClient
from classboard.state import AppState, Store, active_semester, find_semester

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Initial load
# ---------------------------------------------------------------------------

LOADERS: tuple[tuple[str, Callable[..., list[Any]]], ...] = (
    ("semesters", service.fetch_semesters),
    ("classes", service.fetch_classes),
    ("notes", service.fetch_notes),
    ("activities", service.fetch_activities),
    ("agenda", service.fetch_agenda_items),
    ("exams", service.fetch_exams),
    ("attendance", service.fetch_attendance),
)


def load_all(store: Store, client: Optional[TableClient] = None, cfg: Optional[AppConfig] = None) -> bool:
    """
    Load every collection into the store. Returns True if all fetches succeeded.

    Without an explicit client, the configuration is checked first; when it is
    missing, the error slot is set and no request is made.
    """
    if client is None:
        cfg = cfg if cfg is not None else get_config()
        if not cfg.has_backend_config:
            store.update(error=NOT_CONFIGURED_MESSAGE, loading=False)
            return False
        client = get_client(cfg)

    store.update(loading=True)
    try:
        loaded: dict[str, tuple[Any, ...]] = {}
        errors: list[str] = []
        with ThreadPoolExecutor(max_workers=len(LOADERS)) as pool:
            futures = [(name, pool.submit(fetch, client)) for name, fetch in LOADERS]
            for name, fut in futures:
                try:
                    loaded[name] = tuple(fut.result())
                except ClassboardError as e:
                    logger.warning("Loading %s failed: %s", name, e.message)
                    errors.append(e.message)

        def apply(s: AppState) -> AppState:
            changes: dict[str, Any] = dict(loaded)
            changes["loading"] = False
            if errors:
                changes["error"] = errors[0]
            semesters = loaded.get("semesters")
            if s.selected_semester_id is None and semesters:
                changes["selected_semester_id"] = semesters[0].id
            return replace(s, **changes)

        store.dispatch(apply)
    finally:
        if store.state.loading:
            store.update(loading=False)
    return not errors


def select_semester(store: Store, semester_id: Any) -> bool:
    sem = find_semester(store.state.semesters, semester_id)
    if sem is None:
        return False
    store.update(selected_semester_id=sem.id)
    return True


# ---------------------------------------------------------------------------
# Generic create-flow
# ---------------------------------------------------------------------------


class FlowOutcome(str, Enum):
    INVALID = "invalid"
    CREATED = "created"
    FAILED = "failed"


class MergeOrder(str, Enum):
    PREPEND = "prepend"  # newest-first collections
    APPEND = "append"


Validator = Callable[[AppState, Any], bool]
Inserter = Callable[[AppState, Any, Optional[TableClient]], Any]
AfterCreate = Callable[[AppState, Any], dict[str, Any]]


@dataclass(frozen=True)
class CreateFlow:
    entity: str
    collection: str
    draft_field: str
    draft_type: type
    validate: Validator
    insert: Inserter
    merge: MergeOrder
    after_create: Optional[AfterCreate] = None

    def submit(self, store: Store, client: Optional[TableClient] = None) -> FlowOutcome:
        draft = getattr(store.state, self.draft_field)
        if not self.validate(store.state, draft):
            return FlowOutcome.INVALID

        try:
            created = self.insert(store.state, draft, client)
        except ClassboardError as e:
            logger.warning("Creating %s failed: %s", self.entity, e.message)
            store.update(error=e.message)
            return FlowOutcome.FAILED

        def merge(s: AppState) -> AppState:
            items = getattr(s, self.collection)
            if self.merge is MergeOrder.PREPEND:
                items = (created,) + items
            else:
                items = items + (created,)
            changes: dict[str, Any] = {self.collection: items, self.draft_field: self.draft_type()}
            if self.after_create is not None:
                changes.update(self.after_create(s, created))
            return replace(s, **changes)

        store.dispatch(merge)
        return FlowOutcome.CREATED

    def newest(self, state: AppState) -> Any:
        """
        The record the last successful submit merged, or None.
        """
        items = getattr(state, self.collection)
        if not items:
            return None
        return items[0] if self.merge is MergeOrder.PREPEND else items[-1]


def _filled(value: Optional[str]) -> bool:
    return bool(value and value.strip())


# --- semester ---


def _semester_valid(state: AppState, d: SemesterDraft) -> bool:
    return _filled(d.name)


def _semester_insert(state: AppState, d: SemesterDraft, client: Optional[TableClient]) -> Any:
    return service.add_semester(d.name.strip(), d.focus.strip(), client=client)


def _select_first_semester(state: AppState, created: Any) -> dict[str, Any]:
    if state.selected_semester_id is None:
        return {"selected_semester_id": created.id}
    return {}


# --- class ---


def _class_valid(state: AppState, d: ClassDraft) -> bool:
    # no orphan classes: a semester must be selected
    if active_semester(state) is None:
        return False
    return _filled(d.title) and _filled(d.day) and _filled(d.time)


def _class_insert(state: AppState, d: ClassDraft, client: Optional[TableClient]) -> Any:
    sem = active_semester(state)
    if sem is None:
        raise ClassboardError("Select a semester before adding a class.")
    schedule = f"{d.day.strip()} {d.time.strip()}"
    return service.add_class(sem.id, d.title.strip(), d.teacher.strip(), schedule, client=client)


# --- note ---


def _note_valid(state: AppState, d: NoteDraft) -> bool:
    return _filled(d.class_id) and _filled(d.detail) and d.tag in NOTE_TAGS


def _note_insert(state: AppState, d: NoteDraft, client: Optional[TableClient]) -> Any:
    return service.add_note(d.class_id.strip(), d.topic.strip(), d.detail.strip(), d.tag, client=client)


# --- activity ---


def _activity_valid(state: AppState, d: ActivityDraft) -> bool:
    return _filled(d.class_id) and _filled(d.title) and d.status in ACTIVITY_STATUSES


def _activity_insert(state: AppState, d: ActivityDraft, client: Optional[TableClient]) -> Any:
    return service.add_activity(d.class_id.strip(), d.title.strip(), d.due_date.strip(), d.status, client=client)


# --- agenda ---


def _agenda_valid(state: AppState, d: AgendaDraft) -> bool:
    # class is optional here
    return _filled(d.title) and _filled(d.date) and d.type in AGENDA_TYPES


def _agenda_insert(state: AppState, d: AgendaDraft, client: Optional[TableClient]) -> Any:
    return service.add_agenda_item(
        d.class_id.strip() or None,
        d.type,
        d.title.strip(),
        d.date.strip(),
        d.time.strip(),
        client=client,
    )


# --- exam ---


def _exam_valid(state: AppState, d: ExamDraft) -> bool:
    return _filled(d.class_id) and _filled(d.exam)


def _exam_insert(state: AppState, d: ExamDraft, client: Optional[TableClient]) -> Any:
    return service.add_exam(
        d.class_id.strip(),
        d.exam.strip(),
        as_number(d.grade, 0.0),
        as_number(d.max, DEFAULT_EXAM_MAX),
        client=client,
    )


# --- attendance ---


def _attendance_valid(state: AppState, d: AttendanceDraft) -> bool:
    return _filled(d.class_id) and _filled(d.date) and d.status in ATTENDANCE_STATUSES


def _attendance_insert(state: AppState, d: AttendanceDraft, client: Optional[TableClient]) -> Any:
    return service.add_attendance(d.class_id.strip(), d.date.strip(), d.status, client=client)


FLOWS: dict[str, CreateFlow] = {
    "semester": CreateFlow(
        "semester",
        "semesters",
        "semester_draft",
        SemesterDraft,
        _semester_valid,
        _semester_insert,
        MergeOrder.APPEND,
        after_create=_select_first_semester,
    ),
    "class": CreateFlow(
        "class", "classes", "class_draft", ClassDraft, _class_valid, _class_insert, MergeOrder.APPEND
    ),
    "note": CreateFlow("note", "notes", "note_draft", NoteDraft, _note_valid, _note_insert, MergeOrder.PREPEND),
    "activity": CreateFlow(
        "activity",
        "activities",
        "activity_draft",
        ActivityDraft,
        _activity_valid,
        _activity_insert,
        MergeOrder.PREPEND,
    ),
    "agenda": CreateFlow(
        "agenda", "agenda", "agenda_draft", AgendaDraft, _agenda_valid, _agenda_insert, MergeOrder.APPEND
    ),
    "exam": CreateFlow("exam", "exams", "exam_draft", ExamDraft, _exam_valid, _exam_insert, MergeOrder.PREPEND),
    "attendance": CreateFlow(
        "attendance",
        "attendance",
        "attendance_draft",
        AttendanceDraft,
        _attendance_valid,
        _attendance_insert,
        MergeOrder.PREPEND,
    ),
}


def edit_draft(store: Store, entity: str, **fields: str) -> AppState:
    """
    Update some fields of one draft (the form's on-change).
    """
    flow = FLOWS[entity]
    return store.dispatch(
        lambda s: replace(s, **{flow.draft_field: replace(getattr(s, flow.draft_field), **fields)})
    )


def submit(store: Store, entity: str, client: Optional[TableClient] = None) -> FlowOutcome:
    return FLOWS[entity].submit(store, client=client)
