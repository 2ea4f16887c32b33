"""
In-memory stand-in for the backend table API used by the tests.

It behaves like PostgREST for the parts the app relies on:
- select returns copies of the stored rows
- insert assigns id + created_at and resolves the `class:classes(id,title)`
  join from the stored classes
- failures can be configured per table
"""

from __future__ import annotations

import threading
from typing import Any, Optional

from classboard.backend import BackendError


class FakeClient:
    def __init__(
        self,
        tables: Optional[dict[str, list[dict[str, Any]]]] = None,
        fail_select: Optional[dict[str, str]] = None,
        fail_insert: Optional[dict[str, str]] = None,
    ) -> None:
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.fail_select = dict(fail_select or {})
        self.fail_insert = dict(fail_insert or {})
        self.selects: list[tuple[str, str, str, bool]] = []
        self.inserts: list[tuple[str, dict[str, Any], str]] = []
        self._next_id = 100
        self._lock = threading.Lock()

    def select(self, table: str, columns: str, order: str, ascending: bool = True) -> list[dict[str, Any]]:
        with self._lock:
            self.selects.append((table, columns, order, ascending))
        if table in self.fail_select:
            raise BackendError(self.fail_select[table], status=400)
        return [dict(r) for r in self.tables.get(table, [])]

    def insert_one(self, table: str, payload: dict[str, Any], columns: str) -> dict[str, Any]:
        with self._lock:
            self.inserts.append((table, dict(payload), columns))
            self._next_id += 1
            new_id = self._next_id
        if table in self.fail_insert:
            raise BackendError(self.fail_insert[table], status=409, code="23505")

        row = dict(payload)
        row["id"] = new_id
        row["created_at"] = "2026-03-01T10:00:00+00:00"
        if "class:classes" in columns:
            class_id = row.pop("class_id", None)
            row["class"] = None
            for c in self.tables.get("classes", []):
                if class_id is not None and str(c["id"]) == str(class_id):
                    row["class"] = {"id": c["id"], "title": c["title"]}
        self.tables.setdefault(table, []).append(row)
        return dict(row)


def sample_tables() -> dict[str, list[dict[str, Any]]]:
    cls = {"id": 10, "title": "Calculus"}
    return {
        "semesters": [
            {"id": 1, "name": "2026.1", "focus": "Math", "created_at": "2026-01-01"},
            {"id": 2, "name": "2026.2", "focus": "", "created_at": "2026-06-01"},
        ],
        "classes": [
            {"id": 10, "semester_id": 1, "title": "Calculus", "teacher": "Ana", "schedule": "Mon 08:00"},
            {"id": 11, "semester_id": 2, "title": "Physics", "teacher": "Bo", "schedule": "Tue 10:00"},
            {"id": 12, "semester_id": 1, "title": "Algebra", "teacher": "Cy", "schedule": "Wed 09:00"},
        ],
        "notes": [{"id": 20, "topic": "Limits", "detail": "Review epsilon", "tag": "review", "class": cls}],
        "activities": [{"id": 30, "title": "List 1", "due_date": "2026-03-10", "status": "planned", "class": cls}],
        "agenda_items": [
            {"id": 40, "type": "exam", "title": "P1", "date": "2026-04-02", "time": "08:00:00", "class": cls},
            {"id": 41, "type": "study", "title": "Library", "date": "2026-04-05", "time": None, "class": None},
        ],
        "exams": [
            {"id": 50, "exam": "P1", "grade": 7, "max": 10, "class": cls},
            {"id": 51, "exam": "P2", "grade": "9.5", "max": 10, "class": cls},
        ],
        "attendance": [
            {"id": 60, "date": "2026-03-02", "status": "present", "class": cls},
            {"id": 61, "date": "2026-03-09", "status": "absent", "class": cls},
            {"id": 62, "date": "2026-03-16", "status": "present", "class": cls},
        ],
    }
