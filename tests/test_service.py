"""
Tests for the data access layer.

Contract:
- each fetch reads one table with its canonical order and joined class
- each add inserts one row and returns it in the same shape as the fetch
- errors propagate unchanged; without configuration nothing is sent
"""

import unittest
from unittest import mock

from classboard import service
from classboard.backend import BackendError, ConfigurationError
from classboard.config import AppConfig
from classboard.model import AgendaItem, Note, Semester

from fakes import FakeClient, sample_tables


class TestFetch(unittest.TestCase):
    def test_canonical_order_per_table(self) -> None:
        client = FakeClient(sample_tables())
        service.fetch_semesters(client)
        service.fetch_classes(client)
        service.fetch_notes(client)
        service.fetch_activities(client)
        service.fetch_agenda_items(client)
        service.fetch_exams(client)
        service.fetch_attendance(client)

        orders = {table: (order, asc) for table, _, order, asc in client.selects}
        self.assertEqual(orders["semesters"], ("created_at", True))
        self.assertEqual(orders["classes"], ("created_at", True))
        self.assertEqual(orders["notes"], ("created_at", False))
        self.assertEqual(orders["activities"], ("created_at", False))
        self.assertEqual(orders["agenda_items"], ("date", True))
        self.assertEqual(orders["exams"], ("created_at", False))
        self.assertEqual(orders["attendance"], ("created_at", False))

    def test_child_tables_join_class(self) -> None:
        client = FakeClient(sample_tables())
        service.fetch_notes(client)
        service.fetch_semesters(client)
        columns = {table: cols for table, cols, _, _ in client.selects}
        self.assertIn("class:classes(id,title)", columns["notes"])
        self.assertNotIn("class:", columns["semesters"])

    def test_rows_become_records(self) -> None:
        client = FakeClient(sample_tables())
        notes = service.fetch_notes(client)
        agenda = service.fetch_agenda_items(client)
        exams = service.fetch_exams(client)

        self.assertIsInstance(notes[0], Note)
        self.assertEqual(notes[0].klass.title, "Calculus")
        self.assertIsInstance(agenda[1], AgendaItem)
        self.assertIsNone(agenda[1].klass)
        self.assertIsNone(agenda[1].time)
        self.assertEqual(exams[1].grade, 9.5)

    def test_backend_error_propagates(self) -> None:
        client = FakeClient(fail_select={"semesters": "relation does not exist"})
        with self.assertRaises(BackendError) as ctx:
            service.fetch_semesters(client)
        self.assertEqual(str(ctx.exception), "relation does not exist")

    def test_missing_config_fails_before_network(self) -> None:
        cfg = AppConfig(supabase_url=None, supabase_key=None)
        with mock.patch("classboard.backend.get_config", return_value=cfg), mock.patch(
            "classboard.backend.requests.Session"
        ) as session_cls:
            with self.assertRaises(ConfigurationError):
                service.fetch_notes()
        session_cls.assert_not_called()


class TestAdd(unittest.TestCase):
    def test_add_semester(self) -> None:
        client = FakeClient()
        created = service.add_semester("2026.1", "Math", client=client)
        self.assertIsInstance(created, Semester)
        self.assertEqual(created.name, "2026.1")
        self.assertEqual(client.inserts[0][:2], ("semesters", {"name": "2026.1", "focus": "Math"}))

    def test_add_note_returns_joined_class(self) -> None:
        client = FakeClient(sample_tables())
        created = service.add_note(10, "Topic", "Detail", "comment", client=client)
        self.assertEqual(created.klass.id, 10)
        self.assertEqual(created.klass.title, "Calculus")
        self.assertIn("class:classes(id,title)", client.inserts[0][2])

    def test_add_agenda_item_empty_class_is_null(self) -> None:
        client = FakeClient()
        service.add_agenda_item("", "study", "Review", "2026-04-01", "", client=client)
        payload = client.inserts[0][1]
        self.assertIsNone(payload["class_id"])
        self.assertIsNone(payload["time"])

    def test_add_exam_payload(self) -> None:
        client = FakeClient(sample_tables())
        created = service.add_exam(10, "P1", 8.5, 10.0, client=client)
        self.assertEqual(client.inserts[0][1], {"class_id": 10, "exam": "P1", "grade": 8.5, "max": 10.0})
        self.assertEqual(created.grade, 8.5)

    def test_missing_config_fails_before_network(self) -> None:
        cfg = AppConfig(supabase_url=None, supabase_key=None)
        with mock.patch("classboard.backend.get_config", return_value=cfg), mock.patch(
            "classboard.backend.requests.Session"
        ) as session_cls:
            with self.assertRaises(ConfigurationError):
                service.add_note(10, "Topic", "Detail", "comment")
        session_cls.assert_not_called()

    def test_rejected_insert_raises(self) -> None:
        client = FakeClient(fail_insert={"attendance": "null value in column \"date\""})
        with self.assertRaises(BackendError):
            service.add_attendance(10, "", "present", client=client)


if __name__ == "__main__":
    unittest.main()
