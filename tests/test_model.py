"""
Unit tests for backend row normalization.
"""

import unittest

from classboard.model import DEFAULT_EXAM_MAX, Exam, Note, SchoolClass, as_number


class TestFromRow(unittest.TestCase):
    def test_note_with_joined_class(self) -> None:
        note = Note.from_row(
            {"id": 1, "topic": None, "detail": "d", "tag": "comment", "class": {"id": 3, "title": "Bio"}}
        )
        self.assertEqual(note.topic, "")
        self.assertEqual(note.klass.id, 3)
        self.assertEqual(note.klass.title, "Bio")

    def test_missing_join_is_none(self) -> None:
        note = Note.from_row({"id": 1, "detail": "d", "tag": "comment", "class": None})
        self.assertIsNone(note.klass)

    def test_exam_numbers(self) -> None:
        exam = Exam.from_row({"id": 1, "exam": "P1", "grade": "7.5", "max": None})
        self.assertEqual(exam.grade, 7.5)
        self.assertEqual(exam.max, DEFAULT_EXAM_MAX)

    def test_class_row(self) -> None:
        c = SchoolClass.from_row({"id": 5, "semester_id": 1, "title": "Bio", "schedule": "Mon 08:00"})
        self.assertEqual(c.teacher, "")
        self.assertEqual(c.schedule, "Mon 08:00")


class TestAsNumber(unittest.TestCase):
    def test_values(self) -> None:
        self.assertEqual(as_number("8"), 8.0)
        self.assertEqual(as_number(" "), 0.0)
        self.assertEqual(as_number("abc"), 0.0)
        self.assertEqual(as_number(None, 10.0), 10.0)
        self.assertEqual(as_number(True), 0.0)


if __name__ == "__main__":
    unittest.main()
