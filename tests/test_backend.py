"""
Tests for the HTTP transport, with the requests session mocked out.
"""

import unittest
from unittest import mock

import requests

from classboard.backend import SINGLE_OBJECT, BackendError, ConfigurationError, RestClient
from classboard.config import AppConfig

CFG = AppConfig(supabase_url="https://demo.supabase.co/", supabase_key="anon-key", timeout=5.0)


def _response(status: int, body, reason: str = "") -> mock.Mock:
    resp = mock.Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.reason = reason
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


def _client(resp) -> tuple[RestClient, mock.MagicMock]:
    session = mock.MagicMock()
    session.headers = {}
    if isinstance(resp, Exception):
        session.request.side_effect = resp
    else:
        session.request.return_value = resp
    return RestClient(CFG, session=session), session


class TestRestClient(unittest.TestCase):
    def test_requires_configuration(self) -> None:
        with self.assertRaises(ConfigurationError):
            RestClient(AppConfig(supabase_url="https://x.supabase.co", supabase_key=None), session=mock.MagicMock())

    def test_auth_headers(self) -> None:
        _, session = _client(_response(200, []))
        self.assertEqual(session.headers["apikey"], "anon-key")
        self.assertEqual(session.headers["Authorization"], "Bearer anon-key")

    def test_select_builds_query(self) -> None:
        client, session = _client(_response(200, [{"id": 1}]))
        rows = client.select("notes", "id,topic", order="created_at", ascending=False)

        self.assertEqual(rows, [{"id": 1}])
        args, kwargs = session.request.call_args
        self.assertEqual(args, ("GET", "https://demo.supabase.co/rest/v1/notes"))
        self.assertEqual(kwargs["params"], {"select": "id,topic", "order": "created_at.desc"})
        self.assertEqual(kwargs["timeout"], 5.0)

    def test_insert_asks_for_one_row(self) -> None:
        client, session = _client(_response(201, {"id": 7, "name": "A"}))
        row = client.insert_one("semesters", {"name": "A"}, "id,name")

        self.assertEqual(row, {"id": 7, "name": "A"})
        args, kwargs = session.request.call_args
        self.assertEqual(args[0], "POST")
        self.assertEqual(kwargs["json"], {"name": "A"})
        self.assertEqual(kwargs["headers"]["Prefer"], "return=representation")
        self.assertEqual(kwargs["headers"]["Accept"], SINGLE_OBJECT)

    def test_error_body_message(self) -> None:
        body = {"code": "23503", "message": "insert or update violates foreign key constraint", "details": None}
        client, _ = _client(_response(409, body, reason="Conflict"))
        with self.assertRaises(BackendError) as ctx:
            client.insert_one("notes", {"class_id": 1}, "id")
        self.assertEqual(ctx.exception.message, "insert or update violates foreign key constraint")
        self.assertEqual(ctx.exception.status, 409)
        self.assertEqual(ctx.exception.code, "23503")

    def test_error_without_json_body(self) -> None:
        client, _ = _client(_response(502, ValueError("no json"), reason="Bad Gateway"))
        with self.assertRaises(BackendError) as ctx:
            client.select("notes", "id", order="created_at")
        self.assertEqual(ctx.exception.message, "HTTP 502 Bad Gateway")

    def test_transport_failure(self) -> None:
        client, _ = _client(requests.ConnectionError("connection refused"))
        with self.assertRaises(BackendError) as ctx:
            client.select("notes", "id", order="created_at")
        self.assertIn("connection refused", ctx.exception.message)

    def test_unexpected_shape(self) -> None:
        client, _ = _client(_response(200, {"id": 1}))
        with self.assertRaises(BackendError):
            client.select("notes", "id", order="created_at")


if __name__ == "__main__":
    unittest.main()
