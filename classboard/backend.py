"""
Backend transport (Supabase / PostgREST over HTTP).

Only two operations are needed by the data access layer:

    select      GET  /rest/v1/<table>?select=...&order=<column>.<asc|desc>
    insert_one  POST /rest/v1/<table>?select=...   (returns the inserted row)

Errors:
- ConfigurationError: URL or key missing; raised before any network call
- BackendError: the request was rejected or never got an answer

Nothing here retries or caches: every call is one fresh round trip.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from classboard.config import AppConfig, get_config

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Backend not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY (see .env)."

# Ask PostgREST for a single JSON object instead of a one-element array
SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class ClassboardError(Exception):
    """Base class for errors surfaced to the user."""

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.__class__.__name__


class ConfigurationError(ClassboardError):
    pass


class BackendError(ClassboardError):
    """
    A request the backend rejected (HTTP error, constraint violation)
    or that failed in transport.
    """

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.code = code

    @classmethod
    def from_response(cls, resp: requests.Response) -> "BackendError":
        message = ""
        code = None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            for key in ("message", "hint", "details", "error_description", "error"):
                value = body.get(key)
                if isinstance(value, str) and value.strip():
                    message = value.strip()
                    break
        if not message:
            message = f"HTTP {resp.status_code} {resp.reason or ''}".strip()
        return cls(message, status=resp.status_code, code=None if code is None else str(code))


def ensure_configured(cfg: AppConfig) -> None:
    if not cfg.has_backend_config:
        raise ConfigurationError(NOT_CONFIGURED_MESSAGE)


class RestClient:
    """
    Thin wrapper around a `requests.Session` bound to one Supabase project.
    """

    def __init__(self, cfg: AppConfig, session: Optional[requests.Session] = None) -> None:
        ensure_configured(cfg)
        self.cfg = cfg
        self._session = session if session is not None else requests.Session()
        self._session.headers.update(
            {
                "apikey": cfg.supabase_key or "",
                "Authorization": f"Bearer {cfg.supabase_key}",
                "Accept": "application/json",
            }
        )

    def _url(self, table: str) -> str:
        return f"{self.cfg.rest_url}/{table}"

    def _request(self, method: str, table: str, **kwargs: Any) -> Any:
        url = self._url(table)
        logger.debug("%s %s params=%s", method, url, kwargs.get("params"))
        try:
            resp = self._session.request(method, url, timeout=self.cfg.timeout, **kwargs)
        except requests.RequestException as e:
            raise BackendError(f"Request to '{table}' failed: {e}") from e

        if not resp.ok:
            err = BackendError.from_response(resp)
            logger.debug("%s %s -> %s %s", method, url, resp.status_code, err.message)
            raise err

        try:
            return resp.json()
        except ValueError as e:
            raise BackendError(f"Invalid JSON from '{table}'") from e

    def select(self, table: str, columns: str, order: str, ascending: bool = True) -> list[dict[str, Any]]:
        """
        Return all rows of `table`, ordered by one column.
        """
        direction = "asc" if ascending else "desc"
        data = self._request("GET", table, params={"select": columns, "order": f"{order}.{direction}"})
        if not isinstance(data, list):
            raise BackendError(f"Unexpected response from '{table}': expected a list of rows")
        return data

    def insert_one(self, table: str, payload: dict[str, Any], columns: str) -> dict[str, Any]:
        """
        Insert one row and return it, shaped by `columns` (joins included).
        """
        data = self._request(
            "POST",
            table,
            params={"select": columns},
            json=payload,
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        if not isinstance(data, dict):
            raise BackendError(f"Unexpected response from '{table}': expected one row")
        return data


def get_client(cfg: Optional[AppConfig] = None) -> RestClient:
    return RestClient(cfg if cfg is not None else get_config())
