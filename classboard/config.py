"""
Backend configuration.

This is the ONLY place environment variables are read:
- Loads `.env` if present (local dev), without overriding real env vars
- Blank values count as missing

Variables:
    SUPABASE_URL         project URL, e.g. https://abcd.supabase.co
    SUPABASE_ANON_KEY    anon/public API key (SUPABASE_KEY is accepted too)
    CLASSBOARD_TIMEOUT   request timeout in seconds (default 30)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class AppConfig:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    timeout: float = DEFAULT_TIMEOUT

    @property
    def has_backend_config(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def rest_url(self) -> str:
        # PostgREST endpoint of the project
        return f"{(self.supabase_url or '').rstrip('/')}/rest/v1"


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name, default)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def _timeout(raw: Optional[str]) -> float:
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


def get_config() -> AppConfig:
    load_dotenv(override=False)

    return AppConfig(
        supabase_url=_getenv("SUPABASE_URL"),
        supabase_key=_getenv("SUPABASE_ANON_KEY") or _getenv("SUPABASE_KEY"),
        timeout=_timeout(_getenv("CLASSBOARD_TIMEOUT")),
    )
