"""
Environment variable helpers.

Settings are read on demand so tests can change them with `monkeypatch.setenv`.
"""

from __future__ import annotations

import os


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def app_env() -> str:
    return env_str("APP_ENV", "production").lower()


def frontend_url() -> str:
    return env_str("FRONTEND_URL", "http://localhost:5173").rstrip("/")
