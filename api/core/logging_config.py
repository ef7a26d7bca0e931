"""
Process-wide logging setup.

LOG_LEVEL  - root level (default INFO)
LOG_FORMAT - simple | detailed | json (default detailed)
"""

from __future__ import annotations

import logging.config

from . import env

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "line": %(lineno)d, "message": "%(message)s"}'
)

_FORMATS = {"simple": SIMPLE_FORMAT, "detailed": DETAILED_FORMAT, "json": JSON_FORMAT}

_configured = False


def configure_logging() -> None:
    global _configured
    if _configured:
        return None

    level = env.env_str("LOG_LEVEL", "INFO").upper()
    fmt = _FORMATS.get(env.env_str("LOG_FORMAT", "detailed").lower(), DETAILED_FORMAT)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": fmt}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                # asyncpg/httpx are chatty at DEBUG.
                "asyncpg": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
        }
    )
    _configured = True
