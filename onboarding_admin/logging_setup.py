"""Central logging configuration for the admin service and client core.

Installs one stdout handler on the root logger so every module logger emits
lines at the configured level without per-module setup. Uvicorn's loggers are
routed to the same handler so server and application lines interleave in one
stream.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig
from typing import Any, Dict

LOG_FORMAT = "%(asctime)s %(levelname)s:%(name)s:%(message)s"
DEFAULT_LEVEL = "INFO"


def build_logging_config(level: str | None = None) -> Dict[str, Any]:
    """Return the dictConfig payload with ``level`` applied to root and console."""
    level = (level or DEFAULT_LEVEL).upper()
    server_logger = {"level": DEFAULT_LEVEL, "handlers": ["console"], "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": dict(server_logger),
            "uvicorn.error": dict(server_logger),
            "uvicorn.access": dict(server_logger),
            # httpx logs every request at INFO; the client core logs its own outcomes
            "httpx": {"level": "WARNING"},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Configure application-wide logging once.

    When the root logger already has handlers (reloaders, test runners with
    log capture) only the root level is adjusted.
    """
    root = logging.getLogger()
    if root.handlers:
        if level:
            root.setLevel(level.upper())
        return
    dictConfig(build_logging_config(level))


__all__ = ["configure_logging", "build_logging_config", "LOG_FORMAT"]
