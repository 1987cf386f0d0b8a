"""SQLAlchemy engine construction for the SQL question store.

The service targets PostgreSQL in production but supports SQLite for local
development and CI. No declarative models are defined here; repositories use
Core ``text()`` statements and this module only manages engine creation.
"""

from __future__ import annotations

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or "sqlite+pysqlite:///:memory:"
    )


def build_engine(url: str | None = None) -> Engine:
    """Return a new Engine for ``url`` (or the environment's database URL).

    For SQLite in-memory URLs a StaticPool keeps one connection alive so the
    schema and rows survive across requests served from the threadpool.
    The caller owns the engine; nothing is cached at module level.
    """
    resolved_url = url or _db_url()
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if resolved_url.startswith("sqlite") and ":memory:" in resolved_url:
        kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    elif resolved_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(resolved_url, **kwargs)
    logger.info("db.engine.created dialect=%s", engine.dialect.name)
    return engine


__all__ = ["build_engine"]
