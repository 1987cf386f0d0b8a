"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from ``migrations/<dialect>/`` next to
this module (``sqlite`` or ``postgresql``). Applied filenames are recorded in
a ``schema_migrations`` table in the target database, so a fresh in-memory
database is always migrated and a persistent one is never migrated twice.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable
from datetime import datetime, timezone

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine, Connection
import logging

logger = logging.getLogger(__name__)

MIGRATIONS_ROOT = Path(__file__).resolve().parent / "migrations"

_JOURNAL_DDL = (
    "CREATE TABLE IF NOT EXISTS schema_migrations ("
    "filename VARCHAR(255) PRIMARY KEY, "
    "applied_at VARCHAR(32) NOT NULL)"
)


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _split_statements(sql: str) -> list[str]:
    """Split a script on ';', dropping comment-only and empty segments.

    Migration files must not contain semicolons inside string literals.
    """
    statements: list[str] = []
    for chunk in sql.split(";"):
        lines = [ln for ln in chunk.splitlines() if ln.strip() and not ln.strip().startswith("--")]
        stmt = "\n".join(lines).strip()
        if stmt and stmt.upper() not in {"BEGIN", "COMMIT", "END"}:
            statements.append(stmt)
    return statements


def _dialect_dir(conn: Connection, migrations_dir: Path) -> Path:
    name = (getattr(conn.dialect, "name", "") or "").lower()
    folder = "postgresql" if name.startswith("postgres") else "sqlite"
    return migrations_dir / folder


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations and return the filenames applied by this call."""
    root = Path(migrations_dir) if migrations_dir is not None else MIGRATIONS_ROOT
    applied_now: list[str] = []

    with engine.begin() as conn:
        conn.exec_driver_sql(_JOURNAL_DDL)
        applied = {str(r[0]) for r in conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()}
        folder = _dialect_dir(conn, root)
        if not folder.exists():
            logger.warning("migrations_dir_missing path=%s", str(folder))
            return applied_now
        for sql_path in _iter_sql_files(folder):
            fname = sql_path.name
            if fname in applied:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            try:
                for stmt in _split_statements(sql):
                    conn.exec_driver_sql(stmt)
            except Exception:
                logger.error("migration_failed file=%s", fname, exc_info=True)
                raise
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :t)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds
                    "t": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            applied_now.append(fname)
            logger.info("migration_applied file=%s", fname)
    return applied_now


__all__ = ["apply_migrations", "MIGRATIONS_ROOT"]
