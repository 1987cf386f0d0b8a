"""Database bootstrap utilities for the SQL question store.

Exposes engine construction and the migrations runner that applies SQL files
shipped under ``onboarding_admin/db/migrations/<dialect>/``. The DB layer does
not leak rows into route handlers; repositories return Question models.
"""

from onboarding_admin.db.base import build_engine
from onboarding_admin.db.migrations_runner import apply_migrations

__all__ = [
    "build_engine",
    "apply_migrations",
]
