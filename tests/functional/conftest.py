from __future__ import annotations

"""Functional test bootstrap for the onboarding questions admin service.

Every test gets its own application and store so ids and order values start
from a clean slate. The SQL store runs on a private in-memory SQLite engine
with the packaged migrations applied.
"""

import typing as t

import httpx
import pytest
from fastapi.testclient import TestClient

from onboarding_admin.config import AppConfig
from onboarding_admin.db.base import build_engine
from onboarding_admin.db.migrations_runner import apply_migrations
from onboarding_admin.logic.question_store import InMemoryQuestionStore, QuestionStore
from onboarding_admin.logic.repository_questions import SqlQuestionStore
from onboarding_admin.main import create_app

@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def memory_store() -> InMemoryQuestionStore:
    return InMemoryQuestionStore()


@pytest.fixture
def sql_store() -> t.Iterator[SqlQuestionStore]:
    engine = build_engine("sqlite+pysqlite:///:memory:")
    apply_migrations(engine)
    yield SqlQuestionStore(engine)
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest) -> QuestionStore:
    """Both store backends, for contract tests that must hold for each."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def app(store: QuestionStore):
    return create_app(AppConfig(), store=store)


@pytest.fixture
def client(app) -> t.Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def asgi_transport(app) -> httpx.ASGITransport:
    """Transport that routes the async API client straight into the app."""
    return httpx.ASGITransport(app=app)
