"""Functional tests for the async API client and session credentials.

Requests are captured with ``httpx.MockTransport``; nothing leaves the process.
"""

from __future__ import annotations

import json

import httpx
import pytest

from onboarding_admin.client.api import ApiError, QuestionsApiClient
from onboarding_admin.client.session import SessionCredentials
from onboarding_admin.config import ClientConfig

BASE = "http://api.test/api/v1"


def _client(handler, credentials: SessionCredentials | None = None) -> QuestionsApiClient:
    return QuestionsApiClient(
        BASE,
        credentials or SessionCredentials(access_token="tok", tenant_id="acme"),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.anyio
async def test_requests_carry_credentials_and_admin_paths() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    async with _client(handler) as api:
        assert await api.list_questions() == []

    [req] = seen
    assert str(req.url) == f"{BASE}/admin/questions"
    assert req.headers["Authorization"] == "Bearer tok"
    assert req.headers["X-Tenant-ID"] == "acme"
    assert req.headers["Content-Type"] == "application/json"


@pytest.mark.anyio
async def test_reorder_sends_id_pairs_in_sequence() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    async with _client(handler) as api:
        result = await api.reorder_questions([{"id": "2", "questionId": "q2"}, {"id": "1"}])

    assert result == {"ok": True}
    assert captured["method"] == "PUT"
    assert captured["path"] == "/api/v1/admin/questions/reorder"
    assert captured["body"] == {"questions": [{"id": "2", "questionId": "q2"}, {"id": "1", "questionId": None}]}


@pytest.mark.anyio
async def test_delete_204_returns_none() -> None:
    async with _client(lambda request: httpx.Response(204)) as api:
        assert await api.delete_question("5") is None


@pytest.mark.anyio
async def test_error_status_raises_with_server_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"title": "Not Found", "status": 404, "message": "Question not found"})

    async with _client(handler) as api:
        with pytest.raises(ApiError) as info:
            await api.update_question("9", {"text": "x"})
    assert info.value.status_code == 404
    assert info.value.message == "Question not found"


@pytest.mark.anyio
async def test_error_without_json_body_gets_generic_message() -> None:
    async with _client(lambda request: httpx.Response(502, text="bad gateway")) as api:
        with pytest.raises(ApiError) as info:
            await api.list_questions()
    assert info.value.status_code == 502
    assert "502" in info.value.message


@pytest.mark.anyio
async def test_transport_failure_raises_api_error_without_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as api:
        with pytest.raises(ApiError) as info:
            await api.create_question({"text": "x", "category": "y"})
    assert info.value.status_code is None
    assert "connection refused" in info.value.message


def test_anonymous_credentials_send_empty_authorization() -> None:
    headers = SessionCredentials().headers()
    assert headers["Authorization"] == ""
    assert headers["X-Tenant-ID"] == "default"


def test_session_load_prefers_environment_over_file(tmp_path, monkeypatch) -> None:
    session_file = tmp_path / "session.json"
    session_file.write_text(json.dumps({"accessToken": "file-token", "tenantId": "file-tenant"}), encoding="utf-8")
    monkeypatch.delenv("ONBOARDING_ACCESS_TOKEN", raising=False)
    monkeypatch.setenv("ONBOARDING_TENANT_ID", "env-tenant")

    creds = SessionCredentials.load(session_file)
    assert creds.access_token == "file-token"
    assert creds.tenant_id == "env-tenant"


def test_session_load_tolerates_corrupt_file(tmp_path, monkeypatch) -> None:
    session_file = tmp_path / "session.json"
    session_file.write_text("{not json", encoding="utf-8")
    monkeypatch.delenv("ONBOARDING_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("ONBOARDING_TENANT_ID", raising=False)
    assert SessionCredentials.load(session_file) == SessionCredentials()


@pytest.mark.anyio
async def test_from_config_uses_configured_base(monkeypatch) -> None:
    monkeypatch.setenv("ONBOARDING_SESSION_FILE", "/nonexistent/session.json")
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=[])

    api = QuestionsApiClient.from_config(
        ClientConfig(api_base="https://admin.example/api/v1/"),
        transport=httpx.MockTransport(handler),
    )
    async with api:
        await api.list_questions()
    assert seen == ["https://admin.example/api/v1/admin/questions"]
