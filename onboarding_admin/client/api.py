"""Async HTTP client for the onboarding questions admin API.

Attaches the session credentials to every request and turns any non-2xx
response or transport failure into `ApiError`. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

import httpx

from onboarding_admin.client.session import SessionCredentials
from onboarding_admin.config import ClientConfig

logger = logging.getLogger(__name__)

ADMIN_QUESTIONS_PATH = "/admin/questions"


class ApiError(Exception):
    """A failed API call; ``status_code`` is None for transport errors."""

    def __init__(self, status_code: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Request failed with status {response.status_code}"


class QuestionsApiClient:
    def __init__(
        self,
        base_url: str,
        credentials: Optional[SessionCredentials] = None,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        questions_path: str = ADMIN_QUESTIONS_PATH,
    ) -> None:
        self.credentials = credentials or SessionCredentials()
        self.questions_path = questions_path.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        credentials: Optional[SessionCredentials] = None,
        **kwargs: Any,
    ) -> "QuestionsApiClient":
        return cls(
            config.api_base,
            credentials or SessionCredentials.load(),
            timeout=config.timeout_seconds,
            **kwargs,
        )

    async def __aenter__(self) -> "QuestionsApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, payload: Any = None) -> Any:
        try:
            response = await self._http.request(
                method,
                path,
                json=payload,
                headers=self.credentials.headers(),
            )
        except httpx.HTTPError as exc:
            logger.error("api.transport_error method=%s path=%s error=%s", method, path, exc)
            raise ApiError(None, str(exc) or type(exc).__name__) from exc
        if not response.is_success:
            message = _error_message(response)
            logger.error(
                "api.request_failed method=%s path=%s status=%s message=%s",
                method,
                path,
                response.status_code,
                message,
            )
            raise ApiError(response.status_code, message)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            # A 2xx with a non-JSON body carries no collection; callers keep local state
            logger.warning("api.non_json_body method=%s path=%s", method, path)
            return None

    async def list_questions(self) -> Any:
        return await self._request("GET", self.questions_path)

    async def create_question(self, data: Mapping[str, Any]) -> Any:
        return await self._request("POST", self.questions_path, dict(data))

    async def update_question(self, question_id: Any, data: Mapping[str, Any]) -> Any:
        return await self._request("PUT", f"{self.questions_path}/{question_id}", dict(data))

    async def delete_question(self, question_id: Any) -> None:
        await self._request("DELETE", f"{self.questions_path}/{question_id}")

    async def reorder_questions(self, items: Sequence[Mapping[str, Any]]) -> Any:
        """Submit ``{"questions": [{"id", "questionId"}, ...]}`` in the new order."""
        payload = {
            "questions": [
                {"id": item.get("id"), "questionId": item.get("questionId")} for item in items
            ]
        }
        return await self._request("PUT", f"{self.questions_path}/reorder", payload)


__all__ = ["ApiError", "QuestionsApiClient", "ADMIN_QUESTIONS_PATH"]
