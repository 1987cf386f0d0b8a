"""Problem+JSON error bodies and global exception handlers.

Every error response carries ``title``, ``status`` and a human-readable
``message`` (the admin UI displays ``message`` inline).
"""

from __future__ import annotations

from typing import Any, Dict
import logging
from fastapi import Request
from starlette.exceptions import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from onboarding_admin.logic.errors import QuestionStoreError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_body(status: int, title: str, message: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"title": title, "status": int(status), "message": message}
    body.update(extra)
    return body


def problem_response(status: int, title: str, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        problem_body(status, title, message, **extra),
        status_code=int(status),
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def handle_store_error(request: Request, exc: QuestionStoreError) -> JSONResponse:  # noqa: D401
    logger.info(
        "error_handler.store method=%s path=%s status=%s message=%s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
    )
    return problem_response(exc.status_code, exc.title, exc.message)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:  # noqa: D401
    status_code = int(getattr(exc, "status_code", 500) or 500)
    detail = getattr(exc, "detail", "")
    message = detail.get("message", "") if isinstance(detail, dict) else str(detail or "")
    headers = dict(exc.headers) if isinstance(getattr(exc, "headers", None), dict) else None
    return JSONResponse(
        problem_body(status_code, "Error", message or "Request failed"),
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: D401
    # Body problems are reported as 400 like store validation failures
    return problem_response(
        400,
        "Bad Request",
        "Request validation failed",
        errors=[{"loc": list(e.get("loc", ())), "msg": str(e.get("msg", ""))} for e in exc.errors()],
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:  # noqa: D401
    logger.error("unexpected_error method=%s path=%s", request.method, request.url.path, exc_info=exc)
    return problem_response(500, "Internal Server Error", "Internal server error")


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_body",
    "problem_response",
    "handle_store_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
