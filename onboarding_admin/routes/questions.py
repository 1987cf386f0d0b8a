"""Onboarding question CRUD and reorder endpoints.

Every route is served under ``/questions`` and, for the admin UI, under
``/admin/questions``; the alias is hidden from the OpenAPI schema. Handlers
only parse bodies, check presence of required fields and dispatch to the
question store; store errors become responses in the registered handlers.
"""

from __future__ import annotations

from functools import partial
from typing import Any, List
import logging

import anyio
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from onboarding_admin.logic.errors import ValidationError
from onboarding_admin.logic.question_store import QuestionStore
from onboarding_admin.models.question import SUGGESTED_CATEGORIES, QuestionCreate, QuestionUpdate


router = APIRouter()
logger = logging.getLogger(__name__)

REORDER_ID_KEYS = ("id", "questionId", "question_id")


def get_question_store(request: Request) -> QuestionStore:
    return request.app.state.question_store


async def _read_json(request: Request) -> Any:
    """Return the decoded body, or an empty object when it is not valid JSON."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return await request.json()
    except ValueError:
        logger.warning("questions.body_invalid_json path=%s size=%s", request.url.path, len(raw))
        return {}


def _tenant(request: Request) -> str:
    return request.headers.get("X-Tenant-ID") or "-"


def extract_ordered_ids(body: Any) -> List[Any]:
    """Pull the id sequence out of a reorder body.

    Accepts ``{"orderedIds": [...]}`` or ``{"questions": [{"id", "questionId"}, ...]}``.
    """
    if isinstance(body, dict) and "orderedIds" in body:
        ordered = body["orderedIds"]
        if isinstance(ordered, list):
            return ordered
    elif isinstance(body, dict) and isinstance(body.get("questions"), list):
        ids: List[Any] = []
        for item in body["questions"]:
            if not isinstance(item, dict):
                continue
            ids.append(next((item[k] for k in REORDER_ID_KEYS if item.get(k) not in (None, "")), None))
        return ids
    raise ValidationError("orderedIds must be an array")


@router.get("/admin/questions", include_in_schema=False)
@router.get(
    "/questions",
    summary="List onboarding questions in display order",
    operation_id="listQuestions",
)
async def list_questions(store: QuestionStore = Depends(get_question_store)):
    questions = await anyio.to_thread.run_sync(store.list)
    return [q.to_payload() for q in questions]


@router.post("/admin/questions", include_in_schema=False)
@router.post(
    "/questions",
    summary="Create an onboarding question at the end of the list",
    operation_id="createQuestion",
    status_code=201,
)
async def create_question(request: Request, store: QuestionStore = Depends(get_question_store)):
    body = await _read_json(request)
    try:
        data = QuestionCreate.model_validate(body if isinstance(body, dict) else {})
    except PydanticValidationError as exc:
        logger.info("questions.create.invalid errors=%s", exc.error_count())
        raise ValidationError("text and category are required") from exc
    # A non-array applicableFor on create falls back to the empty default
    tags = data.applicable_for if isinstance(data.applicable_for, list) else None
    created = await anyio.to_thread.run_sync(partial(store.create, data.text, data.category, tags))
    logger.info("questions.create id=%s order=%s tenant=%s", created.id, created.order, _tenant(request))
    return JSONResponse(created.to_payload(), status_code=201)


@router.get("/admin/questions/categories", include_in_schema=False)
@router.get(
    "/questions/categories",
    summary="Suggested question categories (not enforced)",
    operation_id="listQuestionCategories",
)
async def list_categories():
    return list(SUGGESTED_CATEGORIES)


@router.put("/admin/questions/reorder", include_in_schema=False)
@router.put(
    "/questions/reorder",
    summary="Assign order = position + 1 for each id in the supplied sequence",
    operation_id="reorderQuestions",
)
async def reorder_questions(request: Request, store: QuestionStore = Depends(get_question_store)):
    body = await _read_json(request)
    ordered_ids = extract_ordered_ids(body)
    result = await anyio.to_thread.run_sync(store.reorder, ordered_ids)
    logger.info("questions.reorder count=%s tenant=%s", len(ordered_ids), _tenant(request))
    return [q.to_payload() for q in result]


@router.get("/admin/questions/{question_id}", include_in_schema=False)
@router.get(
    "/questions/{question_id}",
    summary="Get a single onboarding question",
    operation_id="getQuestion",
)
async def get_question(question_id: str, store: QuestionStore = Depends(get_question_store)):
    question = await anyio.to_thread.run_sync(store.get, question_id)
    return question.to_payload()


@router.put("/admin/questions/{question_id}", include_in_schema=False)
@router.put(
    "/questions/{question_id}",
    summary="Update text, category or applicableFor of a question",
    operation_id="updateQuestion",
)
async def update_question(
    question_id: str,
    request: Request,
    store: QuestionStore = Depends(get_question_store),
):
    body = await _read_json(request)
    try:
        data = QuestionUpdate.model_validate(body if isinstance(body, dict) else {})
    except PydanticValidationError as exc:
        raise ValidationError("text and category must be strings") from exc
    updated = await anyio.to_thread.run_sync(store.update, question_id, data.supplied_fields())
    logger.info("questions.update id=%s tenant=%s", updated.id, _tenant(request))
    return updated.to_payload()


@router.delete("/admin/questions/{question_id}", include_in_schema=False)
@router.delete(
    "/questions/{question_id}",
    summary="Delete a question; remaining orders are not renumbered",
    operation_id="deleteQuestion",
    status_code=204,
)
async def delete_question(
    question_id: str,
    request: Request,
    store: QuestionStore = Depends(get_question_store),
):
    await anyio.to_thread.run_sync(store.delete, question_id)
    logger.info("questions.delete id=%s tenant=%s", question_id, _tenant(request))
    return Response(status_code=204)


__all__ = ["router", "extract_ordered_ids", "get_question_store"]
