"""Question store contract and the in-memory implementation.

A store owns the ordered question collection and the id counter. One store is
built per application by `build_question_store` and handed to routes through
``app.state``; there are no module-level collections.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from onboarding_admin.logic.errors import NotFoundError, ValidationError
from onboarding_admin.logic.order_sequences import apply_order_map, next_order, order_map
from onboarding_admin.models.question import Question, QuestionId

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("text", "category", "applicable_for")
# Ids are stored in signed 64-bit integer columns
MAX_QUESTION_ID = 2**63 - 1


def coerce_question_id(value: Any) -> Optional[int]:
    """Return the integer id for ``value`` or None when it cannot be one.

    Accepts ints and digit strings (path params, client-normalised ids).
    Booleans are rejected even though they are ints, as are values outside
    the signed 64-bit range no stored id can reach.
    """
    qid: Optional[int] = None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        qid = value
    elif isinstance(value, float) and value.is_integer():
        qid = int(value)
    elif isinstance(value, str):
        token = value.strip()
        if token.lstrip("-").isdecimal():
            qid = int(token)
    if qid is None or not -MAX_QUESTION_ID - 1 <= qid <= MAX_QUESTION_ID:
        return None
    return qid


def _is_present(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def require_text(value: Any, field: str) -> str:
    if not _is_present(value):
        raise ValidationError(f"{field} must be a non-empty string")
    return value


def require_question_fields(text: Any, category: Any) -> None:
    """Presence check shared by every store's ``create``."""
    if not _is_present(text) or not _is_present(category):
        raise ValidationError("text and category are required")


def clean_applicable_for(value: Any) -> List[str]:
    """De-duplicate gender tags preserving first occurrence.

    ``None`` means "not supplied" and yields an empty list; any other
    non-list value is rejected.
    """
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError("applicableFor must be an array")
    seen: List[str] = []
    for entry in value:
        tag = str(entry)
        if tag not in seen:
            seen.append(tag)
    return seen


def sort_questions(questions: Iterable[Question]) -> List[Question]:
    return sorted(questions, key=lambda q: (q.order, str(q.id)))


class QuestionStore:
    """Contract shared by the in-memory and SQL stores."""

    backend = "abstract"

    def list(self) -> List[Question]:
        raise NotImplementedError

    def get(self, question_id: QuestionId) -> Question:
        raise NotImplementedError

    def create(self, text: Any, category: Any, applicable_for: Any = None) -> Question:
        raise NotImplementedError

    def update(self, question_id: QuestionId, fields: Mapping[str, Any]) -> Question:
        raise NotImplementedError

    def delete(self, question_id: QuestionId) -> None:
        raise NotImplementedError

    def reorder(self, ordered_ids: Sequence[Any]) -> List[Question]:
        raise NotImplementedError


class InMemoryQuestionStore(QuestionStore):
    """Process-local store; ids count up from 1 and are never reused."""

    backend = "memory"

    def __init__(self) -> None:
        self._questions: List[Question] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def _index_of(self, question_id: QuestionId) -> int:
        qid = coerce_question_id(question_id)
        if qid is not None:
            for index, question in enumerate(self._questions):
                if question.id == qid:
                    return index
        raise NotFoundError("Question not found")

    def list(self) -> List[Question]:
        with self._lock:
            return [q.model_copy(deep=True) for q in sort_questions(self._questions)]

    def get(self, question_id: QuestionId) -> Question:
        with self._lock:
            return self._questions[self._index_of(question_id)].model_copy(deep=True)

    def create(self, text: Any, category: Any, applicable_for: Any = None) -> Question:
        require_question_fields(text, category)
        tags = clean_applicable_for(applicable_for)
        with self._lock:
            question = Question(
                id=self._next_id,
                text=text,
                category=category,
                applicable_for=tags,
                order=next_order(q.order for q in self._questions),
            )
            self._next_id += 1
            self._questions.append(question)
        logger.info("questions.store.create id=%s order=%s", question.id, question.order)
        return question.model_copy(deep=True)

    def update(self, question_id: QuestionId, fields: Mapping[str, Any]) -> Question:
        changes: dict[str, Any] = {}
        for name in UPDATABLE_FIELDS:
            if name not in fields:
                continue
            if name == "applicable_for":
                changes[name] = clean_applicable_for(fields[name])
            else:
                changes[name] = require_text(fields[name], name)
        with self._lock:
            index = self._index_of(question_id)
            updated = self._questions[index].model_copy(update=changes)
            self._questions[index] = updated
        logger.info("questions.store.update id=%s fields=%s", updated.id, sorted(changes))
        return updated.model_copy(deep=True)

    def delete(self, question_id: QuestionId) -> None:
        with self._lock:
            removed = self._questions.pop(self._index_of(question_id))
        logger.info("questions.store.delete id=%s", removed.id)

    def reorder(self, ordered_ids: Sequence[Any]) -> List[Question]:
        if not isinstance(ordered_ids, (list, tuple)):
            raise ValidationError("orderedIds must be an array")
        ranks = order_map([coerce_question_id(v) for v in ordered_ids])
        with self._lock:
            new_orders = apply_order_map({q.id: q.order for q in self._questions}, ranks)
            self._questions = sort_questions(
                q.model_copy(update={"order": new_orders[q.id]}) for q in self._questions
            )
            result = [q.model_copy(deep=True) for q in self._questions]
        logger.info("questions.store.reorder requested=%s total=%s", len(ordered_ids), len(result))
        return result


def build_question_store(config: Any) -> QuestionStore:
    """Construct the store selected by ``config.store.backend``."""
    backend = getattr(getattr(config, "store", None), "backend", "memory")
    if backend == "sql":
        from onboarding_admin.db.base import build_engine
        from onboarding_admin.db.migrations_runner import apply_migrations
        from onboarding_admin.logic.repository_questions import SqlQuestionStore

        engine = build_engine(config.database.dsn)
        apply_migrations(engine)
        return SqlQuestionStore(engine)
    return InMemoryQuestionStore()


__all__ = [
    "QuestionStore",
    "InMemoryQuestionStore",
    "build_question_store",
    "coerce_question_id",
    "clean_applicable_for",
    "require_text",
    "sort_questions",
]
