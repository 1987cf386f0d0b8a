"""Visible question list state and the admin page's CRUD actions.

Actions await the API client and then update the list synchronously. They
never raise: failures are logged and surfaced through ``error`` for inline
display, leaving the list as it was.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from onboarding_admin.client.api import ApiError, QuestionsApiClient
from onboarding_admin.client.normalizer import (
    NormalizedQuestion,
    normalize_question,
    normalize_questions,
)

logger = logging.getLogger(__name__)


class QuestionListState:
    def __init__(self, client: QuestionsApiClient) -> None:
        self.client = client
        self.questions: List[NormalizedQuestion] = []
        self.error: Optional[str] = None
        self.loading = False
        self.editing_id: Optional[str] = None

    @property
    def ids(self) -> List[str]:
        return [q.id for q in self.questions]

    def find(self, question_id: Any) -> Optional[NormalizedQuestion]:
        token = str(question_id)
        return next((q for q in self.questions if q.id == token), None)

    def replace(self, questions: Sequence[NormalizedQuestion]) -> None:
        self.questions = list(questions)

    async def load(self) -> bool:
        self.loading = True
        try:
            payload = await self.client.list_questions()
        except ApiError as exc:
            logger.error("questions.load failed status=%s message=%s", exc.status_code, exc.message)
            self.error = exc.message
            return False
        finally:
            self.loading = False
        self.replace(normalize_questions(payload))
        self.error = None
        logger.info("questions.load count=%s", len(self.questions))
        return True

    def start_edit(self, question_id: Any) -> Optional[Dict[str, Any]]:
        """Enter edit mode and return the form's initial values."""
        question = self.find(question_id)
        if question is None:
            return None
        self.editing_id = question.id
        return {
            "text": question.text,
            "category": question.category,
            "applicableFor": list(question.applicable_for),
        }

    def cancel_edit(self) -> None:
        self.editing_id = None

    async def save(self, text: str, category: str, applicable_for: Sequence[str] = ()) -> bool:
        """Create a question, or update the one being edited."""
        if not (text or "").strip() or not category:
            self.error = "Question text and category are required"
            return False
        data = {"text": text.strip(), "category": category, "applicableFor": list(applicable_for)}
        editing_id = self.editing_id
        try:
            if editing_id is not None:
                raw = await self.client.update_question(editing_id, data)
            else:
                raw = await self.client.create_question(data)
        except ApiError as exc:
            action = "update" if editing_id is not None else "create"
            logger.error("questions.%s failed status=%s message=%s", action, exc.status_code, exc.message)
            self.error = exc.message
            return False

        saved = normalize_question(raw)
        if editing_id is not None:
            self.replace([saved if q.id == editing_id else q for q in self.questions])
            self.editing_id = None
        else:
            self.replace(sorted([*self.questions, saved], key=lambda q: q.order))
        self.error = None
        return True

    async def delete(self, question_id: Any) -> bool:
        token = str(question_id)
        try:
            await self.client.delete_question(token)
        except ApiError as exc:
            logger.error("questions.delete failed id=%s status=%s message=%s", token, exc.status_code, exc.message)
            self.error = exc.message
            return False
        self.replace([q for q in self.questions if q.id != token])
        if self.editing_id == token:
            self.editing_id = None
        self.error = None
        return True


__all__ = ["QuestionListState"]
