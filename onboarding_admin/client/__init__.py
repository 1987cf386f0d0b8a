"""Admin UI core: API client, payload normalisation and list reconciliation."""

from __future__ import annotations

from onboarding_admin.client.api import ApiError, QuestionsApiClient
from onboarding_admin.client.normalizer import NormalizedQuestion, normalize_question, normalize_questions
from onboarding_admin.client.reconciler import ReorderOutcome, ReorderPhase, ReorderReconciler
from onboarding_admin.client.session import SessionCredentials
from onboarding_admin.client.state import QuestionListState

__all__ = [
    "ApiError",
    "QuestionsApiClient",
    "NormalizedQuestion",
    "normalize_question",
    "normalize_questions",
    "ReorderOutcome",
    "ReorderPhase",
    "ReorderReconciler",
    "SessionCredentials",
    "QuestionListState",
]
