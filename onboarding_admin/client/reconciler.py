"""Drag-and-drop reorder with optimistic update and rollback.

A gesture moves through ``idle -> dragging -> reordering -> committing`` and
back to ``idle``, via ``rolled_back`` when the server rejects the new order.
The optimistic list is visible before the commit is awaited; the pre-drag
list is restored on failure.

Only one commit may be in flight. A drop that arrives while another commit
is pending is refused and leaves the list untouched.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from onboarding_admin.client.api import ApiError, QuestionsApiClient
from onboarding_admin.client.normalizer import has_question_collection, normalize_questions
from onboarding_admin.client.state import QuestionListState
from onboarding_admin.logic.order_sequences import move_before, renumber

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "A reorder is already being saved; try again when it finishes"


class ReorderPhase:
    IDLE = "idle"
    DRAGGING = "dragging"
    REORDERING = "reordering"
    COMMITTING = "committing"
    ROLLED_BACK = "rolled_back"


class ReorderOutcome:
    CANCELLED = "cancelled"
    BUSY = "busy"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class ReorderReconciler:
    def __init__(self, state: QuestionListState, client: Optional[QuestionsApiClient] = None) -> None:
        self.state = state
        self.client = client or state.client
        self.phase = ReorderPhase.IDLE
        self.dragged_id: Optional[str] = None
        self.history: List[str] = []
        self._gesture = 0
        self._committing = False

    @property
    def saving(self) -> bool:
        return self._committing

    def _transition(self, gesture: int, history: List[str], phase: str) -> None:
        history.append(phase)
        # A newer gesture owns the visible phase
        if gesture == self._gesture:
            self.phase = phase

    def drag_start(self, question_id: Any) -> None:
        self._gesture += 1
        self.dragged_id = str(question_id)
        self.phase = ReorderPhase.DRAGGING

    def drag_end(self) -> None:
        """Gesture ended without a drop."""
        if self.phase == ReorderPhase.DRAGGING:
            self.phase = ReorderPhase.IDLE
        self.dragged_id = None

    async def drop(self, target_id: Any) -> str:
        gesture = self._gesture
        dragged = self.dragged_id
        target = str(target_id)
        self.dragged_id = None
        history = [self.phase]
        self.history = history

        if dragged is None or dragged == target:
            self._transition(gesture, history, ReorderPhase.IDLE)
            return ReorderOutcome.CANCELLED
        if self._committing:
            logger.warning("reorder.refused_busy dragged=%s target=%s", dragged, target)
            self.state.error = BUSY_MESSAGE
            self._transition(gesture, history, ReorderPhase.IDLE)
            return ReorderOutcome.BUSY

        snapshot = list(self.state.questions)
        ids = [q.id for q in snapshot]
        if dragged not in ids or target not in ids:
            logger.warning("reorder.unknown_id dragged=%s target=%s", dragged, target)
            self._transition(gesture, history, ReorderPhase.IDLE)
            return ReorderOutcome.CANCELLED

        self._transition(gesture, history, ReorderPhase.REORDERING)
        # Permute positions rather than ids so duplicate ids cannot drop items
        positions = move_before(list(range(len(snapshot))), ids.index(dragged), ids.index(target))
        optimistic = renumber([snapshot[i] for i in positions])
        self.state.replace(optimistic)
        self.state.error = None

        self._transition(gesture, history, ReorderPhase.COMMITTING)
        self._committing = True
        try:
            result = await self.client.reorder_questions([q.to_payload() for q in optimistic])
        except ApiError as exc:
            self._transition(gesture, history, ReorderPhase.ROLLED_BACK)
            self.state.replace(snapshot)
            self.state.error = exc.message
            logger.warning(
                "reorder.rolled_back dragged=%s target=%s status=%s message=%s",
                dragged,
                target,
                exc.status_code,
                exc.message,
            )
            outcome = ReorderOutcome.ROLLED_BACK
        else:
            if has_question_collection(result):
                self.state.replace(normalize_questions(result))
            logger.info("reorder.committed dragged=%s target=%s", dragged, target)
            outcome = ReorderOutcome.COMMITTED
        finally:
            self._committing = False
        self._transition(gesture, history, ReorderPhase.IDLE)
        return outcome


__all__ = ["ReorderReconciler", "ReorderPhase", "ReorderOutcome", "BUSY_MESSAGE"]
