"""SQL-backed question store.

Encapsulates the DB reads/writes behind the same contract as the in-memory
store, keeping the HTTP layer free of SQL. Each operation runs in its own
transaction; failures are logged with ``exc_info`` and re-raised.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Mapping, Sequence

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

from onboarding_admin.logic.errors import NotFoundError, ValidationError
from onboarding_admin.logic.order_sequences import apply_order_map, next_order, order_map
from onboarding_admin.logic.question_store import (
    UPDATABLE_FIELDS,
    QuestionStore,
    clean_applicable_for,
    coerce_question_id,
    require_question_fields,
    require_text,
    sort_questions,
)
from onboarding_admin.models.question import Question, QuestionId

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "question_id, question_text, category, applicable_for, question_order"
# Blocks concurrent appends until commit; plain reads still proceed
_APPEND_LOCK = "LOCK TABLE onboarding_question IN SHARE ROW EXCLUSIVE MODE"


def _decode_tags(raw: Any) -> List[str]:
    if isinstance(raw, list):
        return [str(t) for t in raw]
    try:
        parsed = json.loads(raw or "[]")
    except (TypeError, ValueError):
        logger.warning("repository_questions.tags_decode_failed raw=%r", raw)
        return []
    return [str(t) for t in parsed] if isinstance(parsed, list) else []


def _row_to_question(row: Any) -> Question:
    return Question(
        id=int(row[0]),
        text=str(row[1]),
        category=str(row[2]),
        applicable_for=_decode_tags(row[3]),
        order=int(row[4]),
    )


class SqlQuestionStore(QuestionStore):
    """Question store over the ``onboarding_question`` table."""

    backend = "sql"

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _fetch(self, conn: Connection, qid: int | None) -> Question:
        if qid is None:
            raise NotFoundError("Question not found")
        row = conn.execute(
            sql_text(f"SELECT {_SELECT_COLUMNS} FROM onboarding_question WHERE question_id = :qid"),
            {"qid": qid},
        ).fetchone()
        if row is None:
            raise NotFoundError("Question not found")
        return _row_to_question(row)

    def _lock_for_append(self, conn: Connection) -> None:
        """Serialise next-order reads so concurrent creates get distinct orders.

        SQLite admits one writer per database and fails the second with
        ``database is locked``, so only postgres needs the table lock.
        """
        if conn.dialect.name.startswith("postgres"):
            conn.execute(sql_text(_APPEND_LOCK))

    def list(self) -> List[Question]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                sql_text(
                    f"SELECT {_SELECT_COLUMNS} FROM onboarding_question "
                    "ORDER BY question_order ASC, question_id ASC"
                )
            ).fetchall()
        return sort_questions(_row_to_question(r) for r in rows)

    def get(self, question_id: QuestionId) -> Question:
        with self.engine.connect() as conn:
            return self._fetch(conn, coerce_question_id(question_id))

    def create(self, text: Any, category: Any, applicable_for: Any = None) -> Question:
        require_question_fields(text, category)
        tags = clean_applicable_for(applicable_for)
        params = {"t": text, "c": category, "a": json.dumps(tags)}
        try:
            with self.engine.begin() as conn:
                self._lock_for_append(conn)
                orders = [int(r[0]) for r in conn.execute(sql_text("SELECT question_order FROM onboarding_question")).fetchall()]
                params["o"] = next_order(orders)
                insert = (
                    "INSERT INTO onboarding_question (question_text, category, applicable_for, question_order) "
                    "VALUES (:t, :c, :a, :o)"
                )
                if conn.dialect.name.startswith("postgres"):
                    new_id = int(conn.execute(sql_text(insert + " RETURNING question_id"), params).scalar_one())
                else:
                    new_id = int(conn.execute(sql_text(insert), params).lastrowid)
                created = self._fetch(conn, new_id)
        except Exception:
            logger.error("repository_questions.create failed", exc_info=True)
            raise
        logger.info("questions.store.create id=%s order=%s", created.id, created.order)
        return created

    def update(self, question_id: QuestionId, fields: Mapping[str, Any]) -> Question:
        assignments: list[str] = []
        params: dict[str, Any] = {}
        for name in UPDATABLE_FIELDS:
            if name not in fields:
                continue
            if name == "applicable_for":
                assignments.append("applicable_for = :a")
                params["a"] = json.dumps(clean_applicable_for(fields[name]))
            elif name == "text":
                assignments.append("question_text = :t")
                params["t"] = require_text(fields[name], name)
            else:
                assignments.append("category = :c")
                params["c"] = require_text(fields[name], name)
        with self.engine.begin() as conn:
            current = self._fetch(conn, coerce_question_id(question_id))
            if assignments:
                params["qid"] = current.id
                conn.execute(
                    sql_text(f"UPDATE onboarding_question SET {', '.join(assignments)} WHERE question_id = :qid"),
                    params,
                )
            updated = self._fetch(conn, int(current.id))
        logger.info("questions.store.update id=%s fields=%s", updated.id, len(assignments))
        return updated

    def delete(self, question_id: QuestionId) -> None:
        with self.engine.begin() as conn:
            current = self._fetch(conn, coerce_question_id(question_id))
            conn.execute(
                sql_text("DELETE FROM onboarding_question WHERE question_id = :qid"),
                {"qid": current.id},
            )
        logger.info("questions.store.delete id=%s", current.id)

    def reorder(self, ordered_ids: Sequence[Any]) -> List[Question]:
        if not isinstance(ordered_ids, (list, tuple)):
            raise ValidationError("orderedIds must be an array")
        ranks = order_map([coerce_question_id(v) for v in ordered_ids])
        try:
            with self.engine.begin() as conn:
                rows = conn.execute(sql_text("SELECT question_id, question_order FROM onboarding_question")).fetchall()
                current = {int(r[0]): int(r[1]) for r in rows}
                new_orders = apply_order_map(current, ranks)
                for qid, ord_val in new_orders.items():
                    if ord_val != current[qid]:
                        conn.execute(
                            sql_text("UPDATE onboarding_question SET question_order = :ord WHERE question_id = :qid"),
                            {"ord": ord_val, "qid": qid},
                        )
        except Exception:
            logger.error("repository_questions.reorder failed requested=%s", len(ordered_ids), exc_info=True)
            raise
        result = self.list()
        logger.info("questions.store.reorder requested=%s total=%s", len(ordered_ids), len(result))
        return result


__all__ = ["SqlQuestionStore"]
