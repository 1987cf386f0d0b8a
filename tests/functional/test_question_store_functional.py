"""Functional tests for the question stores.

Scope covered here:
- create assigns ids and append-to-end order values
- update merges only supplied fields
- delete removes without renumbering
- reorder ranks by position and leaves omitted ids alone

Each test runs against the in-memory and SQL stores through the
parametrised ``store`` fixture.
"""

from __future__ import annotations

import pytest

from onboarding_admin.logic.errors import NotFoundError, ValidationError
from onboarding_admin.logic.order_sequences import apply_order_map, move_before, next_order, order_map
from onboarding_admin.logic.question_store import MAX_QUESTION_ID, coerce_question_id
from onboarding_admin.logic.repository_questions import SqlQuestionStore

HUGE_ID = 999999999999999999999999


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_create_on_empty_store_gets_order_one(store) -> None:
    """Verifies the first question is ranked 1 with an empty tag list by default."""
    q = store.create("Age?", "Demographics")
    assert q.order == 1
    assert q.applicable_for == []
    assert q.text == "Age?"
    assert q.category == "Demographics"


def test_create_appends_after_current_maximum(store) -> None:
    """Verifies order = 1 + max(existing order), even after gaps appear."""
    a = store.create("A", "Goals & Objectives")
    b = store.create("B", "Goals & Objectives")
    store.delete(a.id)
    c = store.create("C", "Preferences")
    assert b.order == 2
    assert c.order == 3


def test_create_rejects_missing_text_or_category(store) -> None:
    for text, category in [("", "Demographics"), ("Age?", ""), (None, "Demographics"), ("Age?", None), ("   ", "X")]:
        with pytest.raises(ValidationError) as info:
            store.create(text, category)
        assert info.value.message == "text and category are required"
    assert store.list() == []


def test_create_deduplicates_tags(store) -> None:
    q = store.create("Cycle?", "Health & Conditions", ["Female", "Female", "Non-binary"])
    assert q.applicable_for == ["Female", "Non-binary"]


def test_ids_are_never_reused_after_delete(store) -> None:
    first = store.create("One", "Demographics")
    store.delete(first.id)
    second = store.create("Two", "Demographics")
    assert second.id != first.id


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

def test_update_merges_only_supplied_fields(store) -> None:
    q = store.create("Age?", "Demographics", ["All Genders"])
    updated = store.update(q.id, {"text": "How old are you?"})
    assert updated.text == "How old are you?"
    assert updated.category == "Demographics"
    assert updated.applicable_for == ["All Genders"]
    assert updated.order == q.order
    assert updated.id == q.id


def test_update_accepts_string_id(store) -> None:
    q = store.create("Age?", "Demographics")
    updated = store.update(str(q.id), {"applicable_for": ["Male"]})
    assert updated.applicable_for == ["Male"]


def test_update_unknown_id_raises_not_found(store) -> None:
    with pytest.raises(NotFoundError):
        store.update(99, {"text": "x"})
    with pytest.raises(NotFoundError):
        store.update("not-a-number", {"text": "x"})
    with pytest.raises(NotFoundError):
        store.update("²", {"text": "x"})


@pytest.mark.parametrize("huge", [HUGE_ID, str(HUGE_ID), -HUGE_ID, 2**63])
def test_ids_beyond_64_bits_are_unknown_not_errors(store, huge) -> None:
    q = store.create("Age?", "Demographics")
    with pytest.raises(NotFoundError):
        store.get(huge)
    with pytest.raises(NotFoundError):
        store.update(huge, {"text": "x"})
    with pytest.raises(NotFoundError):
        store.delete(huge)
    assert [r.id for r in store.reorder([huge, q.id])] == [q.id]


def test_largest_64_bit_id_is_still_a_valid_lookup(store) -> None:
    assert coerce_question_id(str(MAX_QUESTION_ID)) == MAX_QUESTION_ID
    with pytest.raises(NotFoundError):
        store.get(MAX_QUESTION_ID)


def test_update_rejects_blank_text_and_non_list_tags(store) -> None:
    q = store.create("Age?", "Demographics")
    with pytest.raises(ValidationError):
        store.update(q.id, {"text": ""})
    with pytest.raises(ValidationError):
        store.update(q.id, {"applicable_for": "Male"})
    assert store.get(q.id).text == "Age?"


def test_delete_removes_and_later_access_fails(store) -> None:
    a = store.create("A", "Demographics")
    b = store.create("B", "Demographics")
    c = store.create("C", "Demographics")
    store.delete(b.id)
    remaining = store.list()
    assert [q.id for q in remaining] == [a.id, c.id]
    # No renumbering on delete
    assert [q.order for q in remaining] == [1, 3]
    with pytest.raises(NotFoundError):
        store.get(b.id)
    with pytest.raises(NotFoundError):
        store.update(b.id, {"text": "again"})
    with pytest.raises(NotFoundError):
        store.delete(b.id)


# ---------------------------------------------------------------------------
# Reorder
# ---------------------------------------------------------------------------

def test_reorder_assigns_position_plus_one(store) -> None:
    q1 = store.create("One", "Demographics")
    q2 = store.create("Two", "Demographics")
    q3 = store.create("Three", "Demographics")
    result = store.reorder([q3.id, q1.id, q2.id])
    orders = {q.id: q.order for q in result}
    assert orders == {q1.id: 2, q2.id: 3, q3.id: 1}
    assert [q.id for q in result] == [q3.id, q1.id, q2.id]
    assert [q.id for q in store.list()] == [q3.id, q1.id, q2.id]


def test_reorder_with_string_ids_and_unknown_ids(store) -> None:
    q1 = store.create("One", "Demographics")
    q2 = store.create("Two", "Demographics")
    result = store.reorder([str(q2.id), "999", str(q1.id)])
    orders = {q.id: q.order for q in result}
    assert orders == {q2.id: 1, q1.id: 3}


def test_partial_reorder_leaves_omitted_orders_unchanged(store) -> None:
    q1 = store.create("One", "Demographics")
    q2 = store.create("Two", "Demographics")
    q3 = store.create("Three", "Demographics")
    result = store.reorder([q3.id])
    orders = {q.id: q.order for q in result}
    # q3 takes rank 1 and now collides with q1, which kept its prior order
    assert orders == {q1.id: 1, q2.id: 2, q3.id: 1}


def test_reorder_rejects_non_list(store) -> None:
    with pytest.raises(ValidationError):
        store.reorder("1,2,3")  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Order helpers
# ---------------------------------------------------------------------------

def test_order_helpers() -> None:
    assert next_order([]) == 1
    assert next_order([3, 1, 7]) == 8
    assert order_map(["b", "a", "b"]) == {"b": 3, "a": 2}
    assert apply_order_map({"a": 5, "b": 6}, {"a": 1, "z": 2}) == {"a": 1, "b": 6}
    assert move_before(["A", "B", "C"], "A", "C") == ["B", "C", "A"]
    assert move_before(["A", "B", "C"], "C", "A") == ["C", "A", "B"]
    with pytest.raises(ValueError):
        move_before(["A"], "A", "Z")


# ---------------------------------------------------------------------------
# SQL append locking
# ---------------------------------------------------------------------------

class _RecordingConnection:
    def __init__(self, dialect_name: str) -> None:
        self.dialect = type("Dialect", (), {"name": dialect_name})()
        self.statements: list[str] = []

    def execute(self, statement, params=None):
        self.statements.append(str(statement))


@pytest.mark.parametrize("dialect,expected", [("postgresql", 1), ("sqlite", 0)])
def test_create_locks_the_table_on_postgres_only(sql_store, dialect, expected) -> None:
    conn = _RecordingConnection(dialect)
    sql_store._lock_for_append(conn)
    assert len(conn.statements) == expected
    if expected:
        assert conn.statements[0].startswith("LOCK TABLE onboarding_question")


def test_sql_create_still_appends_after_lock_step(sql_store: SqlQuestionStore) -> None:
    orders = [sql_store.create(f"Q{i}", "Goals").order for i in range(3)]
    assert orders == [1, 2, 3]
