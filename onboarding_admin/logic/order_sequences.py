"""Question order sequencing helpers.

Single source of truth for ``order`` values: appending a new question,
mapping a caller-supplied id sequence to 1-based ranks, and computing the
sequence produced by a drag-and-drop move. Both question stores and the client
reorder reconciler use these helpers; nothing here performs I/O.
"""

from __future__ import annotations

from typing import Any, Dict, Hashable, Iterable, List, Mapping, Sequence, TypeVar
import logging

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Hashable)


def next_order(orders: Iterable[int]) -> int:
    """Return ``max(orders) + 1``, or 1 for an empty collection."""
    current = [int(o) for o in orders]
    return (max(current) if current else 0) + 1


def order_map(ordered_ids: Sequence[T]) -> Dict[T, int]:
    """Map each id to ``position + 1``.

    When an id appears more than once its last position wins.
    """
    return {qid: index + 1 for index, qid in enumerate(ordered_ids)}


def apply_order_map(current: Mapping[T, int], ranks: Mapping[T, int]) -> Dict[T, int]:
    """Return the new order for every id in ``current``.

    Ids absent from ``ranks`` keep their prior value; ranks for ids not in
    ``current`` are ignored. A partial sequence can therefore leave two ids
    sharing an order value.
    """
    return {qid: int(ranks.get(qid, prior)) for qid, prior in current.items()}


def move_before(ids: Sequence[T], dragged: T, target: T) -> List[T]:
    """Return the sequence after dropping ``dragged`` onto ``target``.

    The dragged id is removed and reinserted at the target's original index,
    so dragging downwards lands after the target and dragging upwards lands
    before it. Raises ``ValueError`` if either id is missing.
    """
    working = list(ids)
    from_index = working.index(dragged)
    to_index = working.index(target)
    moved = working.pop(from_index)
    working.insert(to_index, moved)
    logger.debug(
        "order_sequences.move_before dragged=%s target=%s from=%s to=%s",
        dragged,
        target,
        from_index,
        to_index,
    )
    return working


def renumber(items: Sequence[Any], key: str = "order") -> List[Any]:
    """Assign ``order = index + 1`` to each mapping or attribute-bearing item.

    Mappings are copied; other objects must provide ``replace(**changes)``
    (dataclasses via ``dataclasses.replace`` wrappers) and are replaced.
    """
    result: List[Any] = []
    for index, item in enumerate(items):
        if isinstance(item, Mapping):
            result.append({**item, key: index + 1})
        else:
            result.append(item.replace(**{key: index + 1}))
    return result


__all__ = ["next_order", "order_map", "apply_order_map", "move_before", "renumber"]
