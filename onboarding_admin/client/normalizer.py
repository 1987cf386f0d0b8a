"""Canonicalisation of question payloads returned by the admin API.

Backends in the wild disagree on field names (``question_id`` vs ``id``,
``phase`` vs ``category``) and on how gender tags are encoded. Each logical
attribute is resolved from an ordered alias list, first present value wins.

Every function here is total: malformed input falls back to defaults and
nothing raises.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from onboarding_admin.models.question import GenderOption

FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "question_id", "questionId"),
    "question_id": ("questionId", "question_id", "qid"),
    "text": ("text", "question_text", "questionText", "question", "body"),
    "order": ("order", "displayOrder", "sort"),
    "category": ("category", "phase", "phaseName"),
    "applicable_for": ("applicableFor", "applicable_for"),
}
# A blank identifier falls through to the next alias
IDENTITY_ATTRIBUTES = frozenset({"id", "question_id"})

DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_GENDERS: Tuple[str, ...] = (GenderOption.ALL_GENDERS,)


@dataclass(frozen=True)
class NormalizedQuestion:
    id: str
    text: str = ""
    category: str = DEFAULT_CATEGORY
    applicable_for: Tuple[str, ...] = DEFAULT_GENDERS
    order: float = 0
    question_id: Optional[str] = field(default=None, compare=False)

    def replace(self, **changes: Any) -> "NormalizedQuestion":
        return replace(self, **changes)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "category": self.category,
            "applicableFor": list(self.applicable_for),
            "order": self.order,
        }
        if self.question_id is not None:
            payload["questionId"] = self.question_id
        return payload


def _first(item: Mapping[str, Any], attribute: str) -> Any:
    skip_blank = attribute in IDENTITY_ATTRIBUTES
    for key in FIELD_ALIASES[attribute]:
        value = item.get(key)
        if value is None or (skip_blank and isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def to_number(value: Any, fallback: float = 0) -> float:
    """Coerce to a finite number; integral results are returned as ints."""
    if isinstance(value, bool) or value is None:
        return fallback
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return int(number) if number.is_integer() else number


def normalize_gender(value: Any) -> str:
    """Map an arbitrary gender value onto one of the four canonical tags."""
    if value is None:
        return GenderOption.ALL_GENDERS
    s = str(value).strip()
    if not s:
        return GenderOption.ALL_GENDERS
    if s in GenderOption.ALL:
        return s
    lower = s.lower()
    if lower == "f" or "female" in lower:
        return GenderOption.FEMALE
    if lower == "m" or "male" in lower:
        return GenderOption.MALE
    if "non" in lower:
        return GenderOption.NON_BINARY
    if "all" in lower:
        return GenderOption.ALL_GENDERS
    return GenderOption.ALL_GENDERS


def _split_gender_string(raw: str) -> List[str]:
    try:
        parsed = json.loads(raw)
    except ValueError:
        parsed = None
    else:
        if isinstance(parsed, list):
            return [normalize_gender(v) for v in parsed]
        if parsed is not None and not isinstance(parsed, dict):
            return [normalize_gender(parsed)]
    if "," in raw:
        return [normalize_gender(part) for part in raw.split(",")]
    return [normalize_gender(raw)]


def normalize_genders(value: Any) -> Tuple[str, ...]:
    """Return de-duplicated canonical tags; never empty."""
    if isinstance(value, (list, tuple)):
        tags = [normalize_gender(v) for v in value]
    elif isinstance(value, str):
        tags = _split_gender_string(value)
    else:
        tags = []
    unique = tuple(dict.fromkeys(tags))
    return unique or DEFAULT_GENDERS


def normalize_question(item: Any) -> NormalizedQuestion:
    if not isinstance(item, Mapping):
        return NormalizedQuestion(id="")
    question_id = _first(item, "question_id")
    category = _first(item, "category")
    return NormalizedQuestion(
        id=_as_text(_first(item, "id")),
        text=_as_text(_first(item, "text")),
        category=_as_text(category) if category is not None and _as_text(category) else DEFAULT_CATEGORY,
        applicable_for=normalize_genders(_first(item, "applicable_for")),
        order=to_number(_first(item, "order")),
        question_id=_as_text(question_id) if question_id is not None else None,
    )


def extract_items(payload: Any) -> Sequence[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("questions"), list):
        return payload["questions"]
    return []


def has_question_collection(payload: Any) -> bool:
    return isinstance(payload, list) or (
        isinstance(payload, Mapping) and isinstance(payload.get("questions"), list)
    )


def sort_normalized(questions: Iterable[NormalizedQuestion]) -> List[NormalizedQuestion]:
    return sorted(questions, key=lambda q: (q.order, q.id))


def normalize_questions(payload: Any) -> List[NormalizedQuestion]:
    """Canonical, ordered question list for any JSON value."""
    return sort_normalized(normalize_question(item) for item in extract_items(payload))


__all__ = [
    "FIELD_ALIASES",
    "DEFAULT_CATEGORY",
    "DEFAULT_GENDERS",
    "NormalizedQuestion",
    "normalize_gender",
    "normalize_genders",
    "normalize_question",
    "normalize_questions",
    "extract_items",
    "has_question_collection",
    "sort_normalized",
    "to_number",
]
