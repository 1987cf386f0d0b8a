"""Question record and request payload models.

`GenderOption` is a plain constants container rather than an Enum so the
values serialise as bare strings on the wire.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class GenderOption:
    MALE = "Male"
    FEMALE = "Female"
    NON_BINARY = "Non-binary"
    ALL_GENDERS = "All Genders"

    ALL = (MALE, FEMALE, NON_BINARY, ALL_GENDERS)


SUGGESTED_CATEGORIES = (
    "Demographics",
    "Goals & Objectives",
    "Health & Conditions",
    "Lifestyle Factors",
    "Preferences",
)

QuestionId = Union[int, str]


class Question(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: QuestionId
    text: str
    category: str
    applicable_for: list[str] = Field(default_factory=list, alias="applicableFor")
    order: int

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class QuestionCreate(BaseModel):
    """Create payload; presence of text/category is checked by the store."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: Optional[str] = None
    category: Optional[str] = None
    applicable_for: Optional[Any] = Field(default=None, alias="applicableFor")


class QuestionUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: Optional[str] = None
    category: Optional[str] = None
    applicable_for: Optional[Any] = Field(default=None, alias="applicableFor")

    def supplied_fields(self) -> dict[str, Any]:
        # Absent and null fields are both left untouched by the merge
        return self.model_dump(exclude_none=True)


__all__ = [
    "GenderOption",
    "SUGGESTED_CATEGORIES",
    "QuestionId",
    "Question",
    "QuestionCreate",
    "QuestionUpdate",
]
