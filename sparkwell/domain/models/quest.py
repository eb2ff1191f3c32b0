"""
Quest catalog entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from sparkwell.database.models.enums import QuestType
from sparkwell.domain.models.base import (
    DomainValidationError,
    validate_not_empty,
)


@dataclass(frozen=True)
class Quest:
    """
    A recommended self-improvement activity.

    `title` is the catalog's unique key.
    """

    title: str
    description: str
    type: QuestType
    suggested_by: str = "system"

    def __post_init__(self) -> None:
        validate_not_empty(self.title, "title")
        validate_not_empty(self.description, "description")
        if not isinstance(self.type, QuestType):
            raise DomainValidationError(
                f"type must be a QuestType, got {self.type!r}", field="type"
            )

    @property
    def is_weekly(self) -> bool:
        return self.type is QuestType.WEEKLY

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "Quest":
        raw_type = str(data.get("type", "")).lower()
        try:
            quest_type = QuestType(raw_type)
        except ValueError as exc:
            raise DomainValidationError(
                f"type must be daily or weekly, got {data.get('type')!r}",
                field="type",
            ) from exc

        return cls(
            title=str(data.get("title", "")).strip(),
            description=str(data.get("description", "")).strip(),
            type=quest_type,
            suggested_by=str(data.get("suggested_by") or "system"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "suggested_by": self.suggested_by,
        }
