"""
Reward catalog definitions.

A `RewardDefinition` is immutable catalog data. Invariants checked on
construction:

- cost is a positive integer
- duration_hours is present (and positive) iff the reward is temporary
- category, type and rarity come from closed vocabularies
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Mapping, Optional

from sparkwell.domain.models.base import (
    DomainValidationError,
    validate_choice,
    validate_not_empty,
    validate_positive,
)


class RewardCategory(str, enum.Enum):
    BOOST = "boost"
    CONTENT = "content"
    ACHIEVEMENT = "achievement"
    COSMETIC = "cosmetic"
    FEATURE = "feature"


class RewardType(str, enum.Enum):
    INSTANT = "instant"
    TEMPORARY = "temporary"
    PERMANENT = "permanent"


class RewardRarity(str, enum.Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


@dataclass(frozen=True)
class RewardDefinition:
    id: str
    name: str
    description: str
    cost: int
    category: RewardCategory
    type: RewardType
    rarity: RewardRarity
    duration_hours: Optional[int] = None
    icon: Optional[str] = None
    color: Optional[str] = None

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        validate_not_empty(self.name, "name")
        validate_positive(self.cost, "cost")

        if self.type is RewardType.TEMPORARY:
            if self.duration_hours is None:
                raise DomainValidationError(
                    f"reward '{self.id}' is temporary but has no duration_hours",
                    field="duration_hours",
                )
            validate_positive(self.duration_hours, "duration_hours")
        elif self.duration_hours is not None:
            raise DomainValidationError(
                f"reward '{self.id}' is {self.type.value} and must not set duration_hours",
                field="duration_hours",
            )

    @property
    def is_temporary(self) -> bool:
        return self.type is RewardType.TEMPORARY

    def expires_at(self, redeemed_at: datetime) -> Optional[datetime]:
        """Expiry instant for a redemption made at `redeemed_at` (temporary only)."""
        if not self.is_temporary or self.duration_hours is None:
            return None
        return redeemed_at + timedelta(hours=self.duration_hours)

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> "RewardDefinition":
        """Build from one YAML catalog entry; raises DomainValidationError."""
        category = str(data.get("category", "")).lower()
        reward_type = str(data.get("type", "")).lower()
        rarity = str(data.get("rarity", "")).lower()

        validate_choice(category, (c.value for c in RewardCategory), "category")
        validate_choice(reward_type, (t.value for t in RewardType), "type")
        validate_choice(rarity, (r.value for r in RewardRarity), "rarity")

        return cls(
            id=str(data.get("id", "")).strip(),
            name=str(data.get("name", "")).strip(),
            description=str(data.get("description", "")).strip(),
            cost=data.get("cost"),  # type: ignore[arg-type]
            category=RewardCategory(category),
            type=RewardType(reward_type),
            rarity=RewardRarity(rarity),
            duration_hours=data.get("duration_hours"),
            icon=data.get("icon"),
            color=data.get("color"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "cost": self.cost,
            "category": self.category.value,
            "type": self.type.value,
            "rarity": self.rarity.value,
            "duration_hours": self.duration_hours,
            "icon": self.icon,
            "color": self.color,
        }
