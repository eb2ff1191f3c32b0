"""
Redemption domain model.

`RedemptionRecord` is the read-side view of a persisted redemption. The
persisted `status` is reported as stored; `is_expired_at(now)` derives
expiry from `expires_at` on every read. The two can diverge (an ACTIVE
record may already be expired) and both are exposed to callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from sparkwell.core.database.base import ensure_utc
from sparkwell.database.models.enums import RedemptionStatus

if TYPE_CHECKING:
    from sparkwell.database.models.economy.redemption import Redemption


def is_expired(expires_at: Optional[datetime], now: datetime) -> bool:
    """True iff `expires_at` is set and `now` is strictly after it."""
    if expires_at is None:
        return False
    return ensure_utc(now) > ensure_utc(expires_at)


@dataclass(frozen=True)
class RedemptionRecord:
    id: int
    user_id: int
    reward_id: str
    reward_name: str
    reward_description: str
    cost: int
    redeemed_at: datetime
    status: RedemptionStatus
    expires_at: Optional[datetime] = None

    @classmethod
    def from_db(cls, row: "Redemption") -> "RedemptionRecord":
        return cls(
            id=row.id,
            user_id=row.user_id,
            reward_id=row.reward_id,
            reward_name=row.reward_name,
            reward_description=row.reward_description,
            cost=row.cost,
            redeemed_at=ensure_utc(row.redeemed_at),
            status=RedemptionStatus(row.status),
            expires_at=ensure_utc(row.expires_at),
        )

    def is_expired_at(self, now: datetime) -> bool:
        return is_expired(self.expires_at, now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "reward_id": self.reward_id,
            "reward_name": self.reward_name,
            "reward_description": self.reward_description,
            "cost": self.cost,
            "redeemed_at": self.redeemed_at.isoformat(),
            "status": self.status.value,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }


@dataclass(frozen=True)
class ActiveRedemption:
    """An ACTIVE redemption annotated with expiry derived at read time."""

    record: RedemptionRecord
    is_expired: bool

    def to_dict(self) -> Dict[str, Any]:
        return {**self.record.to_dict(), "is_expired": self.is_expired}
