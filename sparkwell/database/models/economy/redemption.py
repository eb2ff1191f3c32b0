"""
Redemption - a reward purchased with spark points.
Schema only.

Name, description and cost are snapshots taken at redemption time so that
later catalog changes never rewrite history. `expires_at` is set only for
temporary rewards; expiry is derived at read time, the persisted status is
not advanced by any background process.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sparkwell.core.database.base import Base, IdMixin, utc_now
from ..enums import RedemptionStatus


class Redemption(Base, IdMixin):
    __tablename__ = "redemptions"
    __table_args__ = (
        Index("ix_redemptions_user_time", "user_id", "redeemed_at"),
        Index("ix_redemptions_user_status", "user_id", "status"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    reward_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    reward_name: Mapped[str] = mapped_column(String(200), nullable=False)
    reward_description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    cost: Mapped[int] = mapped_column(Integer, nullable=False)

    redeemed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=RedemptionStatus.ACTIVE.value,
    )

    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
