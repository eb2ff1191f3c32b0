"""
TransactionLog - spark-point audit log (immutable).
Schema only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sparkwell.core.database.base import Base, IdMixin, JSONType, utc_now


class TransactionLog(Base, IdMixin):
    """
    One row per ledger movement, written in the same transaction as the
    balance change it describes.

    - user_id
    - transaction_type (credit / debit)
    - amount, balance_after
    - reason (e.g. "reflection:Mindful Walk", "redeem:mood_boost")
    - details (JSON)
    - timestamp
    """

    __tablename__ = "transaction_logs"
    __table_args__ = (
        Index("ix_transaction_logs_user_time", "user_id", "timestamp"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    transaction_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)

    reason: Mapped[str] = mapped_column(Text, nullable=False)

    details: Mapped[Dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
        default=dict,
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
