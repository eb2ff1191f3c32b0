"""
MoodLogEntry - append-only mood history.
Schema only.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from sparkwell.core.database.base import Base, IdMixin, JSONType, utc_now


class MoodLogEntry(Base, IdMixin):
    __tablename__ = "mood_log_entries"
    __table_args__ = (
        Index("ix_mood_log_entries_user_time", "user_id", "logged_at"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    logged_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    general: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    frequency: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    triggers: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)

    coping_mechanisms: Mapped[List[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )
