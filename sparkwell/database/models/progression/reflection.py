"""
Reflection - a user's response to a quest.
Schema only. Immutable after creation; the owner may delete it.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sparkwell.core.database.base import Base, IdMixin, utc_now


class Reflection(Base, IdMixin):
    __tablename__ = "reflections"
    __table_args__ = (
        Index("ix_reflections_user_time", "user_id", "created_at"),
        Index("ix_reflections_user_title", "user_id", "quest_title"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    quest_title: Mapped[str] = mapped_column(String(200), nullable=False)
    quest_type: Mapped[str] = mapped_column(String(20), nullable=False)

    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    audio_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    quality_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
