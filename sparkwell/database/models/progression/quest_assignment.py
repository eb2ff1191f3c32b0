"""
QuestAssignment - the quest recorded as assigned to a user on a given day.
Schema only. One row per user per day.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from sparkwell.core.database.base import Base, IdMixin, utc_now


class QuestAssignment(Base, IdMixin):
    __tablename__ = "quest_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "assignment_date", name="uq_quest_assignments_user_day"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    assignment_date: Mapped[date] = mapped_column(Date, nullable=False)

    quest_title: Mapped[str] = mapped_column(String(200), nullable=False)
    quest_type: Mapped[str] = mapped_column(String(20), nullable=False)

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
