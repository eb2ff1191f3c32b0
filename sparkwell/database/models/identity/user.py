"""
User - identity record and spark-point economy counters.
Schema only.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from sparkwell.core.database.base import Base, IdMixin, TimestampMixin


class User(Base, IdMixin, TimestampMixin):
    """
    A registered user.

    Economy fields:
    - spark_points: current balance, never negative (CHECK constraint plus
      the conditional debit in the ledger)
    - quests_assigned / quests_completed: monotonic counters
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("spark_points >= 0", name="spark_points_non_negative"),
        CheckConstraint("quests_assigned >= 0", name="quests_assigned_non_negative"),
        CheckConstraint("quests_completed >= 0", name="quests_completed_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    spark_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quests_assigned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quests_completed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<User id={self.id} spark_points={self.spark_points}>"
