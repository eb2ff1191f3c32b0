"""
UserProfile - psychological self-profile gathered during onboarding.
Schema only.
"""

from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import Boolean, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from sparkwell.core.database.base import Base, IdMixin, JSONType, TimestampMixin


class UserProfile(Base, IdMixin, TimestampMixin):
    """
    One profile per user. Each questionnaire section is stored as a JSON
    document; the domain layer turns the row into a closed, typed
    ProfileSnapshot.
    """

    __tablename__ = "user_profiles"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    mood: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    personality_traits: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    emotional_needs: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    self_perception: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    quest_responses: Mapped[Dict[str, Any]] = mapped_column(
        JSONType, nullable=False, default=dict
    )

    completed_steps: Mapped[List[str]] = mapped_column(
        JSONType, nullable=False, default=list
    )

    is_onboarding_complete: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
