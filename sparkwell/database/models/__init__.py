"""
Database Models Package
========================

All SQLAlchemy ORM models for Sparkwell, organized by domain:

- identity: Users and their spark-point economy counters
- profile: Onboarding self-profile and the append-only mood log
- progression: Reflections and daily quest assignments
- economy: Redemptions and the spark-point audit log
- enums: Shared type-safe enumerations

Models are schema-only; behavior lives in the service layer.
"""

from sparkwell.core.database.base import Base

from .economy import Redemption, TransactionLog
from .enums import (
    MoodFrequency,
    ProfileStep,
    QuestType,
    RedemptionStatus,
    TransactionType,
)
from .identity import User
from .profile import MoodLogEntry, UserProfile
from .progression import QuestAssignment, Reflection

__all__ = [
    "Base",
    # Identity
    "User",
    # Profile
    "UserProfile",
    "MoodLogEntry",
    # Progression
    "Reflection",
    "QuestAssignment",
    # Economy
    "Redemption",
    "TransactionLog",
    # Enums
    "MoodFrequency",
    "ProfileStep",
    "QuestType",
    "RedemptionStatus",
    "TransactionType",
]
