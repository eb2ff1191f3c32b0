"""
Database Model Enums
====================

Lightweight enumerations for categorical columns. Stored as their string
values so the schema stays readable and portable between SQLite and
PostgreSQL.
"""

from __future__ import annotations

import enum


class QuestType(str, enum.Enum):
    """Cadence of a quest; weekly quests are worth more points."""

    DAILY = "daily"
    WEEKLY = "weekly"


class RedemptionStatus(str, enum.Enum):
    """
    Persisted lifecycle state of a redemption.

    Nothing advances ACTIVE to EXPIRED automatically; expiry of temporary
    rewards is derived from `expires_at` at read time.
    """

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class TransactionType(str, enum.Enum):
    """Direction of a spark-point movement."""

    CREDIT = "credit"
    DEBIT = "debit"


class MoodFrequency(str, enum.Enum):
    RARELY = "rarely"
    SOMETIMES = "sometimes"
    OFTEN = "often"
    ALWAYS = "always"


class ProfileStep(str, enum.Enum):
    """Onboarding steps of the self-profile questionnaire."""

    MOOD = "mood"
    PERSONALITY_TRAITS = "personalityTraits"
    EMOTIONAL_NEEDS = "emotionalNeeds"
    SELF_PERCEPTION = "selfPerception"
    QUEST_RESPONSES = "questResponses"
