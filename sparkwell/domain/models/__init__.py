"""
Domain models package for Sparkwell.

Immutable value objects separate from the ORM schema:

- Database models (sparkwell/database/models/): schema only
- Domain models (sparkwell/domain/models/): typed snapshots with rules

Services convert between the two.
"""

from .base import (
    DomainValidationError,
    validate_choice,
    validate_not_empty,
    validate_positive,
)
from .profile import (
    REQUIRED_STEPS,
    EmotionalNeeds,
    MoodLogEntry,
    MoodProfile,
    PersonalityTraits,
    ProfileSnapshot,
    QuestResponses,
    SelfPerception,
    onboarding_complete,
)
from .quest import Quest
from .redemption import ActiveRedemption, RedemptionRecord, is_expired
from .reward import RewardCategory, RewardDefinition, RewardRarity, RewardType

__all__ = [
    "DomainValidationError",
    "validate_choice",
    "validate_not_empty",
    "validate_positive",
    # Profile
    "REQUIRED_STEPS",
    "ProfileSnapshot",
    "MoodProfile",
    "PersonalityTraits",
    "EmotionalNeeds",
    "SelfPerception",
    "QuestResponses",
    "MoodLogEntry",
    "onboarding_complete",
    # Quest
    "Quest",
    # Rewards
    "RewardDefinition",
    "RewardCategory",
    "RewardType",
    "RewardRarity",
    # Redemptions
    "RedemptionRecord",
    "ActiveRedemption",
    "is_expired",
]
