"""
Unit Tests for Profile Domain Model
===================================

Test Coverage
-------------
- Section parsing from camelCase and snake_case documents
- Strict versus tolerant parsing of mood frequency and Big Five scores
- Onboarding completion derived from the required steps
- Completed steps keep first-seen order without duplicates
"""

import pytest

from sparkwell.database.models.enums import MoodFrequency
from sparkwell.domain.models.base import DomainValidationError
from sparkwell.domain.models.profile import (
    REQUIRED_STEPS,
    EmotionalNeeds,
    MoodProfile,
    PersonalityTraits,
    ProfileSnapshot,
    QuestResponses,
    onboarding_complete,
)


# ============================================================================
# SECTION PARSING
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestProfileSections:
    """Test questionnaire section value objects."""

    def test_mood_from_camel_case(self):
        mood = MoodProfile.from_dict(
            {
                "general": "Stressed",
                "frequency": "Often",
                "triggers": ["Work", "Work", ""],
                "copingMechanisms": ["Breathing"],
            }
        )

        assert mood.general == "Stressed"
        assert mood.frequency is MoodFrequency.OFTEN
        assert mood.triggers == frozenset({"Work"})
        assert mood.coping_mechanisms == frozenset({"Breathing"})

    def test_mood_accepts_snake_case(self):
        mood = MoodProfile.from_dict({"coping_mechanisms": ["Running", "Music"]})

        assert len(mood.coping_mechanisms) == 2

    def test_unknown_frequency_tolerated_when_reading(self):
        assert MoodProfile.from_dict({"frequency": "hourly"}).frequency is None

    def test_unknown_frequency_rejected_when_strict(self):
        with pytest.raises(DomainValidationError) as exc_info:
            MoodProfile.from_dict({"frequency": "hourly"}, strict=True)

        assert exc_info.value.field == "frequency"

    def test_big_five_scores_coerced(self):
        traits = PersonalityTraits.from_dict(
            {"mbti": "INFJ", "bigFive": {"openness": "0.8", "neuroticism": None}}
        )

        assert traits.big_five == {"openness": 0.8}
        assert traits.to_dict()["mbti"] == "INFJ"

    def test_big_five_non_numeric_rejected_when_strict(self):
        with pytest.raises(DomainValidationError):
            PersonalityTraits.from_dict({"bigFive": {"openness": "high"}}, strict=True)

    def test_quest_responses_keep_order(self):
        responses = QuestResponses.from_dict(
            {"futureGoals": ["Sleep earlier", "Read more"]}
        )

        assert responses.future_goals == ("Sleep earlier", "Read more")
        assert responses.to_dict()["futureGoals"] == ["Sleep earlier", "Read more"]

    def test_missing_section_is_empty(self):
        needs = EmotionalNeeds.from_dict(None)

        assert needs.primary == frozenset()
        assert needs.to_dict()["unmetNeeds"] == []


# ============================================================================
# ONBOARDING
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestOnboarding:
    """Test onboarding completion rules."""

    def test_complete_only_with_every_step(self):
        assert onboarding_complete(REQUIRED_STEPS)
        assert not onboarding_complete(REQUIRED_STEPS[:-1])
        assert not onboarding_complete([])

    def test_snapshot_deduplicates_steps(self):
        snapshot = ProfileSnapshot(
            user_id=1, completed_steps=("mood", "selfPerception", "mood")
        )

        assert snapshot.completed_steps == ("mood", "selfPerception")
        assert snapshot.remaining_steps == (
            "personalityTraits",
            "emotionalNeeds",
            "questResponses",
        )
