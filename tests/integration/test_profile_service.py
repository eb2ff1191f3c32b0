"""
Integration Tests for ProfileService
====================================

Test Coverage
-------------
- Lazy profile creation
- Section updates mark steps completed, in order and without duplicates
- Skipped steps count towards onboarding completion
- Strict validation of step names and section data
- Standalone mood entries
- Concurrent onboarding writes on the same profile
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from sparkwell.database.models.enums import MoodFrequency
from sparkwell.modules.shared.exceptions import NotFoundError, ValidationError

SECTIONS = {
    "mood": {"general": "Calm", "frequency": "rarely", "copingMechanisms": ["Music", "Yoga"]},
    "personalityTraits": {"mbti": "ENFP", "bigFive": {"openness": 0.9}},
    "emotionalNeeds": {"primary": ["Connection"], "unmetNeeds": ["Rest"]},
    "selfPerception": {"strengths": ["Curious"], "growthAreas": ["Gratitude"]},
    "questResponses": {"futureGoals": ["Run a 10k"]},
}


@pytest.mark.integration
@pytest.mark.database
class TestProfileLifecycle:
    """Test profile creation and onboarding."""

    async def test_get_or_create_is_lazy(self, container, make_user):
        user_id = await make_user()

        assert await container.profile.find_profile(user_id) is None
        with pytest.raises(NotFoundError):
            await container.profile.get_profile(user_id)

        created = await container.profile.get_or_create(user_id)
        again = await container.profile.get_or_create(user_id)

        assert created.completed_steps == ()
        assert again.user_id == user_id

    async def test_unknown_user(self, container):
        with pytest.raises(NotFoundError):
            await container.profile.get_or_create(12345)

    async def test_all_steps_complete_onboarding(self, container, make_user, recorded_events):
        # Arrange
        user_id = await make_user()

        # Act
        for step, data in SECTIONS.items():
            snapshot = await container.profile.update_step(user_id, step, data)

        # Assert
        assert snapshot.is_onboarding_complete
        assert snapshot.completed_steps == tuple(SECTIONS)
        assert snapshot.mood.frequency is MoodFrequency.RARELY
        assert snapshot.personality_traits.big_five == {"openness": 0.9}
        assert snapshot.quest_responses.future_goals == ("Run a 10k",)

        updates = [p for name, p in recorded_events if name == "profile.step_updated"]
        assert len(updates) == 5
        assert updates[-1]["is_onboarding_complete"] is True

    async def test_updating_a_step_twice_keeps_one_entry(self, container, make_user):
        user_id = await make_user()

        await container.profile.update_step(user_id, "mood", SECTIONS["mood"])
        snapshot = await container.profile.update_step(
            user_id, "mood", {"general": "Stressed"}
        )

        assert snapshot.completed_steps == ("mood",)
        assert snapshot.mood.general == "Stressed"
        assert snapshot.mood.coping_mechanisms == frozenset()

    async def test_skipped_steps_count(self, container, make_user, recorded_events):
        user_id = await make_user()
        await container.profile.update_step(user_id, "mood", SECTIONS["mood"])

        for step in ("personalityTraits", "emotionalNeeds", "selfPerception"):
            await container.profile.skip_step(user_id, step)
        snapshot = await container.profile.skip_step(user_id, "QUESTRESPONSES")

        assert snapshot.is_onboarding_complete
        assert snapshot.completed_steps[-1] == "questResponses"
        assert snapshot.personality_traits.mbti is None
        assert recorded_events[-1][1]["skipped"] is True


@pytest.mark.integration
@pytest.mark.database
class TestProfileValidation:
    """Test rejection of bad step updates."""

    async def test_unknown_step(self, container, make_user):
        user_id = await make_user()

        with pytest.raises(ValidationError):
            await container.profile.update_step(user_id, "horoscope", {})

    async def test_bad_frequency(self, container, make_user):
        user_id = await make_user()

        with pytest.raises(ValidationError) as exc_info:
            await container.profile.update_step(user_id, "mood", {"frequency": "hourly"})

        assert exc_info.value.field == "frequency"
        assert await container.profile.find_profile(user_id) is None

    async def test_section_must_be_mapping(self, container, make_user):
        user_id = await make_user()

        with pytest.raises(ValidationError):
            await container.profile.update_step(user_id, "mood", ["Calm"])


@pytest.mark.integration
@pytest.mark.database
class TestMoodLog:
    """Test the append-only mood history."""

    async def test_entries_in_chronological_order(self, container, make_user, recorded_events):
        # Arrange
        user_id = await make_user()
        await container.profile.get_or_create(user_id)
        now = datetime.now(timezone.utc)

        # Act
        await container.profile.append_mood_entry(
            user_id, {"general": "Tired"}, logged_at=now
        )
        await container.profile.append_mood_entry(
            user_id, {"general": "Rested"}, logged_at=now - timedelta(days=1)
        )

        # Assert
        profile = await container.profile.get_profile(user_id)
        assert [e.general for e in profile.mood_log] == ["Rested", "Tired"]
        assert [name for name, _ in recorded_events] == [
            "profile.mood_logged",
            "profile.mood_logged",
        ]

    async def test_unknown_user(self, container):
        with pytest.raises(NotFoundError):
            await container.profile.append_mood_entry(777, {"general": "Calm"})


@pytest.mark.integration
@pytest.mark.database
class TestConcurrentOnboarding:
    """Test parallel writes against one profile."""

    async def test_parallel_first_access_creates_one_profile(self, container, make_user):
        # Arrange
        user_id = await make_user()

        # Act
        results = await asyncio.gather(
            container.profile.update_step(user_id, "mood", SECTIONS["mood"]),
            container.profile.skip_step(user_id, "personalityTraits"),
            container.profile.get_or_create(user_id),
        )

        # Assert
        assert all(r.user_id == user_id for r in results)
        profile = await container.profile.get_profile(user_id)
        assert set(profile.completed_steps) == {"mood", "personalityTraits"}
        assert profile.mood.general == "Calm"

    async def test_parallel_skips_keep_every_step(self, container, make_user):
        # Arrange
        user_id = await make_user()
        await container.profile.get_or_create(user_id)

        # Act
        await asyncio.gather(
            container.profile.skip_step(user_id, "mood"),
            container.profile.skip_step(user_id, "personalityTraits"),
        )

        # Assert
        profile = await container.profile.get_profile(user_id)
        assert set(profile.completed_steps) == {"mood", "personalityTraits"}

    async def test_parallel_steps_complete_onboarding(self, container, make_user):
        user_id = await make_user()

        await asyncio.gather(
            *(container.profile.skip_step(user_id, step) for step in SECTIONS)
        )

        profile = await container.profile.get_profile(user_id)
        assert profile.is_onboarding_complete
        assert sorted(profile.completed_steps) == sorted(SECTIONS)

    async def test_parallel_mood_entries(self, container, make_user):
        user_id = await make_user()

        await asyncio.gather(
            *(
                container.profile.append_mood_entry(user_id, {"general": f"Mood {i}"})
                for i in range(4)
            )
        )

        profile = await container.profile.get_or_create(user_id)
        assert len(profile.mood_log) == 4
