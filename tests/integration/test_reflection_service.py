"""
Integration Tests for ReflectionService
=======================================

Test Coverage
-------------
- Submission awards points, scores quality and bumps quests_completed
- Optional mood entry is appended in the same transaction
- A failure anywhere in the submission persists nothing
- Listing and owner-only deletion
"""

import pytest

from sparkwell.modules.shared.exceptions import NotFoundError, ValidationError


@pytest.mark.integration
@pytest.mark.database
class TestSubmitReflection:
    """Test reflection submission."""

    async def test_weekly_reflection_with_image(self, container, make_user):
        # Arrange
        user_id = await make_user()

        # Act
        result = await container.reflection.submit_reflection(
            user_id,
            "Reflect on a Challenge",
            "weekly",
            text="x" * 150,
            image_url="https://media.example.com/1.png",
        )

        # Assert
        assert result.points_awarded == 35
        assert result.quality_score == 7.0
        assert result.new_balance == 35
        economy = await container.ledger.get_economy(user_id)
        assert economy.spark_points == 35
        assert economy.quests_completed == 1

    async def test_minimal_daily_reflection(self, container, make_user):
        user_id = await make_user(spark_points=5)

        result = await container.reflection.submit_reflection(user_id, "Mindful Walk", "daily")

        assert result.points_awarded == 10
        assert result.quality_score == 0.0
        assert result.new_balance == 15

    async def test_mood_entry_appended(self, container, make_user, recorded_events):
        user_id = await make_user()

        await container.reflection.submit_reflection(
            user_id,
            "Mindful Walk",
            "daily",
            text="Calmer after the walk.",
            mood={"general": "Calm", "frequency": "sometimes"},
        )

        profile = await container.profile.get_or_create(user_id)
        assert len(profile.mood_log) == 1
        assert profile.mood_log[0].general == "Calm"
        assert [name for name, _ in recorded_events] == [
            "points.credited",
            "profile.mood_logged",
            "reflection.submitted",
        ]

    async def test_invalid_mood_rolls_back_everything(self, container, make_user):
        user_id = await make_user()

        with pytest.raises(ValidationError):
            await container.reflection.submit_reflection(
                user_id, "Mindful Walk", "daily", mood={"frequency": "hourly"}
            )

        economy = await container.ledger.get_economy(user_id)
        assert economy.spark_points == 0
        assert economy.quests_completed == 0
        assert await container.reflection.list_reflections(user_id) == []

    async def test_invalid_quest_type(self, container, make_user):
        user_id = await make_user()

        with pytest.raises(ValidationError):
            await container.reflection.submit_reflection(user_id, "Mindful Walk", "monthly")

    async def test_unknown_user_persists_nothing(self, container):
        with pytest.raises(NotFoundError):
            await container.reflection.submit_reflection(999, "Mindful Walk", "daily")

        assert await container.reflection.list_reflections(999) == []


@pytest.mark.integration
@pytest.mark.database
class TestReflectionQueries:
    """Test listing and deleting reflections."""

    async def test_list_newest_first(self, container, make_user):
        user_id = await make_user()
        await container.reflection.submit_reflection(user_id, "Gratitude Journal", "daily")
        await container.reflection.submit_reflection(user_id, "Reach Out", "daily")

        reflections = await container.reflection.list_reflections(user_id)

        assert [r["quest_title"] for r in reflections] == ["Reach Out", "Gratitude Journal"]

    async def test_delete_keeps_points(self, container, make_user):
        user_id = await make_user()
        result = await container.reflection.submit_reflection(user_id, "Reach Out", "daily")

        await container.reflection.delete_reflection(user_id, result.reflection_id)

        assert await container.reflection.list_reflections(user_id) == []
        assert (await container.ledger.get_economy(user_id)).spark_points == 10

    async def test_delete_other_users_reflection(self, container, make_user):
        owner = await make_user()
        intruder = await make_user()
        result = await container.reflection.submit_reflection(owner, "Reach Out", "daily")

        with pytest.raises(NotFoundError):
            await container.reflection.delete_reflection(intruder, result.reflection_id)

        assert len(await container.reflection.list_reflections(owner)) == 1
