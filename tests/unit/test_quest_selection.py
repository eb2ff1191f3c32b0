"""
Unit Tests for Quest Catalog and Quest Selection
================================================

Test Coverage
-------------
- Catalog construction, lookup and wrap-around indexing
- Catalog loading from configuration (and rejection of bad entries)
- Recommendation rules in priority order
- Day-of-month rotation fallback
- Missing rule targets fall back to the first quest

Testing Strategy
----------------
- Pure logic, catalogs built in memory
- AAA pattern (Arrange, Act, Assert)
"""

from datetime import date

import pytest

from sparkwell.core.exceptions import ConfigurationError
from sparkwell.database.models.enums import MoodFrequency, QuestType
from sparkwell.domain.models.profile import (
    EmotionalNeeds,
    MoodProfile,
    ProfileSnapshot,
    SelfPerception,
)
from sparkwell.domain.models.quest import Quest
from sparkwell.modules.quest.catalog import QuestCatalog
from sparkwell.modules.quest.selector import matching_rule, select_quest


def _quest(title, quest_type=QuestType.DAILY):
    return Quest(title=title, description=f"Do {title}", type=quest_type)


@pytest.fixture
def catalog():
    return QuestCatalog(
        [
            _quest("Gratitude Journal"),
            _quest("Reach Out"),
            _quest("Mindful Walk"),
            _quest("Reflect on a Challenge", QuestType.WEEKLY),
            _quest("Try a New Coping Mechanism", QuestType.WEEKLY),
        ],
        version="test",
    )


def _settled_mood():
    """Mood that does not trigger the calming rule."""
    return MoodProfile(
        general="Calm",
        frequency=MoodFrequency.SOMETIMES,
        coping_mechanisms=frozenset({"Breathing", "Running"}),
    )


# ============================================================================
# CATALOG TESTS
# ============================================================================


@pytest.mark.unit
class TestQuestCatalog:
    """Test the ordered quest catalog."""

    def test_lookup_and_order(self, catalog):
        assert len(catalog) == 5
        assert catalog.first.title == "Gratitude Journal"
        assert catalog.by_title("Mindful Walk").type is QuestType.DAILY
        assert catalog.by_title("Unknown") is None
        assert "Reach Out" in catalog
        assert [q.title for q in catalog][1] == "Reach Out"

    def test_at_wraps_around(self, catalog):
        assert catalog.at(5).title == "Gratitude Journal"
        assert catalog.at(8).title == "Reflect on a Challenge"

    def test_empty_catalog_rejected(self):
        with pytest.raises(ConfigurationError):
            QuestCatalog([])

    def test_duplicate_titles_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            QuestCatalog([_quest("Reach Out"), _quest("Reach Out")])

        assert "duplicate" in str(exc_info.value)

    def test_from_config(self, mock_config_manager):
        # Arrange
        mock_config_manager.values = {
            "quests.version": "2024.1",
            "quests.catalog": [
                {"title": "Mindful Walk", "description": "Walk.", "type": "daily"},
                {"title": "Reflect", "description": "Write.", "type": "WEEKLY"},
            ],
        }

        # Act
        loaded = QuestCatalog.from_config(mock_config_manager)

        # Assert
        assert loaded.version == "2024.1"
        assert loaded.by_title("Reflect").is_weekly
        assert loaded.first.suggested_by == "system"

    def test_from_config_rejects_bad_type(self, mock_config_manager):
        mock_config_manager.values = {
            "quests.catalog": [
                {"title": "Mindful Walk", "description": "Walk.", "type": "monthly"},
            ],
        }

        with pytest.raises(ConfigurationError) as exc_info:
            QuestCatalog.from_config(mock_config_manager)

        assert "quests.catalog[0]" in str(exc_info.value)

    def test_from_config_rejects_non_list(self, mock_config_manager):
        mock_config_manager.values = {"quests.catalog": {"title": "Mindful Walk"}}

        with pytest.raises(ConfigurationError):
            QuestCatalog.from_config(mock_config_manager)

    def test_repository_catalog_loads(self, config_manager):
        loaded = QuestCatalog.from_config(config_manager)

        assert loaded.first.title == "Gratitude Journal"
        assert {"Mindful Walk", "Reach Out", "Gratitude Journal"} <= {q.title for q in loaded}


# ============================================================================
# SELECTION RULE TESTS
# ============================================================================


@pytest.mark.unit
class TestSelectQuest:
    """Test the recommendation rules."""

    def test_no_profile_returns_first_quest(self, catalog):
        assert select_quest(None, date(2024, 6, 3), catalog).title == "Gratitude Journal"

    def test_stressed_mood_recommends_mindful_walk(self, catalog):
        profile = ProfileSnapshot(
            user_id=1,
            mood=MoodProfile(
                general="Stressed",
                coping_mechanisms=frozenset({"Breathing", "Running"}),
            ),
        )

        assert select_quest(profile, date(2024, 6, 3), catalog).title == "Mindful Walk"

    def test_frequent_mood_recommends_mindful_walk(self, catalog):
        profile = ProfileSnapshot(
            user_id=1,
            mood=MoodProfile(
                frequency=MoodFrequency.OFTEN,
                coping_mechanisms=frozenset({"Breathing", "Running"}),
            ),
        )

        assert select_quest(profile, date(2024, 6, 3), catalog).title == "Mindful Walk"

    def test_few_coping_mechanisms_recommends_mindful_walk(self, catalog):
        """An empty profile has no coping mechanisms, so calming applies."""
        profile = ProfileSnapshot(
            user_id=1,
            emotional_needs=EmotionalNeeds(primary=frozenset({"Connection"})),
        )

        assert matching_rule(profile).name == "calming"
        assert select_quest(profile, date(2024, 6, 3), catalog).title == "Mindful Walk"

    def test_connection_need_recommends_reach_out(self, catalog):
        profile = ProfileSnapshot(
            user_id=1,
            mood=_settled_mood(),
            emotional_needs=EmotionalNeeds(primary=frozenset({"Connection", "Safety"})),
            self_perception=SelfPerception(growth_areas=frozenset({"Gratitude"})),
        )

        assert select_quest(profile, date(2024, 6, 3), catalog).title == "Reach Out"

    def test_gratitude_growth_recommends_journal(self, catalog):
        profile = ProfileSnapshot(
            user_id=1,
            mood=_settled_mood(),
            self_perception=SelfPerception(growth_areas=frozenset({"Gratitude"})),
        )

        assert select_quest(profile, date(2024, 6, 3), catalog).title == "Gratitude Journal"

    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2024, 6, 3), "Reflect on a Challenge"),
            (date(2024, 6, 10), "Gratitude Journal"),
            (date(2024, 6, 11), "Reach Out"),
            (date(2024, 6, 29), "Try a New Coping Mechanism"),
        ],
    )
    def test_no_rule_rotates_by_day_of_month(self, catalog, day, expected):
        profile = ProfileSnapshot(user_id=1, mood=_settled_mood())

        assert matching_rule(profile) is None
        assert select_quest(profile, day, catalog).title == expected

    def test_missing_rule_target_falls_back_to_first(self):
        small = QuestCatalog([_quest("Breathing Exercise"), _quest("Stretch")])
        profile = ProfileSnapshot(user_id=1, mood=MoodProfile(general="Stressed"))

        assert select_quest(profile, date(2024, 6, 3), small).title == "Breathing Exercise"

    def test_selection_is_deterministic(self, catalog):
        profile = ProfileSnapshot(user_id=7, mood=_settled_mood())
        day = date(2024, 2, 17)

        first = select_quest(profile, day, catalog)
        second = select_quest(profile, day, catalog)

        assert first == second
