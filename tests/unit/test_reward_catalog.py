"""
Unit Tests for Reward Definitions and the Reward Catalog
========================================================

Test Coverage
-------------
- RewardDefinition invariants (cost, duration iff temporary, vocabularies)
- Expiry instant for temporary rewards
- Catalog lookups: by id, category, rarity, affordability
- Loading the repository catalog and rejecting malformed entries
"""

from datetime import datetime, timedelta, timezone

import pytest

from sparkwell.core.exceptions import ConfigurationError
from sparkwell.domain.models.base import DomainValidationError
from sparkwell.domain.models.reward import (
    RewardCategory,
    RewardDefinition,
    RewardRarity,
    RewardType,
)
from sparkwell.modules.rewards.catalog import RewardCatalog


def _reward(reward_id="mood_boost", cost=75, reward_type=RewardType.TEMPORARY, hours=12):
    return RewardDefinition(
        id=reward_id,
        name=reward_id.replace("_", " ").title(),
        description="A reward.",
        cost=cost,
        category=RewardCategory.BOOST,
        type=reward_type,
        rarity=RewardRarity.COMMON,
        duration_hours=hours,
    )


# ============================================================================
# DEFINITION TESTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestRewardDefinition:
    """Test RewardDefinition invariants."""

    def test_temporary_reward_expiry(self):
        redeemed_at = datetime(2024, 6, 3, 9, 0, tzinfo=timezone.utc)

        reward = _reward(hours=24)

        assert reward.is_temporary
        assert reward.expires_at(redeemed_at) == redeemed_at + timedelta(hours=24)

    def test_permanent_reward_never_expires(self):
        reward = _reward("custom_theme", 250, RewardType.PERMANENT, None)

        assert reward.expires_at(datetime.now(timezone.utc)) is None

    def test_temporary_without_duration_rejected(self):
        with pytest.raises(DomainValidationError) as exc_info:
            _reward(hours=None)

        assert exc_info.value.field == "duration_hours"

    def test_permanent_with_duration_rejected(self):
        with pytest.raises(DomainValidationError):
            _reward("custom_theme", 250, RewardType.PERMANENT, 24)

    @pytest.mark.parametrize("cost", [0, -5, True, 2.5])
    def test_cost_must_be_positive_integer(self, cost):
        with pytest.raises(DomainValidationError):
            _reward(cost=cost)

    def test_from_config_normalizes_case(self):
        reward = RewardDefinition.from_config(
            {
                "id": "exclusive_content",
                "name": "Exclusive Content",
                "description": "Premium content.",
                "cost": 150,
                "category": "Content",
                "type": "PERMANENT",
                "rarity": "rare",
            }
        )

        assert reward.category is RewardCategory.CONTENT
        assert reward.type is RewardType.PERMANENT
        assert reward.to_dict()["rarity"] == "rare"

    def test_from_config_rejects_unknown_category(self):
        with pytest.raises(DomainValidationError) as exc_info:
            RewardDefinition.from_config(
                {
                    "id": "x",
                    "name": "X",
                    "cost": 10,
                    "category": "mystery",
                    "type": "instant",
                    "rarity": "common",
                }
            )

        assert exc_info.value.field == "category"


# ============================================================================
# CATALOG TESTS
# ============================================================================


@pytest.mark.unit
class TestRewardCatalog:
    """Test reward catalog lookups."""

    def test_repository_catalog(self, config_manager):
        # Act
        catalog = RewardCatalog.from_config(config_manager)

        # Assert
        assert len(catalog) == 13
        assert catalog.version == "2024.1"
        assert "advanced_analytics" in catalog
        assert catalog.by_id("advanced_analytics").duration_hours == 168
        assert catalog.by_id("streak_master").expires_at(datetime.now(timezone.utc)) is None

    def test_affordable(self, config_manager):
        catalog = RewardCatalog.from_config(config_manager)

        affordable = {reward.id for reward in catalog.affordable(100)}

        assert affordable == {"productivity_boost", "mood_boost", "energy_boost", "profile_badge"}
        assert catalog.affordable(0) == []

    def test_by_category_and_rarity(self, config_manager):
        catalog = RewardCatalog.from_config(config_manager)

        boosts = catalog.by_category("BOOST")
        legendary = catalog.by_rarity(RewardRarity.LEGENDARY)

        assert [r.id for r in boosts] == ["productivity_boost", "mood_boost", "energy_boost"]
        assert all(r.rarity is RewardRarity.LEGENDARY for r in legendary)

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ConfigurationError):
            RewardCatalog([_reward(), _reward()])

    def test_from_config_reports_entry_index(self, mock_config_manager):
        mock_config_manager.values = {
            "rewards.catalog": [
                {
                    "id": "productivity_boost",
                    "name": "Productivity Boost",
                    "cost": 50,
                    "category": "boost",
                    "type": "temporary",
                    "duration_hours": 24,
                    "rarity": "common",
                },
                {
                    "id": "broken",
                    "name": "Broken",
                    "cost": 50,
                    "category": "boost",
                    "type": "temporary",
                    "rarity": "common",
                },
            ]
        }

        with pytest.raises(ConfigurationError) as exc_info:
            RewardCatalog.from_config(mock_config_manager)

        assert "rewards.catalog[1]" in str(exc_info.value)

    def test_empty_configuration_gives_empty_catalog(self, mock_config_manager):
        catalog = RewardCatalog.from_config(mock_config_manager)

        assert len(catalog) == 0
        assert catalog.version == "unversioned"
