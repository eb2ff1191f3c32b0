"""
Reward catalog.

Immutable set of `RewardDefinition`s built once from the `rewards` YAML
section. Every entry is validated on load (positive cost, duration present
iff temporary, closed category/type/rarity vocabularies) and ids must be
unique; any violation is a ConfigurationError at startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple, Union

from sparkwell.core.exceptions import ConfigurationError
from sparkwell.core.logging.logger import get_logger
from sparkwell.domain.models.base import DomainValidationError
from sparkwell.domain.models.reward import (
    RewardCategory,
    RewardDefinition,
    RewardRarity,
)

if TYPE_CHECKING:
    from sparkwell.core.config.manager import ConfigManager

logger = get_logger(__name__)

CATALOG_KEY = "rewards.catalog"
VERSION_KEY = "rewards.version"


class RewardCatalog:
    """Read-only reward lookup, preserving configuration order."""

    def __init__(
        self, rewards: Iterable[RewardDefinition], version: str = "unversioned"
    ) -> None:
        self._rewards: Tuple[RewardDefinition, ...] = tuple(rewards)
        self._version = version

        self._by_id: Dict[str, RewardDefinition] = {}
        for reward in self._rewards:
            if reward.id in self._by_id:
                raise ConfigurationError(
                    CATALOG_KEY, f"duplicate reward id '{reward.id}'"
                )
            self._by_id[reward.id] = reward

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> "RewardCatalog":
        raw: Any = config_manager.get(CATALOG_KEY, [])
        version = str(config_manager.get(VERSION_KEY, "unversioned"))

        if not isinstance(raw, list):
            raise ConfigurationError(CATALOG_KEY, "expected a list of rewards")

        rewards: List[RewardDefinition] = []
        for index, entry in enumerate(raw):
            if not isinstance(entry, dict):
                raise ConfigurationError(
                    f"{CATALOG_KEY}[{index}]", "reward entry must be a mapping"
                )
            try:
                rewards.append(RewardDefinition.from_config(entry))
            except DomainValidationError as exc:
                raise ConfigurationError(f"{CATALOG_KEY}[{index}]", str(exc)) from exc

        catalog = cls(rewards, version=version)
        logger.info(
            "Reward catalog loaded",
            extra={"version": version, "reward_count": len(catalog)},
        )
        return catalog

    @property
    def version(self) -> str:
        return self._version

    def by_id(self, reward_id: str) -> Optional[RewardDefinition]:
        return self._by_id.get(reward_id)

    def by_category(
        self, category: Union[RewardCategory, str]
    ) -> List[RewardDefinition]:
        value = category.value if isinstance(category, RewardCategory) else str(category).lower()
        return [r for r in self._rewards if r.category.value == value]

    def by_rarity(self, rarity: Union[RewardRarity, str]) -> List[RewardDefinition]:
        value = rarity.value if isinstance(rarity, RewardRarity) else str(rarity).lower()
        return [r for r in self._rewards if r.rarity.value == value]

    def affordable(self, points: int) -> List[RewardDefinition]:
        """Rewards whose cost is covered by `points`."""
        return [r for r in self._rewards if r.cost <= points]

    def all(self) -> List[RewardDefinition]:
        return list(self._rewards)

    def __len__(self) -> int:
        return len(self._rewards)

    def __contains__(self, reward_id: object) -> bool:
        return reward_id in self._by_id
