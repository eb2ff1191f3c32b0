"""
Quest catalog.

Ordered, immutable list of quests loaded once from the `quests` YAML
section. Order is significant: the first entry is the default
recommendation and the rotation rule indexes into the list by day of month.

    quests:
      version: "2024.1"
      catalog:
        - title: Gratitude Journal
          description: ...
          type: daily
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, List, Optional, Tuple

from sparkwell.core.exceptions import ConfigurationError
from sparkwell.core.logging.logger import get_logger
from sparkwell.domain.models.base import DomainValidationError
from sparkwell.domain.models.quest import Quest

if TYPE_CHECKING:
    from sparkwell.core.config.manager import ConfigManager

logger = get_logger(__name__)

CATALOG_KEY = "quests.catalog"
VERSION_KEY = "quests.version"


class QuestCatalog:
    """Read-only ordered quest catalog with unique titles."""

    def __init__(self, quests: Iterable[Quest], version: str = "unversioned") -> None:
        self._quests: Tuple[Quest, ...] = tuple(quests)
        self._version = version

        if not self._quests:
            raise ConfigurationError(CATALOG_KEY, "quest catalog must not be empty")

        self._by_title: Dict[str, Quest] = {}
        for quest in self._quests:
            if quest.title in self._by_title:
                raise ConfigurationError(
                    CATALOG_KEY, f"duplicate quest title '{quest.title}'"
                )
            self._by_title[quest.title] = quest

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> "QuestCatalog":
        raw: Any = config_manager.get(CATALOG_KEY, [])
        version = str(config_manager.get(VERSION_KEY, "unversioned"))

        if not isinstance(raw, list):
            raise ConfigurationError(CATALOG_KEY, "expected a list of quests")

        quests: List[Quest] = []
        for index, entry in enumerate(raw):
            if not isinstance(entry, dict):
                raise ConfigurationError(
                    f"{CATALOG_KEY}[{index}]", "quest entry must be a mapping"
                )
            try:
                quests.append(Quest.from_config(entry))
            except DomainValidationError as exc:
                raise ConfigurationError(f"{CATALOG_KEY}[{index}]", str(exc)) from exc

        catalog = cls(quests, version=version)
        logger.info(
            "Quest catalog loaded",
            extra={"version": version, "quest_count": len(catalog)},
        )
        return catalog

    @property
    def version(self) -> str:
        return self._version

    @property
    def first(self) -> Quest:
        return self._quests[0]

    def by_title(self, title: str) -> Optional[Quest]:
        return self._by_title.get(title)

    def at(self, index: int) -> Quest:
        """Quest at `index`, wrapping around the catalog length."""
        return self._quests[index % len(self._quests)]

    def all(self) -> Tuple[Quest, ...]:
        return self._quests

    def __len__(self) -> int:
        return len(self._quests)

    def __iter__(self) -> Iterator[Quest]:
        return iter(self._quests)

    def __contains__(self, title: object) -> bool:
        return title in self._by_title
