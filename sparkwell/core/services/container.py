"""
Service Container
=================

Purpose
-------
Centralized dependency injection container for all Sparkwell domain
services. Builds the catalogs once from configuration and hands every
service the same ConfigManager, EventBus and collaborators.

Responsibilities
----------------
- Load the quest and reward catalogs (fail fast on invalid catalog data)
- Construct services in dependency order
- Provide access to the singletons throughout the application
- Record per-service initialization timings

Non-Responsibilities
--------------------
- Database and logging lifecycle (see sparkwell.app)
- Business logic

Dependency Order
----------------
    ledger, profile
      -> quest (catalog, profile, ledger)
      -> reflection (ledger, profile)
      -> redemption (reward catalog, ledger)
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, TypeVar

from sparkwell.core.logging.logger import get_logger
from sparkwell.modules.ledger.service import PointsLedgerService
from sparkwell.modules.profile.service import ProfileService
from sparkwell.modules.quest.catalog import QuestCatalog
from sparkwell.modules.quest.service import QuestService
from sparkwell.modules.reflection.service import ReflectionService
from sparkwell.modules.rewards.catalog import RewardCatalog
from sparkwell.modules.rewards.redemption_service import RedemptionService

if TYPE_CHECKING:
    from logging import Logger

    from sparkwell.core.config.manager import ConfigManager
    from sparkwell.core.event.bus import EventBus

logger = get_logger(__name__)

T = TypeVar("T")

NOT_INITIALIZED = "ServiceContainer not initialized. Call initialize() first."


class ServiceContainer:
    """
    Dependency injection container for all domain services.

    Usage:
        container = ServiceContainer(config_manager, event_bus, logger)
        await container.initialize()

        result = await container.redemption.redeem(user_id, "mood_boost")
    """

    EXPECTED_SERVICE_COUNT = 7

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config_manager = config_manager
        self._event_bus = event_bus
        self._logger = logger

        # Catalogs
        self._quest_catalog: Optional[QuestCatalog] = None
        self._reward_catalog: Optional[RewardCatalog] = None

        # Services
        self._ledger: Optional[PointsLedgerService] = None
        self._profile: Optional[ProfileService] = None
        self._quest: Optional[QuestService] = None
        self._reflection: Optional[ReflectionService] = None
        self._redemption: Optional[RedemptionService] = None

        self._initialized = False

        self._service_init_times: Dict[str, float] = {}
        self._init_start: Optional[float] = None
        self._init_end: Optional[float] = None

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def initialize(self) -> None:
        """
        Build catalogs and services.

        Call during startup after ConfigManager is loaded.

        Raises:
            ConfigurationError: a catalog is missing or invalid
        """
        if self._initialized:
            self._logger.warning("ServiceContainer already initialized")
            return

        self._init_start = time.perf_counter()
        self._logger.info("Service container initialization starting...")

        try:
            self._quest_catalog = self._timed(
                "quest_catalog", lambda: QuestCatalog.from_config(self._config_manager)
            )
            self._reward_catalog = self._timed(
                "reward_catalog", lambda: RewardCatalog.from_config(self._config_manager)
            )

            self._ledger = self._create_service("ledger", PointsLedgerService)
            self._profile = self._create_service("profile", ProfileService)

            self._quest = self._create_service(
                "quest",
                QuestService,
                catalog=self._quest_catalog,
                profile_service=self._profile,
                ledger=self._ledger,
            )
            self._reflection = self._create_service(
                "reflection",
                ReflectionService,
                ledger=self._ledger,
                profile_service=self._profile,
            )
            self._redemption = self._create_service(
                "redemption",
                RedemptionService,
                catalog=self._reward_catalog,
                ledger=self._ledger,
            )

        except Exception:
            self._logger.critical("Service container initialization failed", exc_info=True)
            raise

        self._initialized = True
        self._init_end = time.perf_counter()

        self._logger.info(
            "Service container initialized",
            extra={
                "service_count": len(self._service_init_times),
                "total_init_time_seconds": round(self._init_end - self._init_start, 3),
                "quest_catalog_version": self._quest_catalog.version,
                "reward_catalog_version": self._reward_catalog.version,
            },
        )

    def _timed(self, name: str, factory: Callable[[], T]) -> T:
        start = time.perf_counter()
        instance = factory()
        self._service_init_times[name] = time.perf_counter() - start
        return instance

    def _create_service(self, name: str, cls: type, **dependencies: Any) -> Any:
        """Create a service with the standard (config, bus, logger) constructor."""
        start = time.perf_counter()

        try:
            instance = cls(
                config_manager=self._config_manager,
                event_bus=self._event_bus,
                logger=get_logger(f"{cls.__module__}.{cls.__name__}"),
                **dependencies,
            )
        except Exception:
            self._logger.error(f"Failed to initialize {name}", exc_info=True)
            raise

        duration = time.perf_counter() - start
        self._service_init_times[name] = duration
        self._logger.debug(f"Initialized {name} in {duration:.3f}s")

        return instance

    async def shutdown(self) -> None:
        if not self._initialized:
            return

        self._logger.info("Shutting down service container...")
        self._initialized = False
        self._logger.info("Service container shut down")

    async def health_check(self) -> Dict[str, Any]:
        return {
            "initialized": self._initialized,
            "service_count": len(self._service_init_times),
            "total_init_time_seconds": (
                round(self._init_end - self._init_start, 3)
                if self._init_start and self._init_end
                else None
            ),
            "all_services_available": self._initialized
            and len(self._service_init_times) == self.EXPECTED_SERVICE_COUNT,
        }

    # ========================================================================
    # Catalogs
    # ========================================================================

    @property
    def quest_catalog(self) -> QuestCatalog:
        if not self._initialized or self._quest_catalog is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._quest_catalog

    @property
    def reward_catalog(self) -> RewardCatalog:
        if not self._initialized or self._reward_catalog is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._reward_catalog

    # ========================================================================
    # Services
    # ========================================================================

    @property
    def ledger(self) -> PointsLedgerService:
        if not self._initialized or self._ledger is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._ledger

    @property
    def profile(self) -> ProfileService:
        if not self._initialized or self._profile is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._profile

    @property
    def quest(self) -> QuestService:
        if not self._initialized or self._quest is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._quest

    @property
    def reflection(self) -> ReflectionService:
        if not self._initialized or self._reflection is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._reflection

    @property
    def redemption(self) -> RedemptionService:
        if not self._initialized or self._redemption is None:
            raise RuntimeError(NOT_INITIALIZED)
        return self._redemption

    @property
    def is_initialized(self) -> bool:
        return self._initialized


# ============================================================================
# Module-level singleton
# ============================================================================

_container: Optional[ServiceContainer] = None


def initialize_service_container(
    config_manager: ConfigManager,
    event_bus: EventBus,
    logger: Optional[Logger] = None,
) -> ServiceContainer:
    """Create (or replace) the process-wide container. Call `initialize()` next."""
    global _container
    _container = ServiceContainer(
        config_manager=config_manager,
        event_bus=event_bus,
        logger=logger or get_logger(__name__),
    )
    return _container


def get_service_container() -> ServiceContainer:
    if _container is None:
        raise RuntimeError(
            "Service container not created. Call initialize_service_container() first."
        )
    return _container


async def shutdown_service_container() -> None:
    global _container
    if _container is not None:
        await _container.shutdown()
    _container = None
