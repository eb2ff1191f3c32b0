"""
Sparkwell application bootstrap.

Startup order
-------------
1. Config validation (environment, directories)
2. YAML configuration (catalogs, economy tuning)
3. Database engine (+ schema creation when requested)
4. Event bus
5. Service container

Shutdown runs in reverse and always stops the logging listener last.

Usage
-----
    container = await startup(create_schema=True)
    try:
        quest = await container.quest.get_today_quest(user_id)
    finally:
        await shutdown()
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from sparkwell.core.config.config import Config
from sparkwell.core.config.manager import ConfigManager
from sparkwell.core.database.service import DatabaseService
from sparkwell.core.event.bus import EventBus
from sparkwell.core.logging.logger import get_logger, shutdown_logging
from sparkwell.core.services.container import (
    ServiceContainer,
    initialize_service_container,
    shutdown_service_container,
)

logger = get_logger(__name__)


async def startup(
    database_url: Optional[str] = None,
    config_dir: Optional[Union[str, Path]] = None,
    create_schema: bool = False,
) -> ServiceContainer:
    """Initialize infrastructure and return a ready service container."""
    logger.info("========== SPARKWELL INITIALIZATION START ==========")

    try:
        Config.validate()
        for warning in Config.warnings():
            logger.warning(f"Configuration default applied: {warning}")
        logger.info(
            "Configuration validated",
            extra={"environment": Config.ENVIRONMENT, "config_dir": str(Config.CONFIG_DIR)},
        )
    except Exception as exc:
        logger.critical(f"Configuration validation failed: {exc}")
        raise

    try:
        if config_dir is not None:
            ConfigManager.load_from(config_dir)
        else:
            ConfigManager.initialize()
        logger.info("Config manager initialized")
    except Exception as exc:
        logger.critical(f"Config manager initialization failed: {exc}", exc_info=True)
        raise

    try:
        await DatabaseService.initialize(database_url)
        if create_schema:
            await DatabaseService.create_all()
        logger.info("Database service initialized")
    except Exception as exc:
        logger.critical(f"Database initialization failed: {exc}", exc_info=True)
        raise

    event_bus = EventBus(ConfigManager)

    try:
        container = initialize_service_container(
            config_manager=ConfigManager,  # type: ignore[arg-type]
            event_bus=event_bus,
            logger=get_logger("sparkwell.core.services.container"),
        )
        await container.initialize()
    except Exception as exc:
        logger.critical(f"Service container initialization failed: {exc}", exc_info=True)
        await DatabaseService.shutdown()
        raise

    logger.info("========== SPARKWELL INITIALIZED SUCCESSFULLY ==========")
    return container


async def shutdown(stop_logging: bool = False) -> None:
    """Tear down the container and database; optionally stop log listeners."""
    logger.info("========== SPARKWELL SHUTDOWN START ==========")

    try:
        await shutdown_service_container()
    except Exception as exc:
        logger.error(f"Service container shutdown error: {exc}", exc_info=True)

    try:
        await DatabaseService.shutdown()
    except Exception as exc:
        logger.error(f"Database service shutdown error: {exc}", exc_info=True)

    logger.info("========== SHUTDOWN COMPLETE ==========")

    if stop_logging:
        shutdown_logging()
