"""
Base Service Foundation

Purpose
-------
Provides the foundational class for all Sparkwell domain services.
Services implement business logic, run their writes inside
`DatabaseService.get_transaction()`, enforce business rules and emit
domain events once their transaction has committed.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Event emission helpers

What this class does NOT do:
- Manage database engines or sessions (that's DatabaseService's job)
- Contain domain-specific logic

Usage
-----
    class RedemptionService(BaseService):
        def __init__(self, config_manager, event_bus, logger, catalog, ledger):
            super().__init__(config_manager, event_bus, logger)
            self._catalog = catalog
            self._ledger = ledger
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Dict, Optional

from sparkwell.core.database.service import DatabaseService
from sparkwell.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from logging import Logger

    from sqlalchemy.ext.asyncio import AsyncSession

    from sparkwell.core.config.manager import ConfigManager
    from sparkwell.core.event.bus import EventBus


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Application configuration manager
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve a configuration value.

        Raises:
            ConfigurationError: If required=True and the key is missing
        """
        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(
                key, f"Required configuration key '{key}' is missing"
            )
        return value

    @asynccontextmanager
    async def transaction(
        self, session: Optional[AsyncSession] = None
    ) -> AsyncIterator[AsyncSession]:
        """
        Join the caller's session when one is passed, otherwise open an
        atomic transaction that commits on exit.
        """
        if session is not None:
            yield session
            return

        async with DatabaseService.get_transaction() as owned:
            yield owned

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Publish a domain event; listener failures are isolated by the bus."""
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(
        self,
        operation: str,
        error: Exception,
        **context: Any,
    ) -> None:
        self.log.error(
            f"Service error during {operation}: {error}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                **context,
            },
        )
