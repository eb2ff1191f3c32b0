"""
Core infrastructure layer for Sparkwell.

Purpose
-------
One import surface for the infrastructure subsystems:

- Configuration (Config, ConfigManager)
- Database (DatabaseService)
- Logging (get_logger, LogContext)
- Infrastructure exceptions

Domain services and the service container live in their own packages and
are deliberately not re-exported here so importing `sparkwell.core` never
pulls in business logic.
"""

from sparkwell.core.config import Config, ConfigManager, Environment
from sparkwell.core.database.service import DatabaseService
from sparkwell.core.exceptions import (
    ConfigurationError,
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    ErrorSeverity,
    SparkwellInfrastructureException,
    UpstreamStorageError,
)
from sparkwell.core.logging.logger import LogContext, get_logger

__all__ = [
    "Config",
    "ConfigManager",
    "Environment",
    "DatabaseService",
    "get_logger",
    "LogContext",
    "ErrorSeverity",
    "SparkwellInfrastructureException",
    "ConfigurationError",
    "UpstreamStorageError",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
]
