"""
Infrastructure exceptions for Sparkwell.

Purpose
-------
Define the structured exception hierarchy for infrastructure-level concerns:
storage failures, configuration errors and database lifecycle problems that
require technical attention rather than a user-facing explanation.

Design Notes
------------
- All infrastructure exceptions inherit from `SparkwellInfrastructureException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried by the caller
  - `error_code`: short, stable identifier for programmatic use
- The core never retries; `is_retryable` is a hint for outer layers.
- Helper functions (`is_transient_error`, `get_error_severity`, `should_alert`)
  centralize common exception handling patterns and understand both the
  infrastructure and the domain hierarchy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for logging and alerting."""

    DEBUG = "debug"  # Expected, not concerning
    INFO = "info"  # Normal operation (e.g., validation failures)
    WARNING = "warning"  # Concerning but handled
    ERROR = "error"  # Unexpected errors requiring attention
    CRITICAL = "critical"  # System-level failures requiring immediate action


class SparkwellInfrastructureException(Exception):
    """
    Base exception for all Sparkwell infrastructure-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling

    Example:
        >>> raise SparkwellInfrastructureException(
        ...     "Database connection failed",
        ...     {"url_scheme": "postgresql+asyncpg"}
        ... )
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
        error_code: Optional[str] = None,
    ) -> None:
        self.message: str = message
        self.details: Dict[str, Any] = details or {}
        self.severity: ErrorSeverity = severity or self.DEFAULT_SEVERITY
        self.is_retryable: bool = (
            is_retryable if is_retryable is not None else self.DEFAULT_RETRYABLE
        )
        self.error_code: str = error_code or self.__class__.__name__
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        details_str = f" | Details: {self.details}" if self.details else ""
        return f"[{self.error_code}] {self.message}{details_str}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"severity={self.severity.value!r}, "
            f"is_retryable={self.is_retryable!r}"
            ")"
        )


class ConfigurationError(SparkwellInfrastructureException):
    """
    Raised when a configuration key or catalog entry is invalid or missing.

    Args:
        config_key: The configuration key (or file) that has issues
        message: Description of the configuration problem
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL
    DEFAULT_RETRYABLE = False

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        error_message = f"Configuration error for {config_key}: {message}"
        super().__init__(
            error_message,
            details={
                "config_key": config_key,
                "message": message,
            },
            error_code="CONFIG_ERROR",
        )


class UpstreamStorageError(SparkwellInfrastructureException):
    """
    Raised when the backing store fails during a session or transaction.

    Wraps SQLAlchemy `OperationalError` / `DBAPIError`. The transaction has
    already been rolled back when this is raised, so no partial writes exist.

    Args:
        operation: Description of the storage operation that failed
        original_error: The underlying driver/SQLAlchemy exception
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, original_error: Exception) -> None:
        self.operation = operation
        self.original_error = original_error
        message = f"Storage error during {operation}: {original_error}"
        super().__init__(
            message,
            details={
                "operation": operation,
                "error": str(original_error),
                "error_type": type(original_error).__name__,
            },
            error_code="UPSTREAM_STORAGE_ERROR",
        )


class DatabaseInitializationError(SparkwellInfrastructureException):
    """Raised when database engine initialization fails."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="DATABASE_INIT_FAILED")


class DatabaseNotInitializedError(SparkwellInfrastructureException):
    """Raised when database operations are attempted before initialization."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="DATABASE_NOT_INITIALIZED")


class EventBusError(SparkwellInfrastructureException):
    """
    Raised when an event cannot be published at all (e.g. malformed name).

    Listener failures are isolated by the bus and never surface here.
    """

    DEFAULT_SEVERITY = ErrorSeverity.ERROR

    def __init__(self, event_name: str, message: str) -> None:
        self.event_name = event_name
        super().__init__(
            f"Event bus error for '{event_name}': {message}",
            details={"event_name": event_name, "message": message},
            error_code="EVENT_BUS_ERROR",
        )


# Utility functions for exception handling patterns


def _structured(exc: Exception) -> bool:
    return hasattr(exc, "severity") and hasattr(exc, "is_retryable")


def is_transient_error(exc: Exception) -> bool:
    """Return True if the exception is marked retryable."""
    if _structured(exc):
        return bool(getattr(exc, "is_retryable"))
    return False


def get_error_severity(exc: Exception) -> ErrorSeverity:
    """Severity for logging; unknown exceptions default to ERROR."""
    if _structured(exc):
        severity = getattr(exc, "severity")
        if isinstance(severity, ErrorSeverity):
            return severity
    return ErrorSeverity.ERROR


def should_alert(exc: Exception) -> bool:
    """True if severity is ERROR or CRITICAL."""
    severity = get_error_severity(exc)
    return severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
