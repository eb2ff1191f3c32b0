"""
Domain exceptions for Sparkwell.

Purpose
-------
Define the domain-specific exception hierarchy raised by services for
business rule violations: unknown users or rewards, insufficient spark
points, invalid input and actions that are not allowed in the current state.
Outer layers translate these into user-facing responses.

Design Notes
------------
- All domain exceptions inherit from `SparkwellDomainException`.
- Each exception carries:
  - `message`: human-readable description
  - `details`: additional structured context (dict)
  - `severity`: `ErrorSeverity` value for logging/alerting
  - `is_retryable`: whether the operation can be retried
  - `error_code`: short, stable identifier for programmatic use
- Domain errors are expected outcomes; they log at INFO severity and never
  leave partial state behind because they are raised inside the owning
  transaction.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sparkwell.core.exceptions import ErrorSeverity


class SparkwellDomainException(Exception):
    """
    Base exception for all Sparkwell domain-level errors.

    Args:
        message: Human-readable error message
        details: Additional structured data about the error
        severity: Error severity level for logging handlers
        is_retryable: Whether the operation can be retried
        error_code: Optional code for programmatic handling
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


class NotFoundError(SparkwellDomainException):
    """
    Raised when a requested entity (user, profile, reflection) does not exist.

    Args:
        resource_type: Type of resource (e.g., "User", "Reflection")
        identifier: Optional identifier for the missing resource
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, resource_type: str, identifier: Optional[Any] = None) -> None:
        self.resource_type = resource_type
        self.identifier = identifier

        if identifier is not None:
            message = f"{resource_type} not found: {identifier}"
        else:
            message = f"{resource_type} not found"

        super().__init__(
            message,
            details={
                "resource_type": resource_type,
                "identifier": identifier,
            },
            error_code=f"{resource_type.upper()}_NOT_FOUND",
        )


class InvalidRewardError(NotFoundError):
    """Raised when a reward id is not present in the reward catalog."""

    def __init__(self, reward_id: str) -> None:
        self.reward_id = reward_id
        super().__init__("Reward", reward_id)
        self.error_code = "INVALID_REWARD"


class InsufficientBalanceError(SparkwellDomainException):
    """
    Raised when a debit would take the spark-point balance below zero.

    The balance is unchanged when this is raised.

    Args:
        required: Points the operation needs
        current: Points the user holds at the time of the attempt
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, required: int, current: int) -> None:
        self.required = required
        self.current = current
        self.deficit = required - current
        super().__init__(
            f"Insufficient spark points: need {required:,}, have {current:,}",
            details={
                "resource": "spark_points",
                "required": required,
                "current": current,
                "deficit": self.deficit,
            },
            error_code="INSUFFICIENT_SPARK_POINTS",
        )


class ValidationError(SparkwellDomainException):
    """
    Raised when input fails domain validation.

    Args:
        field: Name of the field that failed validation
        message: Explanation of why validation failed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.validation_message = message
        super().__init__(
            f"Validation error for {field}: {message}",
            details={
                "field": field,
                "validation_message": message,
            },
            error_code=f"VALIDATION_{field.upper()}",
        )


class InvalidOperationError(SparkwellDomainException):
    """
    Raised when an action is not allowed in the current state.

    Example: starting the same quest twice on one day.

    Args:
        action: The attempted action (e.g., "start_quest")
        reason: Why it is not allowed
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO
    DEFAULT_RETRYABLE = False

    def __init__(self, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(
            f"Cannot {action}: {reason}",
            details={"action": action, "reason": reason},
            error_code="INVALID_OPERATION",
        )


class ConflictError(SparkwellDomainException):
    """
    Raised when a write violates a uniqueness or reference constraint.

    The transaction has been rolled back; retrying after re-reading current
    state is safe.

    Args:
        operation: Storage operation that hit the constraint
        reason: Constraint message reported by the database
    """

    DEFAULT_SEVERITY = ErrorSeverity.WARNING
    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Conflicting write during {operation}: {reason}",
            details={"operation": operation, "reason": reason},
            error_code="CONFLICT",
        )
