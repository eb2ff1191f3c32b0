"""
Input Validation Layer for Sparkwell

Purpose
-------
Provide a centralized validation layer for every value that crosses into a
service: user ids, point amounts, reward ids, free-text reflection fields
and list limits. Enforces types and bounds before anything touches the
database.

Responsibilities
----------------
- Validate and convert inputs to the expected types
- Enforce bounds checking for numerical inputs
- Validate string length and optional/blank handling
- Validate choice inputs against allowed options
- Raise ValidationError with clear messages

Non-Responsibilities
--------------------
- Business rules (service layer concern)
- Database constraints (schema concern)

Observability
-------------
Every validation failure is logged at debug level with the field name,
the raw value (repr) and the reason.
"""

from __future__ import annotations

from typing import Any, NoReturn, Optional, Sequence

from sparkwell.core.logging.logger import get_logger
from sparkwell.modules.shared.exceptions import ValidationError

logger = get_logger(__name__)

DEFAULT_MAX_LIMIT = 200


def _raise_validation_error(field_name: str, value: Any, message: str) -> NoReturn:
    """Log and raise a ValidationError."""
    logger.debug(
        "Input validation failed",
        extra={
            "field_name": field_name,
            "raw_value": repr(value),
            "reason": message,
        },
    )
    raise ValidationError(field_name, message)


class InputValidator:
    """
    Centralized input validation.

    All validation methods are stateless, return the validated value on
    success and raise ValidationError on failure.
    """

    # =========================================================================
    # INTEGER VALIDATION
    # =========================================================================

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
    ) -> int:
        """
        Validate that value is an integer within optional bounds.

        Booleans and non-integral floats are rejected; integral floats and
        numeric strings are converted.
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if isinstance(value, bool):
            _raise_validation_error(field_name, value, "Must be a whole number")

        if isinstance(value, float) and not value.is_integer():
            _raise_validation_error(
                field_name, value, f"Must be a whole number, got {value}"
            )

        try:
            int_value = int(value)
        except (ValueError, TypeError):
            _raise_validation_error(
                field_name,
                value,
                f"Must be a whole number, got '{value}'",
            )

        if min_value is not None and int_value < min_value:
            _raise_validation_error(
                field_name,
                int_value,
                f"Must be at least {min_value}, got {int_value}",
            )

        if max_value is not None and int_value > max_value:
            _raise_validation_error(
                field_name,
                int_value,
                f"Cannot exceed {max_value}, got {int_value}",
            )

        return int_value

    @staticmethod
    def validate_positive_integer(
        value: Any,
        field_name: str,
        max_value: Optional[int] = None,
    ) -> int:
        """Validate that value is a strictly positive integer (>= 1)."""
        return InputValidator.validate_integer(
            value=value,
            field_name=field_name,
            min_value=1,
            max_value=max_value,
        )

    @staticmethod
    def validate_user_id(value: Any, field_name: str = "user_id") -> int:
        """Validate a user primary key."""
        return InputValidator.validate_positive_integer(value, field_name=field_name)

    @staticmethod
    def validate_limit(
        value: Any,
        field_name: str = "limit",
        max_value: int = DEFAULT_MAX_LIMIT,
    ) -> int:
        """Validate a result-set limit (1..max_value)."""
        return InputValidator.validate_positive_integer(
            value, field_name=field_name, max_value=max_value
        )

    # =========================================================================
    # STRING VALIDATION
    # =========================================================================

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        min_length: int = 1,
        max_length: Optional[int] = None,
    ) -> str:
        """
        Validate a required string. Surrounding whitespace is stripped and
        blank strings fail the default `min_length` of 1.
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        if not isinstance(value, str):
            _raise_validation_error(field_name, value, "Must be a string")

        str_value = value.strip()

        if len(str_value) < min_length:
            if not str_value:
                _raise_validation_error(field_name, value, "Value is required")
            _raise_validation_error(
                field_name,
                str_value,
                f"Must be at least {min_length} characters",
            )

        if max_length is not None and len(str_value) > max_length:
            _raise_validation_error(
                field_name,
                str_value,
                f"Cannot exceed {max_length} characters",
            )

        return str_value

    @staticmethod
    def validate_optional_string(
        value: Any,
        field_name: str,
        max_length: Optional[int] = None,
    ) -> Optional[str]:
        """Validate an optional string; None and blank both normalize to None."""
        if value is None:
            return None

        if not isinstance(value, str):
            _raise_validation_error(field_name, value, "Must be a string")

        if not value.strip():
            return None

        if max_length is not None and len(value) > max_length:
            _raise_validation_error(
                field_name,
                value,
                f"Cannot exceed {max_length} characters",
            )

        return value

    # =========================================================================
    # CHOICE VALIDATION
    # =========================================================================

    @staticmethod
    def validate_choice(
        value: Any,
        field_name: str,
        valid_choices: Sequence[str],
    ) -> str:
        """
        Validate that value is one of the allowed choices (case-insensitive).

        Returns the lowercased choice.
        """
        if value is None:
            _raise_validation_error(field_name, value, "Value is required")

        str_value = str(value).lower().strip()
        normalized_choices = {choice.lower() for choice in valid_choices}

        if str_value not in normalized_choices:
            choices_str = ", ".join(sorted(valid_choices))
            _raise_validation_error(
                field_name,
                value,
                f"Invalid choice '{value}'. Must be one of: {choices_str}",
            )

        return str_value
