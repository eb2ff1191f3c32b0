"""
Base helpers for Sparkwell domain value objects.

Purpose
-------
Domain models are immutable, self-validating value objects built from
database rows or configuration. They carry the rules that do not need
storage (expiry derivation, onboarding completion, catalog invariants)
while persistence stays in the service layer.

Responsibilities
----------------
- Define `DomainValidationError` for invariant violations
- Provide small validators used from `__post_init__`
- Provide tolerant coercion helpers for loosely-shaped JSON documents
"""

from __future__ import annotations

from typing import Any, FrozenSet, Iterable, Optional, Sequence, Tuple


class DomainValidationError(Exception):
    """Raised when a domain value object violates one of its invariants."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


def validate_positive(value: int, field_name: str) -> None:
    """Raise DomainValidationError unless `value` is a positive int."""
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise DomainValidationError(
            f"{field_name} must be a positive integer, got {value!r}",
            field=field_name,
        )


def validate_not_empty(value: str, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise DomainValidationError(
            f"{field_name} cannot be empty",
            field=field_name,
        )


def validate_choice(value: str, choices: Iterable[str], field_name: str) -> None:
    allowed = tuple(choices)
    if value not in allowed:
        raise DomainValidationError(
            f"{field_name} must be one of {', '.join(allowed)}, got {value!r}",
            field=field_name,
        )


# ============================================================================
# COERCION HELPERS
# ============================================================================


def string_set(value: Any) -> FrozenSet[str]:
    """Coerce a JSON list (or None) into a frozenset of non-empty strings."""
    if not value:
        return frozenset()
    if isinstance(value, str):
        return frozenset({value}) if value.strip() else frozenset()
    return frozenset(str(item) for item in value if item not in (None, ""))


def string_tuple(value: Any) -> Tuple[str, ...]:
    """Coerce a JSON list (or None) into an ordered tuple of non-empty strings."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,) if value.strip() else ()
    return tuple(str(item) for item in value if item not in (None, ""))


def ordered_unique(values: Sequence[str]) -> Tuple[str, ...]:
    """De-duplicate while keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        seen.setdefault(value, None)
    return tuple(seen)


def optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present key; accepts camelCase and snake_case spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default
