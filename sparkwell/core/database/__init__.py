"""
Database subsystem for Sparkwell.

Provides the async SQLAlchemy engine and session management, plus the ORM
base classes and mixins used by the model definitions.
"""

from sparkwell.core.database.base import (
    Base,
    IdMixin,
    JSONType,
    TimestampMixin,
    ensure_utc,
    utc_now,
)
from sparkwell.core.database.service import DatabaseService

__all__ = [
    "Base",
    "IdMixin",
    "JSONType",
    "TimestampMixin",
    "ensure_utc",
    "utc_now",
    "DatabaseService",
]
