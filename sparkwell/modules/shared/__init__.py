"""
Sparkwell Shared Module

Domain-level foundations for all service modules:

- BaseService: logging, config access, event emission
- BaseRepository: type-safe query helpers
- Domain exceptions: business rule violations
- Formulas: pure reflection scoring
- Constants: scoring values and rule vocabulary

Import submodules directly (e.g. `sparkwell.modules.shared.exceptions`);
this package deliberately re-exports only the exception hierarchy so that
core infrastructure can depend on it without import cycles.
"""

from sparkwell.modules.shared.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    InvalidOperationError,
    InvalidRewardError,
    NotFoundError,
    SparkwellDomainException,
    ValidationError,
)

__all__ = [
    "SparkwellDomainException",
    "NotFoundError",
    "InvalidRewardError",
    "InsufficientBalanceError",
    "ValidationError",
    "InvalidOperationError",
    "ConflictError",
]
