"""
Sparkwell logging: queue-backed handlers, JSON/colored formatting and
LogContext propagation.
"""

from sparkwell.core.logging.logger import (
    LogContext,
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    "setup_logging",
    "shutdown_logging",
    "get_logger",
    "LogContext",
]
