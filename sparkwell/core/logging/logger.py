"""
Sparkwell logging.

Every module logs through `get_logger(__name__)`. Records go onto a bounded
queue and a background listener writes them out, so service coroutines never
block on console or file I/O.

Output
------
- Console: JSON in production, plain or colored text elsewhere
  (`LOG_JSON` / `LOG_COLORS` override).
- `<LOGS_DIR>/sparkwell_daily.json.log`: JSON lines, rotated at UTC midnight,
  one backup kept.

Context
-------
`LogContext` scopes `user_id`, `action` and a `correlation_id` to a block of
sync or async code; `ContextFilter` stamps them on every record. Values
passed explicitly through `extra=` take precedence.
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from sparkwell.core.config.config import Config

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DAILY_LOG_FILE = "sparkwell_daily.json.log"
QUEUE_MAX_SIZE = 10_000

CONTEXT_FIELDS = ("user_id", "action", "correlation_id", "component")

_context: ContextVar[Dict[str, Any]] = ContextVar("sparkwell_log_context", default={})
_listener: Optional[QueueListener] = None


def _level() -> int:
    return logging.getLevelName(Config.LOG_LEVEL)  # type: ignore[no-any-return]


def _use_json() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return Config.LOG_JSON


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Attach the active LogContext (or N/A placeholders) to each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _context.get()
        defaults = {
            "user_id": context.get("user_id", "N/A"),
            "action": context.get("action", "N/A"),
            "correlation_id": context.get("correlation_id", "N/A"),
            "component": context.get("component") or record.name.split(".", 1)[0],
        }
        for field, value in defaults.items():
            if not hasattr(record, field):
                setattr(record, field, value)
        return True


class ColoredFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[90m",
        "INFO": "\033[94m",
        "WARNING": "\033[93m",
        "ERROR": "\033[91m",
        "CRITICAL": "\033[91m\033[1m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        levelname = record.levelname
        color = self.COLORS.get(levelname)
        if color:
            record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class JSONFormatter(logging.Formatter):
    """One JSON object per line; `extra=` fields are nested under "extra"."""

    _RESERVED = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value not in (None, "N/A"):
                payload[field] = value

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in self._RESERVED
            and key not in CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class _DroppingQueueHandler(QueueHandler):
    """Never block the event loop: a full queue drops the record."""

    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            sys.stderr.write(f"sparkwell: log queue full, dropped: {record.getMessage()}\n")


# ============================================================================
# Setup / Teardown
# ============================================================================


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if _use_json():
        handler.setFormatter(JSONFormatter())
    elif Config.LOG_COLORS and sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    return handler


def _file_handler() -> logging.Handler:
    logs_dir = Path(Config.LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        logs_dir / DAILY_LOG_FILE,
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """Route the root logger through the queue listener. Safe to call twice."""
    global _listener

    if _listener is not None:
        return

    level = _level()
    log_queue: "queue.Queue[logging.LogRecord]" = queue.Queue(QUEUE_MAX_SIZE)

    _listener = QueueListener(
        log_queue, _console_handler(), _file_handler(), respect_handler_level=True
    )
    _listener.start()

    queue_handler = _DroppingQueueHandler(log_queue)
    # On the handler so records from every child logger pass through it
    queue_handler.addFilter(ContextFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(queue_handler)
    root.setLevel(level)

    for noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": Config.LOG_LEVEL,
            "json": _use_json(),
            "logs_dir": str(Config.LOGS_DIR),
        },
    )


def shutdown_logging() -> None:
    """Flush the queue, stop the listener and detach the root handlers."""
    global _listener

    if _listener is None:
        return

    _listener.stop()
    for handler in _listener.handlers:
        handler.close()
    _listener = None

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


# ============================================================================
# Context
# ============================================================================


class LogContext:
    """
    Scope log fields to a block.

    >>> async with LogContext(user_id=42, action="redeem"):
    ...     await redemption_service.redeem(42, "mood_boost")

    A short correlation id is generated when none is given. Extra keyword
    arguments are carried as additional context fields.
    """

    def __init__(
        self,
        user_id: Optional[int] = None,
        action: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **fields: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            **fields,
            "user_id": "N/A" if user_id is None else str(user_id),
            "action": action or "N/A",
            "correlation_id": correlation_id or uuid.uuid4().hex[:8],
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _context.set(self.context)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, *exc_info: Any) -> None:
        self.__exit__(*exc_info)


setup_logging()
