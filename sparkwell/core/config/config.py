"""
Static configuration for Sparkwell.

Environment-driven settings read once at startup: the database URL and pool
sizing, the deployment environment, log formatting flags and the two
directories the application touches (logs and YAML configuration).

Catalogs and economy tuning are not here; they live in YAML and are served
by `ConfigManager`.

Environment Variables
---------------------
- DATABASE_URL: SQLAlchemy async URL (default: local SQLite file)
- DATABASE_POOL_SIZE / DATABASE_MAX_OVERFLOW: PostgreSQL pool sizing
- DATABASE_POOL_RECYCLE / DATABASE_POOL_TIMEOUT: seconds
- DATABASE_STATEMENT_TIMEOUT_MS: per-transaction statement timeout
- DATABASE_ECHO: echo SQL
- ENVIRONMENT: development | testing | staging | production
- LOG_LEVEL, LOG_JSON, LOG_COLORS: console logging
- SPARKWELL_LOGS_DIR, SPARKWELL_CONFIG_DIR: relative to the project root
  unless absolute
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

# The structured logger depends on this module, so bootstrap warnings go
# through the stdlib root logger.
_bootstrap_log = logging.getLogger(__name__)

_TRUE = {"true", "yes", "1", "on"}
_FALSE = {"false", "no", "0", "off"}
_DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./sparkwell.db"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Environment(Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str) -> "Environment":
        """`test` is accepted as an alias; anything unknown is development."""
        normalized = value.strip().lower()
        if normalized == "test":
            return cls.TESTING
        try:
            return cls(normalized)
        except ValueError:
            _bootstrap_log.warning(
                "Unknown ENVIRONMENT %r, treating as development", value
            )
            return cls.DEVELOPMENT


class Config:
    """
    Class-level settings; never instantiated.

    >>> if Config.is_production():
    ...     engine_url = Config.DATABASE_URL
    """

    PROJECT_ROOT = Path(__file__).resolve().parents[3]

    DATABASE_URL: str = _DEFAULT_DATABASE_URL
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 1800
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_STATEMENT_TIMEOUT_MS: int = 30_000
    DATABASE_ECHO: bool = False

    ENVIRONMENT: str = Environment.DEVELOPMENT.value
    LOG_LEVEL: str = "INFO"
    # None lets the logger pick JSON in production and text elsewhere
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True

    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    CONFIG_DIR: Path = PROJECT_ROOT / "config"

    _warnings: List[str] = []
    _validated: bool = False

    # ------------------------------------------------------------------
    # Environment parsing
    # ------------------------------------------------------------------

    @classmethod
    def _reject(cls, key: str, raw: str, reason: str, default: object) -> None:
        message = f"{key}={raw!r} {reason}; using {default!r}"
        cls._warnings.append(message)
        _bootstrap_log.warning(message)

    @classmethod
    def _env_int(
        cls, key: str, default: int, minimum: int = 0, maximum: Optional[int] = None
    ) -> int:
        raw = os.getenv(key)
        if raw is None:
            return default
        try:
            value = int(raw)
        except ValueError:
            cls._reject(key, raw, "is not an integer", default)
            return default
        if value < minimum or (maximum is not None and value > maximum):
            cls._reject(key, raw, f"is outside [{minimum}, {maximum}]", default)
            return default
        return value

    @classmethod
    def _env_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        raw = os.getenv(key)
        if raw is None:
            return default
        normalized = raw.strip().lower()
        if normalized in _TRUE:
            return True
        if normalized in _FALSE:
            return False
        cls._reject(key, raw, "is not a boolean", default)
        return default

    @classmethod
    def _env_dir(cls, key: str, default: Path) -> Path:
        raw = os.getenv(key)
        if not raw:
            return default
        path = Path(raw)
        return path if path.is_absolute() else cls.PROJECT_ROOT / path

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls) -> None:
        """Re-read every setting from the environment."""
        cls._warnings = []

        cls.DATABASE_URL = os.getenv("DATABASE_URL") or _DEFAULT_DATABASE_URL
        cls.DATABASE_POOL_SIZE = cls._env_int("DATABASE_POOL_SIZE", 5, 1, 200)
        cls.DATABASE_MAX_OVERFLOW = cls._env_int("DATABASE_MAX_OVERFLOW", 10, 0, 200)
        cls.DATABASE_POOL_RECYCLE = cls._env_int("DATABASE_POOL_RECYCLE", 1800, 60)
        cls.DATABASE_POOL_TIMEOUT = cls._env_int("DATABASE_POOL_TIMEOUT", 30, 1, 600)
        cls.DATABASE_STATEMENT_TIMEOUT_MS = cls._env_int(
            "DATABASE_STATEMENT_TIMEOUT_MS", 30_000, 100
        )
        cls.DATABASE_ECHO = bool(cls._env_bool("DATABASE_ECHO", False))

        cls.ENVIRONMENT = Environment.parse(
            os.getenv("ENVIRONMENT", Environment.DEVELOPMENT.value)
        ).value

        level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        if level not in _LOG_LEVELS:
            cls._reject("LOG_LEVEL", level, "is not a logging level", "INFO")
            level = "INFO"
        cls.LOG_LEVEL = level
        cls.LOG_JSON = cls._env_bool("LOG_JSON", None)
        cls.LOG_COLORS = bool(cls._env_bool("LOG_COLORS", True))

        cls.LOGS_DIR = cls._env_dir("SPARKWELL_LOGS_DIR", cls.PROJECT_ROOT / "logs")
        cls.CONFIG_DIR = cls._env_dir(
            "SPARKWELL_CONFIG_DIR", cls.PROJECT_ROOT / "config"
        )

    @classmethod
    def validate(cls) -> None:
        """
        Load once and check the settings that would break startup.

        Raises:
            ValueError: production is configured with a SQLite database
        """
        if cls._validated:
            return

        cls.load()

        if cls.is_production() and cls.DATABASE_URL.startswith("sqlite"):
            raise ValueError("Production requires a PostgreSQL DATABASE_URL")

        cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)
        if not cls.CONFIG_DIR.is_dir():
            _bootstrap_log.warning("Configuration directory %s is missing", cls.CONFIG_DIR)

        cls._validated = True

    @classmethod
    def warnings(cls) -> List[str]:
        """Environment values that were rejected in favour of defaults."""
        return list(cls._warnings)

    @classmethod
    def environment(cls) -> Environment:
        return Environment(cls.ENVIRONMENT)

    @classmethod
    def is_production(cls) -> bool:
        return cls.environment() is Environment.PRODUCTION

    @classmethod
    def is_testing(cls) -> bool:
        return cls.environment() is Environment.TESTING


Config.validate()
