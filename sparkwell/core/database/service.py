"""
Database Service
================

One async engine per process and the two ways services talk to it:

- `get_session()`: reads. Nothing is committed.
- `get_transaction()`: every write. Commits on success and rolls back on any
  exception.

Services never call `commit()` themselves. A service composing several
writes passes its session down (see `BaseService.transaction`) so the whole
operation commits or rolls back as one.

Error Translation
-----------------
- `IntegrityError` (unique / foreign key) -> `ConflictError` (domain)
- other `DBAPIError` / `OperationalError` -> `UpstreamStorageError`
- anything else (domain errors included) propagates unchanged

Backends
--------
PostgreSQL (asyncpg) gets a QueuePool and a per-transaction
`statement_timeout`. SQLite (aiosqlite) gets a NullPool, so each concurrent
task has its own connection, and a busy timeout so writers queue instead of
failing. Tests also use NullPool.

Usage
-----
>>> await DatabaseService.initialize()
>>> async with DatabaseService.get_transaction() as session:
...     session.add(Reflection(user_id=user_id, quest_title="Mindful Walk", ...))
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError, DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from sparkwell.core.config.config import Config
from sparkwell.core.database.base import Base
from sparkwell.core.exceptions import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    UpstreamStorageError,
)
from sparkwell.core.logging.logger import get_logger
from sparkwell.modules.shared.exceptions import ConflictError

logger = get_logger(__name__)

SQLITE_BUSY_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class EngineSettings:
    """Engine options resolved from Config when the service starts."""

    url: str
    dialect: str
    echo: bool = False
    statement_timeout_ms: int = 30_000
    pool_options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, url: Optional[str] = None) -> "EngineSettings":
        raw_url = url or Config.DATABASE_URL
        try:
            dialect = make_url(raw_url).get_backend_name()
        except ArgumentError as exc:
            raise DatabaseInitializationError(f"Invalid DATABASE_URL: {exc}") from exc

        if dialect == "sqlite" or Config.is_testing():
            pool_options: Dict[str, Any] = {"poolclass": NullPool}
        else:
            pool_options = {
                "pool_size": Config.DATABASE_POOL_SIZE,
                "max_overflow": Config.DATABASE_MAX_OVERFLOW,
                "pool_recycle": Config.DATABASE_POOL_RECYCLE,
                "pool_timeout": Config.DATABASE_POOL_TIMEOUT,
                "pool_pre_ping": True,
            }
        if dialect == "sqlite":
            pool_options["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT_SECONDS}

        return cls(
            url=raw_url,
            dialect=dialect,
            echo=Config.DATABASE_ECHO,
            statement_timeout_ms=Config.DATABASE_STATEMENT_TIMEOUT_MS,
            pool_options=pool_options,
        )

    @property
    def is_postgres(self) -> bool:
        return self.dialect == "postgresql"


class DatabaseService:
    """
    Process-wide engine and session factory (class-level state).

    - initialize(url=None) / shutdown()
    - create_all()
    - get_session() / get_transaction()
    - health_check() / is_initialized()
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _settings: Optional[EngineSettings] = None
    _lock: asyncio.Lock = asyncio.Lock()

    # ========================================================================
    # Lifecycle
    # ========================================================================

    @classmethod
    async def initialize(cls, url: Optional[str] = None) -> None:
        """
        Create the engine. A second call is a no-op.

        Raises:
            DatabaseInitializationError: bad URL or the engine could not be built
        """
        async with cls._lock:
            if cls._engine is not None:
                return

            settings = EngineSettings.from_config(url)
            try:
                engine = create_async_engine(
                    settings.url, echo=settings.echo, **settings.pool_options
                )
            except Exception as exc:
                logger.error(
                    "Database engine creation failed",
                    extra={"dialect": settings.dialect, "error": str(exc)},
                    exc_info=True,
                )
                raise DatabaseInitializationError(
                    f"Database initialization failed: {exc}"
                ) from exc

            cls._engine = engine
            cls._settings = settings
            cls._session_factory = async_sessionmaker(engine, expire_on_commit=False)

            logger.info(
                "Database ready",
                extra={
                    "dialect": settings.dialect,
                    "pooled": "poolclass" not in settings.pool_options,
                },
            )

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine; safe to call when not initialized."""
        async with cls._lock:
            engine, cls._engine = cls._engine, None
            cls._session_factory = None
            cls._settings = None
            if engine is not None:
                await engine.dispose()
                logger.info("Database engine disposed")

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None

    @classmethod
    async def create_all(cls) -> None:
        """Create all tables from ORM metadata (development and tests)."""
        engine = cls._require_engine()
        import sparkwell.database.models  # noqa: F401  (registers mappers)

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema created", extra={"tables": sorted(Base.metadata.tables)})

    @classmethod
    async def health_check(cls) -> bool:
        """`SELECT 1`; False when uninitialized or unreachable, never raises."""
        if cls._engine is None:
            return False
        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except DBAPIError as exc:
            logger.warning("Database health check failed", extra={"error": str(exc)})
            return False
        return True

    # ========================================================================
    # Sessions
    # ========================================================================

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session for reads.

        Raises:
            DatabaseNotInitializedError: called before initialize()
            UpstreamStorageError: the store failed while the session was open
        """
        factory = cls._require_factory()
        async with factory() as session:
            try:
                await cls._apply_statement_timeout(session)
                yield session
            except DBAPIError as exc:
                raise cls._translate("session", exc) from exc

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in one atomic transaction.

        Raises:
            DatabaseNotInitializedError: called before initialize()
            ConflictError: a unique or foreign-key constraint rejected the write
            UpstreamStorageError: any other driver failure
        """
        factory = cls._require_factory()
        started = time.perf_counter()
        async with factory() as session:
            try:
                await cls._apply_statement_timeout(session)
                yield session
                await session.commit()
            except DBAPIError as exc:
                await session.rollback()
                raise cls._translate("transaction", exc) from exc
            except Exception:
                await session.rollback()
                raise

        logger.debug(
            "Transaction committed",
            extra={"duration_ms": round((time.perf_counter() - started) * 1000, 2)},
        )

    # ========================================================================
    # Internal
    # ========================================================================

    @classmethod
    def _require_engine(cls) -> AsyncEngine:
        if cls._engine is None:
            raise DatabaseNotInitializedError(
                "Call DatabaseService.initialize() before using the database"
            )
        return cls._engine

    @classmethod
    def _require_factory(cls) -> async_sessionmaker[AsyncSession]:
        cls._require_engine()
        assert cls._session_factory is not None
        return cls._session_factory

    @classmethod
    async def _apply_statement_timeout(cls, session: AsyncSession) -> None:
        if cls._settings is not None and cls._settings.is_postgres:
            await session.execute(
                text(f"SET LOCAL statement_timeout = {cls._settings.statement_timeout_ms}")
            )

    @staticmethod
    def _translate(operation: str, exc: DBAPIError) -> Exception:
        if isinstance(exc, IntegrityError):
            logger.warning(
                "Constraint violation; rolled back",
                extra={"operation": operation, "error": str(exc.orig)},
            )
            return ConflictError(operation, str(exc.orig))

        logger.error(
            "Storage error; rolled back",
            extra={
                "operation": operation,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
            exc_info=exc,
        )
        return UpstreamStorageError(operation, exc)
