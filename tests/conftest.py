"""
Pytest configuration and shared fixtures for Sparkwell tests.
=============================================================

Purpose
-------
Provide reusable fixtures for unit and integration tests:
- YAML configuration loaded from the repository's `config/` directory
- A throwaway SQLite database per test (schema created on the fly)
- Event bus plus an event recorder for asserting published events
- A fully initialized ServiceContainer
- User factory for seeding balances
- Mock collaborators for pure unit tests

Environment
-----------
ENVIRONMENT, SPARKWELL_LOGS_DIR and LOG_COLORS are set before any
`sparkwell` import, because configuration and logging are set up when the
package is first imported.
"""

import itertools
import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

os.environ["ENVIRONMENT"] = "testing"
os.environ.setdefault("SPARKWELL_LOGS_DIR", tempfile.mkdtemp(prefix="sparkwell-logs-"))
os.environ.setdefault("LOG_COLORS", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
import pytest_asyncio

from sparkwell.core.config.manager import ConfigManager
from sparkwell.core.database.service import DatabaseService
from sparkwell.core.event.bus import EventBus
from sparkwell.core.logging.logger import get_logger
from sparkwell.core.services.container import ServiceContainer
from sparkwell.database.models.identity.user import User

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

DOMAIN_EVENTS = (
    "quest.assigned",
    "quest.started",
    "quest.completed",
    "reflection.submitted",
    "points.credited",
    "points.debited",
    "reward.redeemed",
    "profile.step_updated",
    "profile.mood_logged",
)


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture(scope="session")
def config_dir():
    """Repository configuration directory (catalogs + economy tuning)."""
    return CONFIG_DIR


@pytest.fixture
def config_manager(config_dir):
    """ConfigManager loaded from the repository YAML files."""
    ConfigManager.load_from(config_dir)
    yield ConfigManager
    ConfigManager.reset()


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'sparkwell_test.db'}"


@pytest_asyncio.fixture
async def database(database_url):
    """
    Fresh SQLite database with the full schema.

    Each test gets its own file, so there is nothing to clean up between
    tests beyond disposing the engine.
    """
    await DatabaseService.initialize(database_url)
    await DatabaseService.create_all()
    yield DatabaseService
    await DatabaseService.shutdown()


@pytest.fixture
def make_user(database):
    """
    Factory inserting a user and returning its id.

    Usage:
        user_id = await make_user(spark_points=200)
    """
    sequence = itertools.count(1)

    async def _make_user(spark_points=0, name=None):
        number = next(sequence)
        async with DatabaseService.get_transaction() as session:
            user = User(
                name=name or f"Test User {number}",
                email=f"user{number}@example.com",
                spark_points=spark_points,
                quests_assigned=0,
                quests_completed=0,
            )
            session.add(user)
            await session.flush()
            return user.id

    return _make_user


# ============================================================================
# EVENT FIXTURES
# ============================================================================


@pytest.fixture
def event_bus(config_manager):
    return EventBus(config_manager)


@pytest.fixture
def recorded_events(event_bus):
    """
    List of (event_name, payload) tuples for every domain event published
    during the test, in publish order.
    """
    events = []

    def _recorder(event_name):
        def record(payload):
            events.append((event_name, payload))

        return record

    for name in DOMAIN_EVENTS:
        event_bus.subscribe(name, _recorder(name), identifier=f"recorder@{name}")

    return events


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def container(config_manager, database, event_bus):
    """Fully initialized ServiceContainer over the test database."""
    services = ServiceContainer(
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.container"),
    )
    await services.initialize()
    yield services
    await services.shutdown()


# ============================================================================
# MOCK FIXTURES
# ============================================================================


@pytest.fixture
def mock_event_bus():
    """Mock EventBus for unit tests."""
    bus = MagicMock()
    bus.publish = AsyncMock(return_value=[])
    bus.subscribe = MagicMock()
    return bus


@pytest.fixture
def mock_config_manager():
    """
    Mock ConfigManager backed by a plain dict.

    Tests fill `mock_config_manager.values` with dot-notation keys.
    """
    config = MagicMock()
    config.values = {}
    config.get = MagicMock(
        side_effect=lambda key, default=None: config.values.get(key, default)
    )
    return config


@pytest.fixture
def mock_logger():
    return MagicMock()
