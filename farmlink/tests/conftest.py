"""
Test configuration and shared fixtures for the FarmLink test suite.

Environment variables are set before any farmlink module is imported so
configuration never picks up a developer's .env or a real database.
"""

import os
from collections.abc import AsyncGenerator, Callable, Generator

os.environ.setdefault("LOGGING_ENVIRONMENT", "unit_test")
os.environ.setdefault("LOGGING_DISABLE_LOGGING", "true")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SERVER_HOST", "127.0.0.1")
os.environ.setdefault("SERVER_PORT", "54731")

import pytest  # noqa: E402

from farmlink.config import reset_config  # noqa: E402
from farmlink.config.models import DatabaseConfig  # noqa: E402
from farmlink.database import DatabaseManager  # noqa: E402
from farmlink.directory import SqlAlchemyCallDirectory, seed_demo_data  # noqa: E402
from farmlink.realtime import PresenceRegistry, SignalingConnection  # noqa: E402
from farmlink.tests.helpers import make_mock_websocket  # noqa: E402


@pytest.fixture(autouse=True)
def reset_config_singleton() -> Generator[None, None, None]:
    """Reset the config singleton before and after each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
async def open_connection() -> AsyncGenerator[Callable[[], SignalingConnection], None]:
    """Factory for started SignalingConnections over mock sockets; all are closed at teardown."""
    created: list[SignalingConnection] = []

    def factory() -> SignalingConnection:
        connection = SignalingConnection(make_mock_websocket())
        connection.start_writer()
        created.append(connection)
        return connection

    yield factory

    for connection in created:
        await connection.close()


@pytest.fixture
def registry() -> PresenceRegistry:
    return PresenceRegistry()


@pytest.fixture
async def database_manager() -> AsyncGenerator[DatabaseManager, None]:
    """Initialized in-memory SQLite database, empty."""
    manager = DatabaseManager(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture
async def call_directory(database_manager: DatabaseManager) -> SqlAlchemyCallDirectory:
    """SQLAlchemy call directory loaded with the demo data set."""
    await seed_demo_data(database_manager.get_session_maker())
    return SqlAlchemyCallDirectory(database_manager.get_session_maker())
