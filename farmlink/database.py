"""
Database engine and session management for the call directory.

The DatabaseManager is owned by the application container: it builds the
async engine from DatabaseConfig, creates the schema on startup and hands
out the session factory used by SqlAlchemyCallDirectory.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from .config.models import DatabaseConfig
from .exceptions import DatabaseError, create_error_context
from .models import Base
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/").endswith("sqlite+aiosqlite:"))


class DatabaseManager:
    """
    Owns the async engine and session maker.

    Initialization is explicit (initialize()), so constructing the manager
    never touches the database.
    """

    def __init__(self, database_config: DatabaseConfig) -> None:
        self.config = database_config
        self.database_url: str = database_config.url
        self.engine: AsyncEngine | None = None
        self.session_maker: async_sessionmaker[AsyncSession] | None = None
        self._initialized: bool = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _create_engine(self) -> AsyncEngine:
        engine_kwargs: dict[str, Any] = {"echo": self.config.echo}
        if _is_memory_sqlite(self.database_url):
            # One shared connection, otherwise every session would see its own empty database
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs["pool_pre_ping"] = True
        return create_async_engine(self.database_url, **engine_kwargs)

    async def initialize(self) -> None:
        """
        Create the engine, the session maker and all tables.

        Raises:
            DatabaseError: If the database cannot be reached or the schema cannot be created
        """
        if self._initialized:
            return

        self.engine = self._create_engine()
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            context = create_error_context()
            context.metadata["operation"] = "database_initialization"
            raise DatabaseError(
                f"Failed to initialize database: {e}",
                context=context,
                operation="create_all",
                user_friendly="Database cannot be initialized",
            ) from e

        self._initialized = True
        logger.info(
            "Database initialized",
            dialect=self.engine.dialect.name,
            pool_type=type(self.engine.pool).__name__,
        )

    def get_session_maker(self) -> async_sessionmaker[AsyncSession]:
        """
        Return the session factory.

        Raises:
            RuntimeError: If initialize() has not completed
        """
        if self.session_maker is None:
            raise RuntimeError("DatabaseManager.initialize() must be awaited before use")
        return self.session_maker

    async def check_connection(self) -> bool:
        """Run a trivial query; used by the health endpoint."""
        if self.engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database health check failed", error=str(e), error_type=type(e).__name__)
            return False

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.engine is not None:
            logger.info("Closing database connections")
            await self.engine.dispose()
        self.engine = None
        self.session_maker = None
        self._initialized = False
