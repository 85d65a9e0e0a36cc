"""
Dependency injection container for the FarmLink server.

Builds the call directory and the signaling relay in dependency order and
tears them down again. One container is created per application lifespan
and stored on app.state.container.
"""

from typing import Any

from anyio import Lock

from .config import AppConfig, get_config
from .database import DatabaseManager
from .directory import CallDirectory, SqlAlchemyCallDirectory, seed_demo_data
from .realtime import PresenceRegistry, SignalingMessageParser, SignalingRelay
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class ApplicationContainer:
    """
    Holds the application's long-lived services.

    Services are not created in __init__; await initialize() first.
    """

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or get_config()

        self.database_manager: DatabaseManager | None = None
        self.call_directory: CallDirectory | None = None
        self.presence_registry: PresenceRegistry | None = None
        self.signaling_relay: SignalingRelay | None = None

        self._initialized: bool = False
        self._initialization_lock = Lock()

        logger.debug("ApplicationContainer created (not yet initialized)")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the database, call directory and relay."""
        async with self._initialization_lock:
            if self._initialized:
                logger.warning("Container already initialized - skipping re-initialization")
                return

            logger.info("Initializing ApplicationContainer...")
            try:
                self.database_manager = DatabaseManager(self.config.database)
                await self.database_manager.initialize()
                session_maker = self.database_manager.get_session_maker()

                if self.config.database.seed_demo_data:
                    await seed_demo_data(session_maker)

                self.call_directory = SqlAlchemyCallDirectory(session_maker)
                self.presence_registry = PresenceRegistry()
                self.signaling_relay = SignalingRelay(
                    registry=self.presence_registry,
                    directory=self.call_directory,
                    parser=SignalingMessageParser(max_message_size=self.config.signaling.max_message_size),
                )

                self._initialized = True
                logger.info("ApplicationContainer initialization complete", signaling_path=self.config.signaling.path)
            except Exception as e:
                logger.error("Failed to initialize application container", error=str(e), exc_info=True)
                raise RuntimeError(f"Failed to initialize application container: {e}") from e

    async def shutdown(self) -> None:
        """Release services in reverse dependency order."""
        logger.info("Shutting down ApplicationContainer...")
        if self.database_manager is not None:
            await self.database_manager.close()
        self.signaling_relay = None
        self.presence_registry = None
        self.call_directory = None
        self._initialized = False
        logger.info("ApplicationContainer shutdown complete")

    def status(self) -> dict[str, Any]:
        """Summary used by the health endpoint."""
        return {
            "initialized": self._initialized,
            "online_connections": len(self.presence_registry) if self.presence_registry is not None else 0,
        }
