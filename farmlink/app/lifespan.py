"""Application lifecycle management for the FarmLink server."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from ..container import ApplicationContainer
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger("farmlink.lifespan")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the ApplicationContainer on startup and release it on shutdown.

    A container already placed on app.state (tests do this) is reused.
    """
    logger.info("Starting FarmLink server...")

    container = getattr(app.state, "container", None)
    if container is None:
        container = ApplicationContainer()
        app.state.container = container
    await container.initialize()

    logger.info("FarmLink server started", signaling_path=container.config.signaling.path)
    try:
        yield
    finally:
        logger.info("Shutting down FarmLink server...")
        await container.shutdown()
        logger.info("FarmLink server shutdown complete")
