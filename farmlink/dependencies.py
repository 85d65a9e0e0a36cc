"""
Dependency injection providers for the FastAPI routes.

Every provider resolves through the ApplicationContainer stored on
app.state.container by the lifespan handler.
"""

from fastapi import Depends, Request

from .container import ApplicationContainer
from .directory import CallDirectory
from .realtime import PresenceRegistry
from .structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


def get_container(request: Request) -> ApplicationContainer:
    """
    Get the application container from request state.

    Raises:
        RuntimeError: If the lifespan handler has not stored a container
    """
    if not hasattr(request.app.state, "container"):
        raise RuntimeError(
            "ApplicationContainer not found in app.state - ensure container is initialized in lifespan context"
        )
    return request.app.state.container


def get_call_directory(request: Request) -> CallDirectory:
    container = get_container(request)
    if container.call_directory is None:
        raise RuntimeError("Call directory is not initialized")
    return container.call_directory


def get_presence_registry(request: Request) -> PresenceRegistry:
    container = get_container(request)
    if container.presence_registry is None:
        raise RuntimeError("Presence registry is not initialized")
    return container.presence_registry


ContainerDep = Depends(get_container)
CallDirectoryDep = Depends(get_call_directory)
PresenceRegistryDep = Depends(get_presence_registry)
