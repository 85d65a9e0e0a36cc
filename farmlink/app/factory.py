"""
FastAPI application factory for the FarmLink server.

Sets up CORS, correlation ids, exception handlers, the REST routers and the
signaling WebSocket route.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..api import (
    availability_router,
    call_history_router,
    call_router,
    health_router,
    message_router,
    presence_router,
    signaling_websocket_endpoint,
    user_router,
)
from ..config import AppConfig, get_config
from ..container import ApplicationContainer
from ..middleware import CorrelationMiddleware, register_error_handlers
from ..structured_logging.enhanced_logging_config import get_logger
from .lifespan import lifespan

logger = get_logger(__name__)


def create_app(config: AppConfig | None = None, container: ApplicationContainer | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration to use instead of get_config()
        container: Pre-built container; the lifespan handler initializes it

    Returns:
        FastAPI: The configured application
    """
    config = config or (container.config if container is not None else get_config())

    app = FastAPI(
        title="FarmLink API",
        description="Video consultations between farmers and agricultural specialists",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.container = container or ApplicationContainer(config)

    logger.info(
        "CORS configuration",
        allow_origins=config.cors.allow_origins,
        allow_methods=config.cors.allow_methods,
        allow_headers=config.cors.allow_headers,
        allow_credentials=config.cors.allow_credentials,
        max_age=config.cors.max_age,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors.allow_origins,
        allow_credentials=config.cors.allow_credentials,
        allow_methods=[method.upper() for method in config.cors.allow_methods],
        allow_headers=config.cors.allow_headers,
        expose_headers=["X-Correlation-ID"],
        max_age=config.cors.max_age,
    )
    app.add_middleware(CorrelationMiddleware)

    register_error_handlers(app, include_details=config.logging.environment != "production")

    app.include_router(health_router)
    app.include_router(user_router)
    app.include_router(call_router)
    app.include_router(call_history_router)
    app.include_router(message_router)
    app.include_router(availability_router)
    app.include_router(presence_router)
    app.add_api_websocket_route(config.signaling.path, signaling_websocket_endpoint, name="signaling")

    return app
