"""
Signaling WebSocket endpoint and presence lookup.

The WebSocket route is mounted by the app factory at the configured
signaling path (SIGNALING_PATH, "/ws" by default), so it is a plain
function rather than a decorated router route.
"""

from fastapi import APIRouter, WebSocket, status

from ..dependencies import PresenceRegistryDep
from ..realtime import PresenceRegistry, handle_signaling_connection
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

presence_router = APIRouter(prefix="/api/presence", tags=["presence"])


async def signaling_websocket_endpoint(websocket: WebSocket) -> None:
    """Serve one signaling connection through the container's relay."""
    container = getattr(websocket.app.state, "container", None)
    relay = container.signaling_relay if container is not None else None
    if relay is None:
        logger.error("Signaling connection rejected, relay not initialized")
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return

    await handle_signaling_connection(
        websocket,
        relay,
        outbound_queue_size=container.config.signaling.outbound_queue_size,
    )


@presence_router.get("/{user_id}")
async def get_presence(user_id: int, registry: PresenceRegistry = PresenceRegistryDep) -> dict[str, int | bool]:
    """Whether a user currently has a live signaling connection."""
    connection = registry.lookup(user_id)
    return {"user_id": user_id, "online": connection is not None and connection.is_open}
