"""REST and WebSocket routes for the FarmLink server."""

from .availability import availability_router
from .call_history import call_history_router
from .calls import call_router
from .health import health_router
from .messages import message_router
from .signaling import presence_router, signaling_websocket_endpoint
from .users import user_router

__all__ = [
    "availability_router",
    "call_history_router",
    "call_router",
    "health_router",
    "message_router",
    "presence_router",
    "signaling_websocket_endpoint",
    "user_router",
]
