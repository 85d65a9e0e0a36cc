"""
Real-time signaling for FarmLink calls.

Presence registry, connection handles, the inbound protocol and the relay
that routes WebRTC negotiation, call status and chat between participants.
"""

from .connection import ConnectionState, SignalingConnection
from .presence_registry import PresenceRegistry
from .protocol import MessageValidationError, SignalingMessageParser
from .relay import SignalingRelay
from .websocket_handler import handle_signaling_connection

__all__ = [
    "ConnectionState",
    "MessageValidationError",
    "PresenceRegistry",
    "SignalingConnection",
    "SignalingMessageParser",
    "SignalingRelay",
    "handle_signaling_connection",
]
