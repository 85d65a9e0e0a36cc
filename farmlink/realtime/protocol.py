"""
Signaling protocol: inbound message envelope and its parser.

Every frame is one JSON object with a "type" discriminator. Frames are
validated here, at the transport boundary, into one of the typed message
models below before the relay sees them. Frames whose "type" is not part of
the protocol parse to UnknownMessage so the relay can ignore them.
"""

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..models.call import CallStatus
from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

NEGOTIATION_TYPES = ("offer", "answer", "ice-candidate")


class MessageValidationError(Exception):
    """Raised when an inbound frame is not a well-formed protocol message."""

    def __init__(self, message: str, error_type: str = "validation_error"):
        self.message = message
        self.error_type = error_type
        super().__init__(self.message)


def _reject_bool(value: Any) -> Any:
    # bool is an int subclass; true/false are never valid user or call ids
    if isinstance(value, bool):
        raise ValueError("boolean is not a valid id")
    return value


Id = Annotated[int, BeforeValidator(_reject_bool)]


class InboundMessage(BaseModel):
    """Base class for messages received from a client."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class AuthMessage(InboundMessage):
    """Identity claim. userId may arrive as a number or a numeric string."""

    type: Literal["auth"]
    user_id: Id = Field(..., alias="userId")


class NegotiationMessage(InboundMessage):
    """WebRTC offer, answer or ICE candidate addressed to another identity."""

    type: Literal["offer", "answer", "ice-candidate"]
    target_id: Id = Field(..., alias="targetId")
    call_id: Id = Field(..., alias="callId")
    data: Any = Field(default=None, description="Opaque SDP or ICE payload, forwarded verbatim")


class CallStatusUpdateMessage(InboundMessage):
    type: Literal["call-status-update"]
    call_id: Id = Field(..., alias="callId")
    status: CallStatus


class ChatMessage(InboundMessage):
    type: Literal["chat-message"]
    call_id: Id = Field(..., alias="callId")
    content: str


class UnknownMessage(InboundMessage):
    """A frame with a type this relay does not handle."""

    type: str


SignalingMessage = Annotated[
    AuthMessage | NegotiationMessage | CallStatusUpdateMessage | ChatMessage,
    Field(discriminator="type"),
]

_signaling_message_adapter: TypeAdapter[Any] = TypeAdapter(SignalingMessage)

KNOWN_MESSAGE_TYPES = frozenset({"auth", "call-status-update", "chat-message", *NEGOTIATION_TYPES})


class SignalingMessageParser:
    """
    Parses raw frames into typed signaling messages.

    Enforces a frame size limit and a JSON nesting limit before schema
    validation so oversized or pathological frames are rejected cheaply.
    """

    MAX_MESSAGE_SIZE = 64 * 1024
    MAX_JSON_DEPTH = 16

    def __init__(self, max_message_size: int | None = None, max_json_depth: int | None = None):
        self.max_message_size = self.MAX_MESSAGE_SIZE if max_message_size is None else max_message_size
        self.max_json_depth = self.MAX_JSON_DEPTH if max_json_depth is None else max_json_depth

    def parse(self, raw: str | bytes) -> InboundMessage:
        """
        Parse one frame.

        Args:
            raw: Frame payload as received (text or UTF-8 bytes)

        Returns:
            A typed message, or UnknownMessage for unhandled types

        Raises:
            MessageValidationError: If the frame is oversized, not JSON, not an
                object, has no string "type", or fails field validation
        """
        size = len(raw) if isinstance(raw, bytes) else len(raw.encode("utf-8"))
        if size > self.max_message_size:
            raise MessageValidationError(
                f"Message size {size} bytes exceeds maximum {self.max_message_size} bytes",
                error_type="size_limit_exceeded",
            )

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MessageValidationError(f"Invalid JSON: {e}", error_type="invalid_json") from e
        except RecursionError as e:
            # Nesting deep enough to exhaust the decoder fits well inside the size limit
            raise MessageValidationError(
                "JSON nesting exceeds decoder recursion limit", error_type="depth_limit_exceeded"
            ) from e

        if not isinstance(payload, dict):
            raise MessageValidationError("Message must be a JSON object", error_type="invalid_type")

        depth = self._calculate_depth(payload)
        if depth > self.max_json_depth:
            raise MessageValidationError(
                f"JSON depth {depth} exceeds maximum {self.max_json_depth}",
                error_type="depth_limit_exceeded",
            )

        message_type = payload.get("type")
        if not isinstance(message_type, str):
            raise MessageValidationError("Message must contain a string 'type' field", error_type="missing_type")

        if message_type not in KNOWN_MESSAGE_TYPES:
            return UnknownMessage(type=message_type)

        try:
            return _signaling_message_adapter.validate_python(payload)
        except PydanticValidationError as e:
            raise MessageValidationError(
                f"Invalid '{message_type}' message: {e.error_count()} validation error(s)",
                error_type="schema_validation_failed",
            ) from e

    def _calculate_depth(self, obj: Any, current_depth: int = 0) -> int:
        if current_depth > self.max_json_depth:
            return current_depth
        if isinstance(obj, dict):
            if not obj:
                return current_depth
            return max(self._calculate_depth(v, current_depth + 1) for v in obj.values())
        if isinstance(obj, list):
            if not obj:
                return current_depth
            return max(self._calculate_depth(item, current_depth + 1) for item in obj)
        return current_depth
