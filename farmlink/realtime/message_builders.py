"""Outbound message construction for the signaling relay."""

from datetime import datetime
from typing import Any

from ..schemas.common import format_utc


def build_negotiation_forward(message_type: str, from_id: int | None, call_id: int, data: Any) -> dict[str, Any]:
    """
    Forwarded offer/answer/ice-candidate.

    fromId is left out when the sender has not claimed an identity yet.
    """
    message: dict[str, Any] = {"type": message_type}
    if from_id is not None:
        message["fromId"] = from_id
    message["callId"] = call_id
    message["data"] = data
    return message


def build_call_status_update(call_id: int, status: str) -> dict[str, Any]:
    return {"type": "call-status-update", "callId": call_id, "status": status}


def build_chat_message(
    call_id: int, sender_id: int, sender_name: str | None, content: str, timestamp: datetime
) -> dict[str, Any]:
    """Chat delivery; senderName is left out when the sender has no directory entry."""
    message: dict[str, Any] = {"type": "chat-message", "callId": call_id, "senderId": sender_id}
    if sender_name is not None:
        message["senderName"] = sender_name
    message["content"] = content
    message["timestamp"] = format_utc(timestamp)
    return message
