"""Pydantic schemas for chat messages."""

from pydantic import Field

from .common import CamelModel, UtcDatetime
from .user import UserSummary


class MessageRead(CamelModel):
    id: int = Field(..., description="Message ID")
    call_id: int
    sender_id: int
    content: str
    timestamp: UtcDatetime


class MessageWithSender(MessageRead):
    sender: UserSummary | None = None
