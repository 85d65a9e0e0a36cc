"""Pydantic schemas for the FarmLink REST API."""

from .availability import AvailabilityCreate, AvailabilityRead
from .call import CallCreate, CallRead, CallStatusUpdate, CallWithParticipants
from .call_history import CallHistoryCreate, CallHistoryRead
from .message import MessageRead, MessageWithSender
from .user import UserRead, UserSummary

__all__ = [
    "AvailabilityCreate",
    "AvailabilityRead",
    "CallCreate",
    "CallHistoryCreate",
    "CallHistoryRead",
    "CallRead",
    "CallStatusUpdate",
    "CallWithParticipants",
    "MessageRead",
    "MessageWithSender",
    "UserRead",
    "UserSummary",
]
