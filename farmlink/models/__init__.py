"""
SQLAlchemy models for the call directory.

Importing this package registers every table on Base.metadata.
"""

from .availability import Availability
from .base import Base, metadata
from .call import Call, CallStatus
from .call_history import CallHistory
from .message import Message
from .user import User, UserRole

__all__ = [
    "Availability",
    "Base",
    "Call",
    "CallHistory",
    "CallStatus",
    "Message",
    "User",
    "UserRole",
    "metadata",
]
