"""
Call Directory interface.

The durable record of users, calls, chat messages, call history and
specialist availability. The signaling relay only depends on the first
four methods; the REST API uses the rest.

Lookups never raise for a missing row, they return None (or an empty list).
Storage failures surface as farmlink.exceptions.DatabaseError.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from ..models import Availability, Call, CallHistory, CallStatus, Message, User, UserRole
from ..schemas import AvailabilityCreate, CallCreate, CallHistoryCreate


class CallDirectory(ABC):
    """Abstract call directory."""

    # Relay contract

    @abstractmethod
    async def get_call(self, call_id: int) -> Call | None:
        """Return the call record, or None when it does not exist."""

    @abstractmethod
    async def update_call_status(self, call_id: int, status: CallStatus | str) -> Call | None:
        """
        Set a call's status.

        Returns:
            The updated call, or None when the call does not exist

        Raises:
            ValidationError: If status is outside the closed status set
        """

    @abstractmethod
    async def create_message(self, call_id: int, sender_id: int, content: str, timestamp: datetime) -> Message:
        """Persist a chat message with the server-assigned timestamp."""

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None:
        """Return the user, or None when it does not exist."""

    # REST contract

    @abstractmethod
    async def get_users_by_role(self, role: UserRole | str) -> list[User]:
        """All users holding the given role."""

    @abstractmethod
    async def create_call(self, call: CallCreate) -> Call:
        """Schedule a new call."""

    @abstractmethod
    async def get_calls_by_farmer(self, farmer_id: int) -> list[Call]:
        """Calls booked by a farmer, ordered by scheduled time."""

    @abstractmethod
    async def get_calls_by_specialist(self, specialist_id: int) -> list[Call]:
        """Calls assigned to a specialist, ordered by scheduled time."""

    @abstractmethod
    async def get_messages_by_call(self, call_id: int) -> list[Message]:
        """Chat transcript of a call in timestamp order."""

    @abstractmethod
    async def create_call_history(self, entry: CallHistoryCreate) -> CallHistory:
        """Record the outcome of a call."""

    @abstractmethod
    async def get_call_history_by_call(self, call_id: int) -> CallHistory | None:
        """History entry for a call, or None."""

    @abstractmethod
    async def create_availability(self, window: AvailabilityCreate) -> Availability:
        """Add a weekly availability window."""

    @abstractmethod
    async def get_availability_by_specialist(self, specialist_id: int) -> list[Availability]:
        """A specialist's availability windows ordered by day then start time."""
