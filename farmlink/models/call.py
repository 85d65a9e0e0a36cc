"""Scheduled consultation calls between a farmer and a specialist."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CallStatus(str, Enum):
    """Closed set of call lifecycle states."""

    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Call(Base):
    """
    A call record.

    Created through the REST API; the signaling relay only ever changes
    its status and never deletes it.
    """

    __tablename__ = "calls"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    farmer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    specialist_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    scheduled_time: Mapped[datetime] = mapped_column(DateTime(), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    status: Mapped[str] = mapped_column(String(length=32), nullable=False, default=CallStatus.SCHEDULED.value)
    topic: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Call(id={self.id}, farmer_id={self.farmer_id}, "
            f"specialist_id={self.specialist_id}, status={self.status!r})>"
        )
