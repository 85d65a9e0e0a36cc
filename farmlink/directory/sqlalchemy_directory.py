"""
SQLAlchemy implementation of the call directory.

Each operation runs in its own short-lived AsyncSession; returned ORM
objects are detached (expire_on_commit=False) and safe to read afterwards.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..error_types import ErrorMessages
from ..exceptions import DatabaseError, ValidationError, create_error_context
from ..models import Availability, Base, Call, CallHistory, CallStatus, Message, User, UserRole
from ..schemas import AvailabilityCreate, CallCreate, CallHistoryCreate
from ..schemas.common import to_naive_utc
from ..structured_logging.enhanced_logging_config import get_logger
from .call_directory import CallDirectory

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def _coerce_status(status: CallStatus | str) -> CallStatus:
    if isinstance(status, CallStatus):
        return status
    try:
        return CallStatus(status)
    except ValueError as e:
        raise ValidationError(
            f"Invalid call status: {status}",
            field="status",
            value=status,
            user_friendly=ErrorMessages.INVALID_CALL_STATUS,
        ) from e


class SqlAlchemyCallDirectory(CallDirectory):
    """Call directory backed by an async SQLAlchemy session factory."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    @asynccontextmanager
    async def _session(self, operation: str, table: str, **metadata: Any) -> AsyncIterator[AsyncSession]:
        """Open a session; SQLAlchemy failures are re-raised as DatabaseError."""
        try:
            async with self._session_maker() as session:
                yield session
        except SQLAlchemyError as e:
            context = create_error_context()
            context.metadata.update({"operation": operation, **metadata})
            raise DatabaseError(
                f"Database error during {operation}: {e}",
                context=context,
                operation=operation,
                table=table,
                user_friendly="Failed to access the call directory",
            ) from e

    async def _add(self, instance: ModelT, operation: str) -> ModelT:
        async with self._session(operation, instance.__tablename__) as session:
            session.add(instance)
            await session.commit()
            await session.refresh(instance)
        return instance

    async def get_call(self, call_id: int) -> Call | None:
        async with self._session("get_call", "calls", call_id=call_id) as session:
            return await session.get(Call, call_id)

    async def update_call_status(self, call_id: int, status: CallStatus | str) -> Call | None:
        new_status = _coerce_status(status)
        async with self._session("update_call_status", "calls", call_id=call_id) as session:
            call = await session.get(Call, call_id)
            if call is None:
                return None
            previous = call.status
            call.status = new_status.value
            await session.commit()
            await session.refresh(call)
        logger.info("Call status updated", call_id=call_id, previous_status=previous, status=new_status.value)
        return call

    async def create_message(self, call_id: int, sender_id: int, content: str, timestamp: datetime) -> Message:
        message = Message(call_id=call_id, sender_id=sender_id, content=content, timestamp=to_naive_utc(timestamp))
        return await self._add(message, "create_message")

    async def get_user(self, user_id: int) -> User | None:
        async with self._session("get_user", "users", user_id=user_id) as session:
            return await session.get(User, user_id)

    async def get_users_by_role(self, role: UserRole | str) -> list[User]:
        role_value = role.value if isinstance(role, UserRole) else role
        async with self._session("get_users_by_role", "users", role=role_value) as session:
            result = await session.execute(select(User).where(User.role == role_value).order_by(User.id))
            return list(result.scalars().all())

    async def create_call(self, call: CallCreate) -> Call:
        record = Call(
            farmer_id=call.farmer_id,
            specialist_id=call.specialist_id,
            scheduled_time=call.scheduled_time,
            duration=call.duration,
            status=call.status.value,
            topic=call.topic,
            notes=call.notes,
        )
        record = await self._add(record, "create_call")
        logger.info(
            "Call scheduled", call_id=record.id, farmer_id=record.farmer_id, specialist_id=record.specialist_id
        )
        return record

    async def _calls_where(self, operation: str, clause: Any) -> list[Call]:
        async with self._session(operation, "calls") as session:
            result = await session.execute(select(Call).where(clause).order_by(Call.scheduled_time, Call.id))
            return list(result.scalars().all())

    async def get_calls_by_farmer(self, farmer_id: int) -> list[Call]:
        return await self._calls_where("get_calls_by_farmer", Call.farmer_id == farmer_id)

    async def get_calls_by_specialist(self, specialist_id: int) -> list[Call]:
        return await self._calls_where("get_calls_by_specialist", Call.specialist_id == specialist_id)

    async def get_messages_by_call(self, call_id: int) -> list[Message]:
        async with self._session("get_messages_by_call", "messages", call_id=call_id) as session:
            result = await session.execute(
                select(Message).where(Message.call_id == call_id).order_by(Message.timestamp, Message.id)
            )
            return list(result.scalars().all())

    async def create_call_history(self, entry: CallHistoryCreate) -> CallHistory:
        record = CallHistory(
            call_id=entry.call_id,
            start_time=entry.start_time,
            end_time=entry.end_time,
            duration=entry.duration,
            feedback=entry.feedback,
            feedback_notes=entry.feedback_notes,
        )
        return await self._add(record, "create_call_history")

    async def get_call_history_by_call(self, call_id: int) -> CallHistory | None:
        async with self._session("get_call_history_by_call", "call_history", call_id=call_id) as session:
            result = await session.execute(
                select(CallHistory).where(CallHistory.call_id == call_id).order_by(CallHistory.id).limit(1)
            )
            return result.scalar_one_or_none()

    async def create_availability(self, window: AvailabilityCreate) -> Availability:
        record = Availability(
            specialist_id=window.specialist_id,
            day_of_week=window.day_of_week,
            start_time=window.start_time,
            end_time=window.end_time,
        )
        return await self._add(record, "create_availability")

    async def get_availability_by_specialist(self, specialist_id: int) -> list[Availability]:
        async with self._session("get_availability_by_specialist", "availability", specialist_id=specialist_id) as s:
            result = await s.execute(
                select(Availability)
                .where(Availability.specialist_id == specialist_id)
                .order_by(Availability.day_of_week, Availability.start_time)
            )
            return list(result.scalars().all())
