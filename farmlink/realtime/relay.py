"""
Signaling relay: classifies inbound messages and routes them.

The relay owns no sockets. It reads frames handed to it by the transport,
updates the presence registry, consults the call directory and queues
outbound messages on the connections the registry resolves. Nothing it does
is reported back to the sender; every failure is logged and the connection
carries on.
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from ..directory.call_directory import CallDirectory
from ..models.call import CallStatus
from ..structured_logging.enhanced_logging_config import get_logger, log_exception_once
from .connection import ConnectionState, SignalingConnection
from .message_builders import build_call_status_update, build_chat_message, build_negotiation_forward
from .presence_registry import PresenceRegistry
from .protocol import (
    AuthMessage,
    CallStatusUpdateMessage,
    ChatMessage,
    InboundMessage,
    MessageValidationError,
    NegotiationMessage,
    SignalingMessageParser,
    UnknownMessage,
)

logger = get_logger(__name__)

MessageHandler = Callable[[SignalingConnection, Any], Awaitable[None]]


def utc_now() -> datetime:
    return datetime.now(UTC)


class SignalingRelay:
    """Routes signaling messages between connections."""

    def __init__(
        self,
        registry: PresenceRegistry,
        directory: CallDirectory,
        parser: SignalingMessageParser | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.registry = registry
        self.directory = directory
        self.parser = parser or SignalingMessageParser()
        self._clock = clock
        self._handlers: dict[type[InboundMessage], MessageHandler] = {
            AuthMessage: self._handle_auth,
            NegotiationMessage: self._handle_negotiation,
            CallStatusUpdateMessage: self._handle_call_status_update,
            ChatMessage: self._handle_chat_message,
            UnknownMessage: self._handle_unknown,
        }

    async def handle_message(self, connection: SignalingConnection, raw: str | bytes) -> None:
        """
        Process one inbound frame from connection.

        Never raises for bad input or directory failures, so one bad message
        cannot end the session.
        """
        if connection.state is ConnectionState.CLOSED:
            logger.debug("Ignoring message on closed connection", connection_id=connection.connection_id)
            return

        try:
            message = self.parser.parse(raw)
        except MessageValidationError as e:
            logger.warning(
                "Malformed signaling message",
                connection_id=connection.connection_id,
                identity=connection.identity,
                error_type=e.error_type,
                error=e.message,
            )
            return

        handler = self._handlers[type(message)]
        await handler(connection, message)

    async def connection_closed(self, connection: SignalingConnection) -> None:
        """Release the connection's registry entry, if it still owns one, and stop it."""
        identity = connection.identity
        await connection.close()
        if identity is None:
            return
        removed = self.registry.unregister(identity, connection)
        logger.info(
            "Signaling connection closed",
            connection_id=connection.connection_id,
            identity=identity,
            presence_released=removed,
            dropped_messages=connection.dropped_messages,
        )

    async def _handle_auth(self, connection: SignalingConnection, message: AuthMessage) -> None:
        previous_identity = connection.identify(message.user_id)
        if previous_identity is not None and previous_identity != message.user_id:
            self.registry.unregister(previous_identity, connection)

        superseded = self.registry.register(message.user_id, connection)
        if superseded is not None:
            # The older connection stays open; it simply no longer receives traffic for this identity
            logger.info(
                "Identity re-registered on a new connection",
                identity=message.user_id,
                connection_id=connection.connection_id,
                superseded_connection_id=superseded.connection_id,
            )
        else:
            logger.info("Identity registered", identity=message.user_id, connection_id=connection.connection_id)

    async def _handle_negotiation(self, connection: SignalingConnection, message: NegotiationMessage) -> None:
        target = self.registry.lookup(message.target_id)
        if target is None or not target.is_open:
            logger.debug(
                "Negotiation target not connected, dropping",
                message_type=message.type,
                target_id=message.target_id,
                call_id=message.call_id,
                from_id=connection.identity,
            )
            return

        target.deliver(build_negotiation_forward(message.type, connection.identity, message.call_id, message.data))
        logger.debug(
            "Negotiation message forwarded",
            message_type=message.type,
            from_id=connection.identity,
            target_id=message.target_id,
            call_id=message.call_id,
        )

    async def _handle_call_status_update(
        self, connection: SignalingConnection, message: CallStatusUpdateMessage
    ) -> None:
        try:
            updated = await self.directory.update_call_status(message.call_id, message.status)
            call = await self.directory.get_call(message.call_id) if updated is not None else None
        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: directory failures must not end the session
            log_exception_once(
                logger,
                "error",
                "Call directory failure during status update",
                exc=e,
                call_id=message.call_id,
                status=message.status.value,
                connection_id=connection.connection_id,
                exc_info=True,
            )
            return

        if call is None:
            logger.debug("Status update for unknown call, dropping", call_id=message.call_id)
            return

        status = CallStatus(call.status).value
        payload = build_call_status_update(call.id, status)
        delivered_to: set[str] = set()
        for participant_id in (call.farmer_id, call.specialist_id):
            target = self.registry.lookup(participant_id)
            if target is None or not target.is_open or target.connection_id in delivered_to:
                continue
            target.deliver(payload)
            delivered_to.add(target.connection_id)

        logger.info(
            "Call status update relayed",
            call_id=call.id,
            status=status,
            from_id=connection.identity,
            recipients=len(delivered_to),
        )

    async def _handle_chat_message(self, connection: SignalingConnection, message: ChatMessage) -> None:
        sender_id = connection.identity
        if sender_id is None:
            logger.debug("Chat message before identity claim, ignoring", connection_id=connection.connection_id)
            return

        try:
            call = await self.directory.get_call(message.call_id)
            if call is None:
                logger.debug("Chat message for unknown call, dropping", call_id=message.call_id, sender_id=sender_id)
                return
            # Only the two participants may post to a call; anything else is neither stored nor delivered
            if sender_id not in (call.farmer_id, call.specialist_id):
                logger.warning("Chat message from non-participant, dropping", call_id=call.id, sender_id=sender_id)
                return

            timestamp = self._clock()
            await self.directory.create_message(call.id, sender_id, message.content, timestamp)
            sender = await self.directory.get_user(sender_id)
        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: directory failures must not end the session
            log_exception_once(
                logger,
                "error",
                "Call directory failure during chat message",
                exc=e,
                call_id=message.call_id,
                sender_id=sender_id,
                exc_info=True,
            )
            return

        recipient_id = call.specialist_id if sender_id == call.farmer_id else call.farmer_id
        recipient = self.registry.lookup(recipient_id)
        if recipient is None or not recipient.is_open:
            logger.debug("Chat recipient not connected, stored only", call_id=call.id, recipient_id=recipient_id)
            return

        sender_name = sender.full_name if sender is not None else None
        recipient.deliver(build_chat_message(call.id, sender_id, sender_name, message.content, timestamp))

    async def _handle_unknown(self, connection: SignalingConnection, message: UnknownMessage) -> None:
        logger.debug("Ignoring unknown message type", message_type=message.type, connection_id=connection.connection_id)
