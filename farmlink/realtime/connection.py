"""
Signaling connection handle.

A SignalingConnection wraps one accepted WebSocket for its lifetime. Sends
never block the relay: deliver() enqueues onto a bounded per-connection
queue that a writer task drains onto the socket. When the queue is full or
the socket is no longer open the message is dropped.
"""

import asyncio
import contextlib
import time
import uuid
from enum import Enum
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect, WebSocketState

from ..structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_OUTBOUND_QUEUE_SIZE = 256


class ConnectionState(str, Enum):
    """Per-connection lifecycle: UNAUTHENTICATED -> IDENTIFIED -> CLOSED."""

    UNAUTHENTICATED = "unauthenticated"
    IDENTIFIED = "identified"
    CLOSED = "closed"


class SignalingConnection:
    """One live signaling socket plus its claimed identity and outbound queue."""

    def __init__(
        self,
        websocket: WebSocket,
        *,
        outbound_queue_size: int = DEFAULT_OUTBOUND_QUEUE_SIZE,
        connection_id: str | None = None,
    ) -> None:
        self.websocket = websocket
        self.connection_id = connection_id or uuid.uuid4().hex
        self.identity: int | None = None
        self.state = ConnectionState.UNAUTHENTICATED
        self.established_at = time.time()
        self._outbound: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=outbound_queue_size)
        self._writer_task: asyncio.Task[None] | None = None
        self.dropped_messages = 0

    def __repr__(self) -> str:
        return f"<SignalingConnection id={self.connection_id} identity={self.identity} state={self.state.value}>"

    @property
    def is_open(self) -> bool:
        """True while the connection is not closed and the socket is still connected both ways."""
        if self.state is ConnectionState.CLOSED:
            return False
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state != WebSocketState.DISCONNECTED
        )

    def identify(self, identity: int) -> int | None:
        """
        Record the identity claimed on this connection.

        Returns:
            The identity previously claimed on this connection, if any
        """
        previous = self.identity
        self.identity = identity
        if self.state is not ConnectionState.CLOSED:
            self.state = ConnectionState.IDENTIFIED
        return previous

    def deliver(self, message: dict[str, Any]) -> bool:
        """
        Queue a message for sending without waiting for the socket.

        Returns:
            True if the message was queued, False if it was dropped
        """
        if not self.is_open:
            self.dropped_messages += 1
            logger.debug(
                "Dropping message for connection that is not open",
                connection_id=self.connection_id,
                message_type=message.get("type"),
            )
            return False
        try:
            self._outbound.put_nowait(message)
        except asyncio.QueueFull:
            self.dropped_messages += 1
            logger.warning(
                "Outbound queue full, dropping message",
                connection_id=self.connection_id,
                identity=self.identity,
                message_type=message.get("type"),
                queue_size=self._outbound.maxsize,
            )
            return False
        return True

    def start_writer(self) -> None:
        if self._writer_task is None:
            self._writer_task = asyncio.create_task(
                self._writer_loop(), name=f"signaling-writer-{self.connection_id}"
            )

    async def _writer_loop(self) -> None:
        while True:
            message = await self._outbound.get()
            try:
                if not self.is_open:
                    self.dropped_messages += 1
                    continue
                await self.websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                # The socket went away under us; the receive loop will observe the close
                self.dropped_messages += 1
                logger.debug(
                    "Send failed on signaling connection",
                    connection_id=self.connection_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
            finally:
                self._outbound.task_done()

    async def wait_idle(self) -> None:
        """Wait until every queued message has been sent or dropped."""
        await self._outbound.join()

    async def close(self) -> None:
        """Mark the connection closed and stop its writer. Idempotent."""
        self.state = ConnectionState.CLOSED
        task, self._writer_task = self._writer_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
