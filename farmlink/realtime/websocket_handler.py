"""
Transport side of the signaling relay.

handle_signaling_connection() owns one accepted WebSocket from accept to
close: it wraps it in a SignalingConnection, feeds every received frame to
the relay in receipt order, and tells the relay when the socket is gone.
"""

import uuid

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from ..structured_logging.enhanced_logging_config import (
    bind_request_context,
    clear_request_context,
    get_logger,
)
from .connection import DEFAULT_OUTBOUND_QUEUE_SIZE, SignalingConnection
from .relay import SignalingRelay

logger = get_logger(__name__)


async def _handle_signaling_message_loop(
    websocket: WebSocket, connection: SignalingConnection, relay: SignalingRelay
) -> None:
    """Receive frames until the client disconnects."""
    while True:
        try:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                logger.info("Signaling client disconnected", code=frame.get("code"), identity=connection.identity)
                break

            raw = frame.get("text")
            if raw is None:
                raw = frame.get("bytes")
            if raw is None:
                continue

            await relay.handle_message(connection, raw)

        except WebSocketDisconnect:
            logger.info("Signaling client disconnected", identity=connection.identity)
            break

        except RuntimeError as e:
            error_message = str(e)
            if "not connected" in error_message or 'Need to call "accept" first' in error_message:
                logger.warning("Signaling connection lost", identity=connection.identity, error=error_message)
                break
            raise

        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: one failing message must not end the session
            logger.error(
                "Error handling signaling message",
                identity=connection.identity,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )


async def handle_signaling_connection(
    websocket: WebSocket,
    relay: SignalingRelay,
    *,
    outbound_queue_size: int = DEFAULT_OUTBOUND_QUEUE_SIZE,
) -> None:
    """
    Serve one signaling WebSocket until it closes.

    Args:
        websocket: The not yet accepted WebSocket
        relay: Relay that routes this connection's messages
        outbound_queue_size: Pending outbound messages allowed before dropping
    """
    await websocket.accept()

    connection = SignalingConnection(websocket, outbound_queue_size=outbound_queue_size)
    correlation_id = websocket.headers.get("x-correlation-id") or str(uuid.uuid4())
    remote_addr = websocket.client.host if websocket.client else "unknown"
    bind_request_context(
        correlation_id=correlation_id,
        connection_id=connection.connection_id,
        connection_type="websocket",
        remote_addr=remote_addr,
    )
    logger.info("Signaling connection accepted", path=websocket.url.path)

    connection.start_writer()
    try:
        await _handle_signaling_message_loop(websocket, connection, relay)
    finally:
        await relay.connection_closed(connection)
        clear_request_context()
