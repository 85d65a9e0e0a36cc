"""Test doubles shared across the unit and integration suites."""

import time
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, Mock

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from farmlink.directory import CallDirectory
from farmlink.realtime import SignalingConnection


def make_mock_websocket() -> Mock:
    """A WebSocket double that reports itself connected and records sends."""
    websocket = Mock(spec=WebSocket)
    websocket.accept = AsyncMock()
    websocket.close = AsyncMock()
    websocket.send_json = AsyncMock()
    websocket.client_state = WebSocketState.CONNECTED
    websocket.application_state = WebSocketState.CONNECTED
    return websocket


def sent_messages(connection: SignalingConnection) -> list[dict[str, Any]]:
    """Messages written to a connection's socket so far."""
    return [call.args[0] for call in connection.websocket.send_json.await_args_list]


def make_call(call_id: int = 10, farmer_id: int = 1, specialist_id: int = 2, status: str = "scheduled") -> Any:
    return SimpleNamespace(id=call_id, farmer_id=farmer_id, specialist_id=specialist_id, status=status)


def make_directory(*calls: Any, users: dict[int, str] | None = None) -> AsyncMock:
    """
    A CallDirectory mock backed by a dict of calls.

    update_call_status mutates the stored call like the real directory does.
    """
    store = {call.id: call for call in calls}
    names = users or {}
    directory = AsyncMock(spec=CallDirectory)

    async def get_call(call_id: int) -> Any:
        return store.get(call_id)

    async def update_call_status(call_id: int, status: Any) -> Any:
        call = store.get(call_id)
        if call is None:
            return None
        call.status = getattr(status, "value", status)
        return call

    async def get_user(user_id: int) -> Any:
        if user_id not in names:
            return None
        return SimpleNamespace(id=user_id, full_name=names[user_id])

    async def create_message(call_id: int, sender_id: int, content: str, timestamp: Any) -> Any:
        return SimpleNamespace(id=1, call_id=call_id, sender_id=sender_id, content=content, timestamp=timestamp)

    directory.get_call.side_effect = get_call
    directory.update_call_status.side_effect = update_call_status
    directory.get_user.side_effect = get_user
    directory.create_message.side_effect = create_message
    return directory


def wait_for_presence(client: Any, user_id: int, online: bool = True, timeout: float = 2.0) -> None:
    """Poll the presence endpoint until user_id is in the wanted state."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if client.get(f"/api/presence/{user_id}").json()["online"] is online:
            return
        time.sleep(0.01)
    raise AssertionError(f"user {user_id} never became {'online' if online else 'offline'}")
