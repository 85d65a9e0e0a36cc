"""
Tests for the signaling relay.

Connections are real SignalingConnections over mock sockets so the outbound
queue and writer task are exercised; wait_idle() flushes a connection's
queue before its socket is inspected.
"""

import json
from datetime import UTC, datetime

import pytest
from starlette.websockets import WebSocketState

from farmlink.exceptions import DatabaseError
from farmlink.models.call import CallStatus
from farmlink.realtime import ConnectionState, SignalingRelay
from farmlink.tests.helpers import make_call, make_directory, sent_messages

FIXED_NOW = datetime(2025, 3, 14, 9, 26, 53, 589000, tzinfo=UTC)


def frame(**payload) -> str:
    return json.dumps(payload)


async def flush(*connections) -> None:
    for connection in connections:
        await connection.wait_idle()


@pytest.fixture
def directory():
    return make_directory(make_call(10, farmer_id=1, specialist_id=2), users={1: "John Farmer", 2: "Dr. Maria Garcia"})


@pytest.fixture
def relay(registry, directory) -> SignalingRelay:
    return SignalingRelay(registry, directory, clock=lambda: FIXED_NOW)


@pytest.fixture
async def farmer(relay, open_connection):
    connection = open_connection()
    await relay.handle_message(connection, frame(type="auth", userId=1))
    return connection


@pytest.fixture
async def specialist(relay, open_connection):
    connection = open_connection()
    await relay.handle_message(connection, frame(type="auth", userId=2))
    return connection


class TestIdentityClaims:
    """Auth messages bind identities in the presence registry."""

    @pytest.mark.asyncio
    async def test_auth_registers_identity(self, relay, registry, open_connection):
        connection = open_connection()
        await relay.handle_message(connection, frame(type="auth", userId="7"))

        assert connection.identity == 7
        assert connection.state is ConnectionState.IDENTIFIED
        assert registry.lookup(7) is connection

    @pytest.mark.asyncio
    async def test_auth_sends_nothing_back(self, relay, open_connection):
        connection = open_connection()
        await relay.handle_message(connection, frame(type="auth", userId=7))
        await flush(connection)
        assert sent_messages(connection) == []

    @pytest.mark.asyncio
    async def test_reclaiming_identity_on_new_connection_routes_to_newest(
        self, relay, registry, farmer, specialist, open_connection
    ):
        replacement = open_connection()
        await relay.handle_message(replacement, frame(type="auth", userId=1))

        assert registry.lookup(1) is replacement
        # The superseded connection is left open
        assert farmer.is_open

        await relay.handle_message(specialist, frame(type="offer", targetId=1, callId=10, data="sdp"))
        await flush(farmer, replacement)
        assert sent_messages(farmer) == []
        assert sent_messages(replacement) == [{"type": "offer", "fromId": 2, "callId": 10, "data": "sdp"}]

    @pytest.mark.asyncio
    async def test_stale_close_keeps_newer_registration(self, relay, registry, farmer, open_connection):
        replacement = open_connection()
        await relay.handle_message(replacement, frame(type="auth", userId=1))

        await relay.connection_closed(farmer)

        assert registry.lookup(1) is replacement

    @pytest.mark.asyncio
    async def test_switching_identity_releases_previous_one(self, relay, registry, open_connection):
        connection = open_connection()
        await relay.handle_message(connection, frame(type="auth", userId=1))
        await relay.handle_message(connection, frame(type="auth", userId=5))

        assert registry.lookup(1) is None
        assert registry.lookup(5) is connection

    @pytest.mark.asyncio
    async def test_close_releases_identity(self, relay, registry, farmer):
        await relay.connection_closed(farmer)

        assert registry.lookup(1) is None
        assert farmer.state is ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_close_without_identity_is_harmless(self, relay, registry, open_connection):
        connection = open_connection()
        await relay.connection_closed(connection)
        assert len(registry) == 0


class TestNegotiationForwarding:
    """Offer, answer and ICE candidate relaying."""

    @pytest.mark.asyncio
    async def test_offer_forwarded_to_target_with_sender_identity(self, relay, farmer, specialist):
        await relay.handle_message(specialist, frame(type="offer", targetId=1, callId=10, data="sdp..."))
        await flush(farmer, specialist)

        assert sent_messages(farmer) == [{"type": "offer", "fromId": 2, "callId": 10, "data": "sdp..."}]
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", ["answer", "ice-candidate"])
    async def test_other_kinds_forwarded_verbatim(self, relay, farmer, specialist, kind):
        data = {"candidate": "candidate:1 1 UDP 2122252543 10.0.0.2 54321 typ host", "sdpMLineIndex": 0}
        await relay.handle_message(farmer, frame(type=kind, targetId=2, callId=10, data=data))
        await flush(specialist)

        assert sent_messages(specialist) == [{"type": kind, "fromId": 1, "callId": 10, "data": data}]

    @pytest.mark.asyncio
    async def test_missing_data_forwards_null(self, relay, farmer, specialist):
        await relay.handle_message(specialist, frame(type="answer", targetId=1, callId=10))
        await flush(farmer)
        assert sent_messages(farmer) == [{"type": "answer", "fromId": 2, "callId": 10, "data": None}]

    @pytest.mark.asyncio
    async def test_negotiation_does_not_consult_the_directory(self, relay, directory, farmer, specialist):
        await relay.handle_message(specialist, frame(type="offer", targetId=1, callId=999, data="sdp"))
        await flush(farmer)

        assert sent_messages(farmer)[0]["callId"] == 999
        directory.get_call.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_offer_to_offline_target_is_dropped_silently(self, relay, specialist):
        await relay.handle_message(specialist, frame(type="offer", targetId=99, callId=10, data="sdp"))
        await flush(specialist)
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_offer_to_target_whose_socket_closed_is_dropped(self, relay, farmer, specialist):
        farmer.websocket.client_state = WebSocketState.DISCONNECTED

        await relay.handle_message(specialist, frame(type="offer", targetId=1, callId=10, data="sdp"))
        await flush(farmer)

        farmer.websocket.send_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unidentified_sender_forward_has_no_from_id(self, relay, farmer, open_connection):
        anonymous = open_connection()
        await relay.handle_message(anonymous, frame(type="offer", targetId=1, callId=10, data="sdp"))
        await flush(farmer)

        assert sent_messages(farmer) == [{"type": "offer", "callId": 10, "data": "sdp"}]

    @pytest.mark.asyncio
    async def test_messages_from_one_sender_arrive_in_order(self, relay, farmer, specialist):
        for index in range(20):
            await relay.handle_message(specialist, frame(type="ice-candidate", targetId=1, callId=10, data=index))
        await flush(farmer)

        assert [message["data"] for message in sent_messages(farmer)] == list(range(20))


class TestCallStatusUpdates:
    """Status changes are persisted then fanned out to both participants."""

    @pytest.mark.asyncio
    async def test_status_update_persisted_and_sent_to_both_participants(
        self, relay, directory, farmer, specialist
    ):
        await relay.handle_message(farmer, frame(type="call-status-update", callId=10, status="ongoing"))
        await flush(farmer, specialist)

        directory.update_call_status.assert_awaited_once_with(10, CallStatus.ONGOING)
        expected = {"type": "call-status-update", "callId": 10, "status": "ongoing"}
        assert sent_messages(farmer) == [expected]
        assert sent_messages(specialist) == [expected]

    @pytest.mark.asyncio
    async def test_status_update_reaches_online_participant_when_other_is_offline(
        self, relay, directory, specialist, open_connection
    ):
        anonymous = open_connection()
        await relay.handle_message(anonymous, frame(type="call-status-update", callId=10, status="completed"))
        await flush(specialist, anonymous)

        assert sent_messages(specialist) == [{"type": "call-status-update", "callId": 10, "status": "completed"}]
        assert sent_messages(anonymous) == []

    @pytest.mark.asyncio
    async def test_unknown_call_produces_no_broadcast(self, relay, directory, farmer, specialist):
        await relay.handle_message(farmer, frame(type="call-status-update", callId=404, status="ongoing"))
        await flush(farmer, specialist)

        directory.update_call_status.assert_awaited_once()
        assert sent_messages(farmer) == []
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_invalid_status_is_rejected_before_the_directory(self, relay, directory, farmer, specialist):
        await relay.handle_message(farmer, frame(type="call-status-update", callId=10, status="paused"))
        await flush(farmer, specialist)

        directory.update_call_status.assert_not_awaited()
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_directory_failure_is_contained(self, relay, directory, farmer, specialist):
        directory.update_call_status.side_effect = DatabaseError("database is locked", operation="update_call_status")

        await relay.handle_message(farmer, frame(type="call-status-update", callId=10, status="ongoing"))
        # The connection keeps working afterwards
        await relay.handle_message(farmer, frame(type="offer", targetId=2, callId=10, data="sdp"))
        await flush(farmer, specialist)

        assert sent_messages(specialist) == [{"type": "offer", "fromId": 1, "callId": 10, "data": "sdp"}]

    @pytest.mark.asyncio
    async def test_same_connection_for_both_participants_receives_one_copy(self, registry, open_connection):
        directory = make_directory(make_call(11, farmer_id=3, specialist_id=4))
        relay = SignalingRelay(registry, directory)
        shared = open_connection()
        registry.register(3, shared)
        registry.register(4, shared)

        await relay.handle_message(shared, frame(type="call-status-update", callId=11, status="cancelled"))
        await flush(shared)

        assert sent_messages(shared) == [{"type": "call-status-update", "callId": 11, "status": "cancelled"}]


class TestChatMessages:
    """Chat is persisted, then delivered to the other participant only."""

    @pytest.mark.asyncio
    async def test_chat_persisted_and_delivered_without_echo(self, relay, directory, farmer, specialist):
        await relay.handle_message(farmer, frame(type="chat-message", callId=10, content="Leaves have brown spots"))
        await flush(farmer, specialist)

        directory.create_message.assert_awaited_once_with(10, 1, "Leaves have brown spots", FIXED_NOW)
        assert sent_messages(specialist) == [
            {
                "type": "chat-message",
                "callId": 10,
                "senderId": 1,
                "senderName": "John Farmer",
                "content": "Leaves have brown spots",
                "timestamp": "2025-03-14T09:26:53.589Z",
            }
        ]
        assert sent_messages(farmer) == []

    @pytest.mark.asyncio
    async def test_specialist_reply_goes_to_farmer(self, relay, farmer, specialist):
        await relay.handle_message(specialist, frame(type="chat-message", callId=10, content="Send a photo"))
        await flush(farmer, specialist)

        assert [m["senderName"] for m in sent_messages(farmer)] == ["Dr. Maria Garcia"]
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_chat_stored_when_recipient_offline(self, relay, directory, farmer):
        await relay.handle_message(farmer, frame(type="chat-message", callId=10, content="hello?"))
        await flush(farmer)

        directory.create_message.assert_awaited_once()
        assert sent_messages(farmer) == []

    @pytest.mark.asyncio
    async def test_sender_name_omitted_when_sender_unknown(self, registry, open_connection):
        directory = make_directory(make_call(10, farmer_id=1, specialist_id=2))
        relay = SignalingRelay(registry, directory, clock=lambda: FIXED_NOW)
        farmer, specialist = open_connection(), open_connection()
        await relay.handle_message(farmer, frame(type="auth", userId=1))
        await relay.handle_message(specialist, frame(type="auth", userId=2))

        await relay.handle_message(farmer, frame(type="chat-message", callId=10, content="hi"))
        await flush(specialist)

        assert "senderName" not in sent_messages(specialist)[0]

    @pytest.mark.asyncio
    async def test_chat_before_auth_is_ignored(self, relay, directory, specialist, open_connection):
        anonymous = open_connection()
        await relay.handle_message(anonymous, frame(type="chat-message", callId=10, content="hi"))
        await flush(specialist)

        directory.create_message.assert_not_awaited()
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_chat_for_unknown_call_is_dropped(self, relay, directory, farmer, specialist):
        await relay.handle_message(farmer, frame(type="chat-message", callId=404, content="hi"))
        await flush(specialist)

        directory.create_message.assert_not_awaited()
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_chat_from_non_participant_is_dropped(self, relay, directory, farmer, specialist, open_connection):
        outsider = open_connection()
        await relay.handle_message(outsider, frame(type="auth", userId=9))
        await relay.handle_message(outsider, frame(type="chat-message", callId=10, content="hi"))
        await flush(farmer, specialist)

        directory.create_message.assert_not_awaited()
        assert sent_messages(farmer) == []
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_persistence_failure_prevents_delivery(self, relay, directory, farmer, specialist):
        directory.create_message.side_effect = DatabaseError("disk full", operation="create_message")

        await relay.handle_message(farmer, frame(type="chat-message", callId=10, content="hi"))
        await flush(specialist)

        assert sent_messages(specialist) == []


class TestMalformedAndUnknownInput:
    """Bad frames are logged and skipped; the connection keeps working."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[]",
            '{"userId": 1}',
            '{"type": "offer", "callId": 10}',
            '{"type": "auth", "userId": "x"}',
            pytest.param('{"type": "offer", "data": ' + "[" * 30000 + "]" * 30000 + "}", id="deeply-nested"),
        ],
    )
    async def test_malformed_frame_then_valid_frame(self, relay, farmer, specialist, raw):
        await relay.handle_message(specialist, raw)
        await relay.handle_message(specialist, frame(type="offer", targetId=1, callId=10, data="sdp"))
        await flush(farmer, specialist)

        assert sent_messages(farmer) == [{"type": "offer", "fromId": 2, "callId": 10, "data": "sdp"}]
        assert sent_messages(specialist) == []

    @pytest.mark.asyncio
    async def test_unknown_type_is_ignored(self, relay, directory, farmer, specialist):
        await relay.handle_message(specialist, frame(type="hang-up", targetId=1, callId=10))
        await flush(farmer, specialist)

        assert sent_messages(farmer) == []
        assert sent_messages(specialist) == []
        assert directory.mock_calls == []

    @pytest.mark.asyncio
    async def test_messages_on_closed_connection_are_ignored(self, relay, registry, open_connection):
        connection = open_connection()
        await connection.close()

        await relay.handle_message(connection, frame(type="auth", userId=1))

        assert registry.lookup(1) is None

    @pytest.mark.asyncio
    async def test_unexpected_directory_error_type_is_still_contained(self, registry, open_connection):
        directory = make_directory(make_call(10))
        directory.get_call.side_effect = OSError("connection reset")
        relay = SignalingRelay(registry, directory)
        farmer = open_connection()
        await relay.handle_message(farmer, frame(type="auth", userId=1))

        await relay.handle_message(farmer, frame(type="chat-message", callId=10, content="hi"))

        directory.create_message.assert_not_awaited()


class TestConsultationScenario:
    """Farmer 1 and specialist 2 negotiate call 10 and start it."""

    @pytest.mark.asyncio
    async def test_offer_then_status_update(self, relay, directory, farmer, specialist, open_connection):
        bystander = open_connection()
        await relay.handle_message(bystander, frame(type="auth", userId=3))

        await relay.handle_message(specialist, frame(type="offer", targetId=1, callId=10, data="sdp..."))
        await flush(farmer)
        assert sent_messages(farmer) == [{"type": "offer", "fromId": 2, "callId": 10, "data": "sdp..."}]

        await relay.handle_message(farmer, frame(type="call-status-update", callId=10, status="ongoing"))
        await flush(farmer, specialist, bystander)

        expected = {"type": "call-status-update", "callId": 10, "status": "ongoing"}
        assert sent_messages(farmer)[-1] == expected
        assert sent_messages(specialist) == [expected]
        assert sent_messages(bystander) == []
        assert (await directory.get_call(10)).status == "ongoing"
