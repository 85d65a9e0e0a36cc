"""
End-to-end signaling over the /ws endpoint.

Seeded directory: farmer John (id 1), specialist Maria (id 2), and call 1
between them.
"""

import pytest

from farmlink.tests.helpers import wait_for_presence

pytestmark = pytest.mark.integration


def connect_as(client, user_id):
    websocket = client.websocket_connect("/ws")
    session = websocket.__enter__()
    session.send_json({"type": "auth", "userId": user_id})
    wait_for_presence(client, user_id)
    return websocket, session


class TestSignalingFlow:
    def test_offer_status_and_chat_between_participants(self, client):
        farmer_cm, farmer = connect_as(client, 1)
        specialist_cm, specialist = connect_as(client, 2)
        try:
            specialist.send_json({"type": "offer", "targetId": 1, "callId": 1, "data": "sdp..."})
            assert farmer.receive_json() == {"type": "offer", "fromId": 2, "callId": 1, "data": "sdp..."}

            farmer.send_json({"type": "answer", "targetId": 2, "callId": 1, "data": {"sdp": "answer"}})
            assert specialist.receive_json() == {"type": "answer", "fromId": 1, "callId": 1, "data": {"sdp": "answer"}}

            farmer.send_json({"type": "call-status-update", "callId": 1, "status": "ongoing"})
            expected_status = {"type": "call-status-update", "callId": 1, "status": "ongoing"}
            assert farmer.receive_json() == expected_status
            assert specialist.receive_json() == expected_status

            # A malformed frame is skipped and the session continues
            farmer.send_text("{not json")
            farmer.send_json({"type": "chat-message", "callId": 1, "content": "Leaves have brown spots"})
            chat = specialist.receive_json()
            assert chat["type"] == "chat-message"
            assert chat["callId"] == 1
            assert chat["senderId"] == 1
            assert chat["senderName"] == "John Peterson"
            assert chat["content"] == "Leaves have brown spots"
            assert chat["timestamp"].endswith("Z")
        finally:
            specialist_cm.__exit__(None, None, None)
            farmer_cm.__exit__(None, None, None)

        assert client.get("/api/calls/1").json()["status"] == "ongoing"
        transcript = client.get("/api/messages/1").json()
        assert [m["content"] for m in transcript] == ["Leaves have brown spots"]
        assert transcript[0]["sender"]["fullName"] == "John Peterson"

    def test_presence_released_on_disconnect(self, client):
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "auth", "userId": 1})
            wait_for_presence(client, 1)

        wait_for_presence(client, 1, online=False)

    def test_reconnect_routes_to_newest_connection(self, client):
        old_cm, _old = connect_as(client, 1)
        new_cm, new = connect_as(client, 1)
        specialist_cm, specialist = connect_as(client, 2)
        try:
            # Frames on one connection are handled in order, so this self-addressed
            # offer comes back only once the new auth has taken effect
            new.send_json({"type": "offer", "targetId": 1, "callId": 1, "data": "probe"})
            assert new.receive_json()["data"] == "probe"

            # Closing the superseded socket must not take user 1 offline
            old_cm.__exit__(None, None, None)
            specialist.send_json({"type": "ice-candidate", "targetId": 1, "callId": 1, "data": {"candidate": "c"}})
            assert new.receive_json()["data"] == {"candidate": "c"}
            assert client.get("/api/presence/1").json()["online"] is True
        finally:
            specialist_cm.__exit__(None, None, None)
            new_cm.__exit__(None, None, None)
