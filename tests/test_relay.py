import asyncio

import pytest
from starlette.websockets import WebSocketDisconnect

from medfinder.exceptions import TransportError
from medfinder.services.relay import ConnectionManager, parse_envelope


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"data": 1}', '{"type": 5}'])
def test_parse_envelope_rejects_malformed(raw):
    with pytest.raises(TransportError):
        parse_envelope(raw)


def test_parse_envelope_rejects_undecodable_bytes():
    with pytest.raises(TransportError):
        parse_envelope(b"\xff\xfe{")


def test_parse_envelope_accepts_utf8_bytes():
    assert parse_envelope(b'{"type": "chat_message", "data": "bin"}')["data"] == "bin"


def test_parse_envelope_accepts_object():
    assert parse_envelope('{"type": "chat_message", "data": {"a": 1}}') == {
        "type": "chat_message",
        "data": {"a": 1},
    }


def test_broadcast_reaches_every_client(client):
    with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
        first.send_json({"type": "chat_message", "data": {"message": "hi"}})
        for ws in (first, second):
            frame = ws.receive_json()
            assert frame["type"] == "chat_message"
            assert frame["data"] == {"message": "hi"}
            assert frame["timestamp"]


def test_malformed_frame_keeps_channel_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("{broken")
        ws.send_json({"type": "typing"})
        ws.send_json({"type": "chat_message", "data": "still here"})
        assert ws.receive_json()["data"] == "still here"


def test_binary_frames_are_relayed(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_bytes(b'{"type": "chat_message", "data": "bin"}')
        assert ws.receive_json()["data"] == "bin"


def test_undecodable_binary_frame_keeps_channel_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_bytes(b"\xff\xfe")
        ws.send_json({"type": "chat_message", "data": "after bytes"})
        assert ws.receive_json()["data"] == "after bytes"


class _Socket:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent = []

    async def send_json(self, payload):
        if self.fail:
            raise WebSocketDisconnect(code=1006)
        self.sent.append(payload)


def test_failed_send_drops_only_that_socket():
    relay = ConnectionManager()
    good, bad = _Socket(), _Socket(fail=True)
    relay.active.extend([bad, good])

    delivered = asyncio.run(relay.broadcast({"type": "chat_message", "data": 1}))

    assert delivered == 1
    assert relay.active == [good]
    assert good.sent == [{"type": "chat_message", "data": 1}]
