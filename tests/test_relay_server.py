import asyncio
import json

import pytest
from websockets.asyncio.client import connect

from pairup.network import protocol
from pairup.network.protocol import encode_event
from pairup.relay_server import RelayServer

TIMEOUT = 5.0


async def recv_event(websocket, name, skipped=None):
    """Reads frames until one named name arrives and returns its data."""
    while True:
        raw = await asyncio.wait_for(websocket.recv(), TIMEOUT)
        frame = json.loads(raw)
        if frame["type"] == name:
            return frame.get("data")
        if skipped is not None:
            skipped.append(frame["type"])


async def http_get(port, path):
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    writer.write(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())
    await writer.drain()
    head = await asyncio.wait_for(reader.readuntil(b"\r\n\r\n"), TIMEOUT)
    lines = head.decode().split("\r\n")
    status = int(lines[0].split()[1])
    headers = dict(line.split(": ", 1) for line in lines[1:] if line)
    body = await reader.readexactly(int(headers.get("Content-Length", "0")))
    writer.close()
    return status, headers, body


@pytest.mark.asyncio
async def test_chat_over_websockets():
    relay = RelayServer()
    async with relay.serve("127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        uri = f"ws://127.0.0.1:{port}/"

        async with connect(uri) as ws_a, connect(uri) as ws_b:
            id_a = await recv_event(ws_a, protocol.USER_ID)
            id_b = await recv_event(ws_b, protocol.USER_ID)

            await ws_a.send(encode_event(protocol.FIND_PARTNER))
            await recv_event(ws_a, protocol.WAITING)

            await ws_b.send(encode_event(protocol.FIND_PARTNER))
            found_a = await recv_event(ws_a, protocol.PARTNER_FOUND)
            found_b = await recv_event(ws_b, protocol.PARTNER_FOUND)
            assert found_a["partnerId"] == id_b and found_b["partnerId"] == id_a
            assert found_a["roomId"] == found_b["roomId"]
            assert (found_a["initiator"], found_b["initiator"]) == (False, True)

            room_id = found_a["roomId"]
            await ws_a.send("garbage")
            await ws_a.send(encode_event(protocol.SEND_MESSAGE, {"roomId": room_id, "message": "hi"}))
            message = await recv_event(ws_b, protocol.RECEIVE_MESSAGE)
            assert message["senderId"] == id_a
            assert message["content"] == "hi"

            await ws_b.close()
            skipped = []
            assert await recv_event(ws_a, protocol.PARTNER_DISCONNECTED, skipped) is None
            assert protocol.RECEIVE_MESSAGE not in skipped

            await ws_a.send(encode_event(protocol.FIND_PARTNER, ["music"]))
            await recv_event(ws_a, protocol.WAITING)



@pytest.mark.asyncio
async def test_health_check():
    relay = RelayServer()
    async with relay.serve("127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]

        status, headers, body = await http_get(port, "/health")
        assert status == 200
        assert headers["Content-Type"] == "application/json"
        payload = json.loads(body)
        assert payload["status"] == "ok"
        assert payload["online"] == 0

        status, _, _ = await http_get(port, "/elsewhere")
        assert status == 404
