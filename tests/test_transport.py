import asyncio

import pytest

from pairup.network import protocol
from pairup.network.transport import TransportLayer
from pairup.relay_server import RelayServer


@pytest.mark.asyncio
async def test_listener_survives_failing_handler_and_stops_on_disconnect():
    relay = RelayServer()
    async with relay.serve("127.0.0.1", 0) as server:
        port = server.sockets[0].getsockname()[1]
        transport = TransportLayer(f"ws://127.0.0.1:{port}/")
        received = []
        closed = []
        waiting = asyncio.Event()

        async def on_event(name, data):
            if name == protocol.USER_ID:
                raise RuntimeError("handler bug")
            received.append(name)
            if name == protocol.WAITING:
                waiting.set()

        transport.on_event_callback = on_event
        transport.on_closed_callback = lambda: closed.append(True)

        assert await transport.connect()
        listener = transport.listen_task
        await transport.send_event(protocol.FIND_PARTNER)
        await asyncio.wait_for(waiting.wait(), 5.0)
        assert protocol.ONLINE_COUNT in received

        await transport.disconnect()
        assert listener.done()
        assert transport.listen_task is None
        assert closed == [True]


@pytest.mark.asyncio
async def test_connect_failure_returns_false():
    transport = TransportLayer("ws://127.0.0.1:1/")
    assert not await transport.connect()
    assert transport.listen_task is None
