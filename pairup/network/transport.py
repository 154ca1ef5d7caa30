import asyncio
import logging

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from pairup.network.protocol import encode_event, parse_frame
from pairup.utils.config import DEFAULT_SERVER_URI
from pairup.utils.error_codes import PairupError

logger = logging.getLogger(__name__)


class TransportLayer:
    def __init__(self, uri=DEFAULT_SERVER_URI):
        self.uri = uri
        self.websocket = None
        self.listen_task = None
        self.on_event_callback = None
        self.on_closed_callback = None

    async def connect(self) -> bool:
        try:
            self.websocket = await connect(self.uri)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            logger.debug(f"Connection to {self.uri} failed: {e}")
            return False
        # Start listening loop
        self.listen_task = asyncio.create_task(self.listen())
        return True

    async def listen(self):
        try:
            async for message in self.websocket:
                try:
                    name, data = parse_frame(message)
                except PairupError as e:
                    logger.debug(f"Ignoring frame: {e}")
                    continue
                if not self.on_event_callback:
                    continue
                try:
                    await self.on_event_callback(name, data)
                except Exception:
                    # One bad event must not stop the listener
                    logger.exception(f"Handler for {name} failed")
        except ConnectionClosed:
            pass
        finally:
            if self.on_closed_callback:
                self.on_closed_callback()

    async def send_event(self, name: str, data=None):
        if self.websocket:
            await self.websocket.send(encode_event(name, data))

    async def disconnect(self):
        if self.websocket:
            await self.websocket.close()
        task, self.listen_task = self.listen_task, None
        if task is not None and task is not asyncio.current_task():
            try:
                await asyncio.wait_for(task, timeout=5.0)
            except asyncio.TimeoutError:
                logger.debug("Listener did not stop after close, cancelled")
