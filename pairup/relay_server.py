import asyncio
import json
import logging
from datetime import datetime, timezone
from http import HTTPStatus

from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request

from pairup.core.lifecycle import LifecycleController
from pairup.network.hub import ConnectionHub
from pairup.network.protocol import decode_event
from pairup.utils.config import ServerConfig
from pairup.utils.error_codes import PairupError

logger = logging.getLogger(__name__)

HEALTH_PATHS = ("/", "/health")


class RelayServer:
    def __init__(self):
        self.hub = ConnectionHub()
        self.controller = LifecycleController(self.hub)

    async def handler(self, websocket: ServerConnection):
        connection_ref = self.hub.add(websocket)
        self.controller.connect(connection_ref)
        try:
            # Relay loop: every frame is applied to the shared state before the next await
            async for message in websocket:
                try:
                    event = decode_event(message)
                except PairupError as e:
                    logger.debug(f"Dropped frame from {connection_ref}: {e}")
                    continue
                self.controller.dispatch(connection_ref, event)
        except ConnectionClosed:
            pass
        finally:
            self.hub.remove(connection_ref)
            self.controller.disconnect(connection_ref)

    def process_request(self, connection: ServerConnection, request: Request):
        """Answers plain HTTP health checks; lets websocket upgrades through."""
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None
        if request.path.split("?", 1)[0] not in HEALTH_PATHS:
            return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")

        body = json.dumps({
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "online": self.controller.registry.size(),
        })
        response = connection.respond(HTTPStatus.OK, body)
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response

    def serve(self, host: str, port: int, **kwargs):
        return serve(self.handler, host, port, process_request=self.process_request, **kwargs)


async def main(config: ServerConfig = None):
    config = config or ServerConfig.from_env()
    logging.basicConfig(level=config.log_level, format='%(asctime)s - %(message)s')

    server = RelayServer()
    logging.info(f"Starting pairup relay on {config.host}:{config.port}")
    async with server.serve(config.host, config.port, origins=config.allowed_origins):
        await asyncio.Future()  # run forever


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
