import logging
from collections import defaultdict
from typing import Any, Dict, Optional, Set

from websockets.asyncio.server import ServerConnection, broadcast

from pairup.network.protocol import encode_event

logger = logging.getLogger(__name__)


class ConnectionHub:
    """
    Server side of the transport: live websocket connections and the rooms
    they are grouped into.

    Sends go through websockets' broadcast(), which writes without waiting for
    the peer, so callers never block on delivery. Connections that are already
    closing are skipped silently.
    """

    def __init__(self):
        self.connections: Dict[str, ServerConnection] = {}
        self.rooms: Dict[str, Set[str]] = defaultdict(set)

    def add(self, websocket: ServerConnection) -> str:
        connection_ref = str(websocket.id)
        self.connections[connection_ref] = websocket
        return connection_ref

    def remove(self, connection_ref: str):
        self.connections.pop(connection_ref, None)
        for room_id in [r for r, members in self.rooms.items() if connection_ref in members]:
            self.leave(connection_ref, room_id)

    def emit(self, connection_ref: str, event: str, data: Any = None):
        websocket = self.connections.get(connection_ref)
        if websocket is None:
            logger.debug(f"No connection {connection_ref} for {event}")
            return
        broadcast([websocket], encode_event(event, data))

    def broadcast(self, event: str, data: Any = None):
        broadcast(list(self.connections.values()), encode_event(event, data))

    def emit_to_room(self, room_id: str, event: str, data: Any = None, skip: Optional[str] = None):
        targets = [
            self.connections[ref]
            for ref in self.rooms.get(room_id, ())
            if ref != skip and ref in self.connections
        ]
        broadcast(targets, encode_event(event, data))

    def join(self, connection_ref: str, room_id: str):
        self.rooms[room_id].add(connection_ref)

    def leave(self, connection_ref: str, room_id: str):
        members = self.rooms.get(room_id)
        if members is None:
            return
        members.discard(connection_ref)
        if not members:
            del self.rooms[room_id]

    def close_room(self, room_id: str):
        self.rooms.pop(room_id, None)
