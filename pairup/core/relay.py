import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pairup.core.models import User

logger = logging.getLogger(__name__)


class EventRelay:
    """
    Forwards in-session events to the other members of a room.

    Signaling, chat, typing and game events all go through relay(); the only
    differences between them are the outbound event name and the payload.
    """

    def __init__(self, transport):
        self.transport = transport

    def relay(self, sender: User, room_id: str, event: str, payload: Any = None) -> bool:
        if not sender.in_session or sender.room_id != room_id:
            logger.debug(f"Dropped {event} from {sender.id}: not in room {room_id}")
            return False
        self.transport.emit_to_room(room_id, event, payload, skip=sender.connection_ref)
        return True

    def relay_signal(self, sender: User, room_id: str, signal: Any) -> bool:
        return self.relay(sender, room_id, "webrtc-signal", {
            "signal": signal,
            "from": sender.connection_ref,
        })

    def relay_chat(self, sender: User, room_id: str, content: str) -> Optional[dict]:
        message = {
            "id": str(uuid.uuid4()),
            "senderId": sender.id,
            "content": content,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if not self.relay(sender, room_id, "receive-message", message):
            return None
        return message
