import logging

from pairup.core.state_machine import StateMachine, UserState
from pairup.network import protocol
from pairup.network.transport import TransportLayer
from pairup.utils.config import DEFAULT_SERVER_URI
from pairup.utils.error_codes import ErrorCodes, PairupError
from pairup.utils.validators import normalize_interests

logger = logging.getLogger(__name__)

GAME_EVENTS = {
    protocol.GAME_REQUEST,
    protocol.GAME_ACCEPTED,
    protocol.GAME_DECLINED,
    protocol.GAME_STARTED,
    protocol.TIC_TAC_TOE_MOVE,
    protocol.TIC_TAC_TOE_PLAY_AGAIN,
    protocol.WYR_CHOICE,
    protocol.WYR_NEXT_QUESTION,
}


class ChatSession:
    """Client-side view of one connection to the relay."""

    def __init__(self, ui_callback=None, transport=None, uri=DEFAULT_SERVER_URI):
        self.state_machine = StateMachine()
        self.transport = transport if transport is not None else TransportLayer(uri)
        self.ui_callback = ui_callback

        self.user_id = None
        self.partner_id = None
        self.room_id = None
        self.initiator = False
        self.online_count = 0
        self.interests = []
        self.typing = False

        # Wire up transport callbacks
        self.transport.on_event_callback = self.on_server_event
        self.transport.on_closed_callback = self.on_connection_lost

    @property
    def state(self) -> UserState:
        return self.state_machine.current_state

    def _notify(self, event_type, data=None):
        if self.ui_callback: self.ui_callback(event_type, data)

    async def start(self):
        success = await self.transport.connect()
        if not success:
            raise PairupError(ErrorCodes.ERR_NETWORK, "Could not connect to relay")

    # --- commands ---

    async def find_partner(self, interests=None):
        if interests is not None:
            self.interests = normalize_interests(interests)
        if self.state is UserState.PAIRED:
            await self.skip()
        await self.transport.send_event(protocol.FIND_PARTNER, self.interests)

    async def cancel_search(self):
        if self.state is UserState.WAITING:
            await self.transport.send_event(protocol.CANCEL_SEARCH)

    async def skip(self):
        if self.state is UserState.PAIRED:
            await self.transport.send_event(protocol.SKIP_PARTNER)

    async def next_partner(self):
        await self.skip()
        await self.transport.send_event(protocol.FIND_PARTNER, self.interests)

    async def send_message(self, text: str) -> bool:
        if self.state is not UserState.PAIRED:
            return False
        await self.transport.send_event(protocol.SEND_MESSAGE, {"roomId": self.room_id, "message": text})
        await self.update_typing("")
        return True

    async def send_typing(self, is_typing: bool):
        if self.state is UserState.PAIRED:
            await self.transport.send_event(protocol.TYPING, {"roomId": self.room_id, "isTyping": is_typing})

    async def update_typing(self, text: str):
        """Tells the partner when the prompt goes from empty to non-empty and back."""
        is_typing = bool(text.strip()) and not text.startswith("/")
        if self.state is not UserState.PAIRED:
            self.typing = False
            return
        if is_typing == self.typing:
            return
        self.typing = is_typing
        await self.send_typing(is_typing)

    async def close(self):
        self.state_machine.transition_to(UserState.DISCONNECTED)
        await self.transport.disconnect()
        self._notify("DESTROYED")

    # --- server events ---

    async def on_server_event(self, name: str, data):
        if name == protocol.USER_ID:
            self.user_id = data
            self._notify("USER_ID", data)
        elif name == protocol.ONLINE_COUNT:
            self.online_count = data
            self._notify("ONLINE", data)
        elif name == protocol.WAITING:
            self.state_machine.transition_to(UserState.WAITING)
            self._notify("SEARCHING")
        elif name == protocol.PARTNER_FOUND:
            self.partner_id = data["partnerId"]
            self.room_id = data["roomId"]
            self.initiator = bool(data["initiator"])
            self.state_machine.transition_to(UserState.PAIRED)
            self._notify("PARTNER_FOUND", data)
        elif name == protocol.SEARCH_CANCELLED:
            self.state_machine.transition_to(UserState.IDLE)
            self._notify("SEARCH_CANCELLED")
        elif name in (protocol.PARTNER_DISCONNECTED, protocol.CHAT_ENDED):
            self._leave_room()
            self._notify("PARTNER_LEFT" if name == protocol.PARTNER_DISCONNECTED else "CHAT_ENDED")
        elif name == protocol.RECEIVE_MESSAGE:
            self._notify("MESSAGE", data["content"])
        elif name == protocol.PARTNER_TYPING:
            self._notify("TYPING", bool(data and data.get("isTyping")))
        elif name in GAME_EVENTS:
            self._notify("GAME", (name, data))
        else:
            # webrtc-signal and anything newer than this client
            logger.debug(f"Unhandled server event {name}")

    def on_connection_lost(self):
        if self.state is UserState.DISCONNECTED:
            return
        self._leave_room()
        self.state_machine.transition_to(UserState.DISCONNECTED)
        self._notify("DISCONNECTED")

    def _leave_room(self):
        self.partner_id = None
        self.room_id = None
        self.initiator = False
        self.typing = False
        self.state_machine.transition_to(UserState.IDLE)
