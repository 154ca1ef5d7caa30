"""
Wire protocol shared by the relay server and the terminal client.

Every frame is a JSON object ``{"type": <event name>, "data": <payload>}``,
``data`` being left out when an event carries nothing. Inbound events are
validated into pydantic models so the lifecycle code only ever sees
well-formed payloads.
"""
import json
from typing import Any, List, NamedTuple, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pairup.utils.error_codes import ErrorCodes, PairupError
from pairup.utils.validators import normalize_interests, validate_room_id

# Inbound
FIND_PARTNER = "find-partner"
CANCEL_SEARCH = "cancel-search"
SKIP_PARTNER = "skip-partner"
WEBRTC_SIGNAL = "webrtc-signal"
SEND_MESSAGE = "send-message"
TYPING = "typing"
REQUEST_GAME = "request-game"
ACCEPT_GAME = "accept-game"
DECLINE_GAME = "decline-game"
START_GAME = "start-game"
TIC_TAC_TOE_MOVE = "tic-tac-toe-move"
TIC_TAC_TOE_PLAY_AGAIN = "tic-tac-toe-play-again"
WYR_CHOICE = "wyr-choice"
WYR_NEXT_QUESTION = "wyr-next-question"

# Outbound
USER_ID = "user-id"
ONLINE_COUNT = "online-count"
PARTNER_FOUND = "partner-found"
WAITING = "waiting"
SEARCH_CANCELLED = "search-cancelled"
PARTNER_DISCONNECTED = "partner-disconnected"
CHAT_ENDED = "chat-ended"
RECEIVE_MESSAGE = "receive-message"
PARTNER_TYPING = "partner-typing"
GAME_REQUEST = "game-request"
GAME_ACCEPTED = "game-accepted"
GAME_DECLINED = "game-declined"
GAME_STARTED = "game-started"


class EventModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class FindPartner(EventModel):
    interests: List[str] = Field(default_factory=list)

    @field_validator("interests", mode="before")
    @classmethod
    def _null_is_empty(cls, value):
        return [] if value is None else value

    @field_validator("interests")
    @classmethod
    def _distinct(cls, value):
        return normalize_interests(value)


class RoomEvent(EventModel):
    room_id: str = Field(alias="roomId")

    @field_validator("room_id")
    @classmethod
    def _room_label(cls, value):
        if not validate_room_id(value):
            raise ValueError("not a room label")
        return value

    def relay_payload(self) -> Optional[dict]:
        """Payload forwarded to the partner: everything but the room label."""
        return self.model_dump(by_alias=True, exclude={"room_id"}) or None


class WebRTCSignal(RoomEvent):
    signal: Any


class SendMessage(RoomEvent):
    message: str


class Typing(RoomEvent):
    is_typing: bool = Field(alias="isTyping")


class GameEvent(RoomEvent):
    game_type: str = Field(alias="gameType")


class TicTacToeMove(RoomEvent):
    index: int
    symbol: str


class WyrChoice(RoomEvent):
    choice: Any


class WyrNextQuestion(RoomEvent):
    question: Any


INBOUND_EVENTS = {
    FIND_PARTNER: FindPartner,
    CANCEL_SEARCH: None,
    SKIP_PARTNER: None,
    WEBRTC_SIGNAL: WebRTCSignal,
    SEND_MESSAGE: SendMessage,
    TYPING: Typing,
    REQUEST_GAME: GameEvent,
    ACCEPT_GAME: GameEvent,
    DECLINE_GAME: GameEvent,
    START_GAME: GameEvent,
    TIC_TAC_TOE_MOVE: TicTacToeMove,
    TIC_TAC_TOE_PLAY_AGAIN: RoomEvent,
    WYR_CHOICE: WyrChoice,
    WYR_NEXT_QUESTION: WyrNextQuestion,
}

# inbound name -> name the partner receives, for events relayed as-is
RELAY_ROUTES = {
    TYPING: PARTNER_TYPING,
    REQUEST_GAME: GAME_REQUEST,
    ACCEPT_GAME: GAME_ACCEPTED,
    DECLINE_GAME: GAME_DECLINED,
    START_GAME: GAME_STARTED,
    TIC_TAC_TOE_MOVE: TIC_TAC_TOE_MOVE,
    TIC_TAC_TOE_PLAY_AGAIN: TIC_TAC_TOE_PLAY_AGAIN,
    WYR_CHOICE: WYR_CHOICE,
    WYR_NEXT_QUESTION: WYR_NEXT_QUESTION,
}


class InboundEvent(NamedTuple):
    name: str
    payload: Optional[EventModel] = None


def encode_event(name: str, data: Any = None) -> str:
    frame = {"type": name}
    if data is not None:
        frame["data"] = data
    return json.dumps(frame)


def parse_frame(raw) -> Tuple[str, Any]:
    try:
        frame = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PairupError(ErrorCodes.ERR_MALFORMED_FRAME, "Frame is not JSON") from e
    if not isinstance(frame, dict) or not isinstance(frame.get("type"), str):
        raise PairupError(ErrorCodes.ERR_MALFORMED_FRAME, "Frame has no event type")
    return frame["type"], frame.get("data")


def decode_event(raw) -> InboundEvent:
    name, data = parse_frame(raw)
    if name not in INBOUND_EVENTS:
        raise PairupError(ErrorCodes.ERR_UNKNOWN_EVENT, f"Unknown event {name!r}")

    model = INBOUND_EVENTS[name]
    if model is None:
        return InboundEvent(name)

    if name == FIND_PARTNER and (data is None or isinstance(data, list)):
        data = {"interests": data or []}
    try:
        return InboundEvent(name, model.model_validate(data))
    except ValidationError as e:
        raise PairupError(ErrorCodes.ERR_INVALID_PAYLOAD, f"Bad {name} payload: {e.error_count()} error(s)") from e
