import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from pairup.core.state_machine import StateMachine, UserState


@dataclass(eq=False)
class User:
    """Matchmaking state of one live connection."""

    connection_ref: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    interests: List[str] = field(default_factory=list)
    partner_id: Optional[str] = None
    room_id: Optional[str] = None
    machine: StateMachine = field(default_factory=StateMachine, repr=False)

    @property
    def state(self) -> UserState:
        return self.machine.current_state

    @property
    def in_session(self) -> bool:
        return self.state is UserState.PAIRED

    @property
    def is_waiting(self) -> bool:
        return self.state is UserState.WAITING

    def transition_to(self, new_state: UserState) -> bool:
        return self.machine.transition_to(new_state)


@dataclass(frozen=True)
class Session:
    """One active pairing. The initiator starts the peer-connection handshake."""

    room_id: str
    initiator: User
    responder: User

    def is_initiator(self, user: User) -> bool:
        return user is self.initiator

    def other(self, user: User) -> User:
        return self.responder if user is self.initiator else self.initiator


def session_label(requester: User, partner: User) -> str:
    return f"room-{requester.id}-{partner.id}"
