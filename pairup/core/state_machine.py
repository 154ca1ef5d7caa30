import logging
from enum import Enum, auto

logger = logging.getLogger(__name__)

class UserState(Enum):
    IDLE = auto()
    WAITING = auto()
    PAIRED = auto()
    DISCONNECTED = auto()

ALLOWED_TRANSITIONS = {
    UserState.IDLE: {UserState.WAITING, UserState.PAIRED, UserState.DISCONNECTED},
    UserState.WAITING: {UserState.IDLE, UserState.PAIRED, UserState.DISCONNECTED},
    UserState.PAIRED: {UserState.IDLE, UserState.DISCONNECTED},
    UserState.DISCONNECTED: set(),
}

class StateMachine:
    def __init__(self, initial: UserState = UserState.IDLE):
        self.current_state = initial

    def can_transition_to(self, new_state: UserState) -> bool:
        if new_state is self.current_state:
            return True
        return new_state in ALLOWED_TRANSITIONS[self.current_state]

    def transition_to(self, new_state: UserState) -> bool:
        """
        Moves to new_state if the move is allowed.
        Illegal moves are logged and refused rather than raised, the caller
        keeps running with the previous state.
        """
        if not self.can_transition_to(new_state):
            logger.warning(f"Refused transition {self.current_state.name} -> {new_state.name}")
            return False
        self.current_state = new_state
        return True
