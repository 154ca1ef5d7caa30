import logging
from typing import Iterable, Optional

from pairup.core.matcher import select_partner
from pairup.core.models import User
from pairup.core.registry import ConnectionRegistry
from pairup.core.relay import EventRelay
from pairup.core.session_manager import SessionManager
from pairup.core.state_machine import UserState
from pairup.core.waiting_pool import WaitingPool
from pairup.network import protocol
from pairup.network.protocol import InboundEvent
from pairup.utils.validators import normalize_interests

logger = logging.getLogger(__name__)


class LifecycleController:
    """
    Drives every user through IDLE -> WAITING -> PAIRED -> IDLE in response to
    transport events, and keeps both sides of a pairing consistent.

    All methods are synchronous: one event is fully applied, notifications
    included, before the next one is looked at. The transport's send methods
    are fire-and-forget.
    """

    def __init__(self, transport, registry: Optional[ConnectionRegistry] = None,
                 pool: Optional[WaitingPool] = None):
        self.transport = transport
        self.registry = registry if registry is not None else ConnectionRegistry()
        self.pool = pool if pool is not None else WaitingPool()
        self.sessions = SessionManager(self.registry, transport)
        self.relay = EventRelay(transport)

    # --- connection lifecycle ---

    def connect(self, connection_ref: str) -> User:
        user = self.registry.register(connection_ref)
        logger.info(f"User connected: {connection_ref} as {user.id}")
        self.transport.emit(connection_ref, protocol.USER_ID, user.id)
        self.transport.emit(connection_ref, protocol.ONLINE_COUNT, self.registry.size())
        self.transport.broadcast(protocol.ONLINE_COUNT, self.registry.size())
        return user

    def disconnect(self, connection_ref: str):
        logger.info(f"User disconnected: {connection_ref}")
        user = self.registry.lookup_by_connection(connection_ref)
        if user is not None:
            if user.in_session:
                self._end_session(user)
            self.pool.remove_by_id(user.id)
            self.registry.remove(connection_ref)
            user.transition_to(UserState.DISCONNECTED)
        self.transport.broadcast(protocol.ONLINE_COUNT, self.registry.size())

    # --- matchmaking ---

    def find_partner(self, connection_ref: str, interests: Optional[Iterable[str]] = None):
        user = self._lookup(connection_ref)
        if user is None:
            return

        if user.in_session:
            # Asking for someone new while paired ends the current chat first
            self._end_session(user)

        self.pool.remove_by_id(user.id)
        user.interests = normalize_interests(interests)

        partner = select_partner(user, self.pool)
        if partner is None:
            self.pool.enqueue(user)
            user.transition_to(UserState.WAITING)
            self.transport.emit(connection_ref, protocol.WAITING)
            logger.info(f"User {user.id} added to waiting queue. Queue size: {len(self.pool)}")
            return

        session = self.sessions.establish(user, partner)
        for member in (session.initiator, session.responder):
            self.transport.emit(member.connection_ref, protocol.PARTNER_FOUND, {
                "partnerId": session.other(member).id,
                "roomId": session.room_id,
                "initiator": session.is_initiator(member),
            })

    def cancel_search(self, connection_ref: str):
        user = self._lookup(connection_ref)
        if user is None or not user.is_waiting:
            return
        self.pool.remove_by_id(user.id)
        user.transition_to(UserState.IDLE)
        self.transport.emit(connection_ref, protocol.SEARCH_CANCELLED)

    def skip_partner(self, connection_ref: str):
        user = self._lookup(connection_ref)
        if user is None or not user.in_session:
            return
        self._end_session(user)
        self.transport.emit(connection_ref, protocol.CHAT_ENDED)

    def _end_session(self, user: User):
        partner = self.sessions.tear_down(user)
        if partner is not None:
            self.transport.emit(partner.connection_ref, protocol.PARTNER_DISCONNECTED)

    # --- in-session relay ---

    def relay_event(self, connection_ref: str, event: InboundEvent):
        user = self._lookup(connection_ref)
        if user is None:
            return
        payload = event.payload
        if event.name == protocol.WEBRTC_SIGNAL:
            self.relay.relay_signal(user, payload.room_id, payload.signal)
        elif event.name == protocol.SEND_MESSAGE:
            self.relay.relay_chat(user, payload.room_id, payload.message)
        else:
            outbound = protocol.RELAY_ROUTES[event.name]
            self.relay.relay(user, payload.room_id, outbound, payload.relay_payload())

    def dispatch(self, connection_ref: str, event: InboundEvent):
        if event.name == protocol.FIND_PARTNER:
            self.find_partner(connection_ref, event.payload.interests)
        elif event.name == protocol.CANCEL_SEARCH:
            self.cancel_search(connection_ref)
        elif event.name == protocol.SKIP_PARTNER:
            self.skip_partner(connection_ref)
        else:
            self.relay_event(connection_ref, event)

    def _lookup(self, connection_ref: str) -> Optional[User]:
        user = self.registry.lookup_by_connection(connection_ref)
        if user is None:
            logger.debug(f"Event from unknown connection {connection_ref} ignored")
        return user
