import logging
from typing import Optional

from pairup.core.models import Session, User, session_label
from pairup.core.registry import ConnectionRegistry
from pairup.core.state_machine import UserState

logger = logging.getLogger(__name__)


class SessionManager:
    """Creates and destroys pairings plus the transport room that scopes relay."""

    def __init__(self, registry: ConnectionRegistry, transport):
        self.registry = registry
        self.transport = transport

    def establish(self, requester: User, partner: User) -> Session:
        room_id = session_label(requester, partner)

        requester.partner_id = partner.id
        partner.partner_id = requester.id
        for user in (requester, partner):
            user.room_id = room_id
            user.transition_to(UserState.PAIRED)
            self.transport.join(user.connection_ref, room_id)

        logger.info(f"Matched users: {requester.id} and {partner.id}")
        return Session(room_id=room_id, initiator=requester, responder=partner)

    def tear_down(self, user: User) -> Optional[User]:
        """
        Ends the pairing user belongs to.

        Returns the partner when it is still registered and still points back
        at user, i.e. when there is somebody left to notify. A user without a
        partner is left alone.
        """
        if user.partner_id is None:
            return None

        room_id = user.room_id
        partner = self.registry.lookup_by_id(user.partner_id)
        self._clear(user)

        if partner is not None and partner.partner_id == user.id:
            self._clear(partner)
        else:
            logger.debug(f"Partner of {user.id} already gone")
            partner = None

        if room_id:
            self.transport.close_room(room_id)
        return partner

    @staticmethod
    def _clear(user: User):
        user.partner_id = None
        user.room_id = None
        user.transition_to(UserState.IDLE)
