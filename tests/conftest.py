from collections import defaultdict

import pytest

from pairup.core.lifecycle import LifecycleController
from pairup.core.state_machine import UserState


class FakeTransport:
    """Records everything the core asks the transport to send."""

    def __init__(self):
        self.sent = []
        self.broadcasts = []
        self.rooms = defaultdict(set)

    def emit(self, connection_ref, event, data=None):
        self.sent.append((connection_ref, event, data))

    def broadcast(self, event, data=None):
        self.broadcasts.append((event, data))

    def emit_to_room(self, room_id, event, data=None, skip=None):
        for ref in sorted(self.rooms.get(room_id, ())):
            if ref != skip:
                self.sent.append((ref, event, data))

    def join(self, connection_ref, room_id):
        self.rooms[room_id].add(connection_ref)

    def close_room(self, room_id):
        self.rooms.pop(room_id, None)

    def members(self, room_id):
        return set(self.rooms.get(room_id, ()))

    def events_for(self, connection_ref):
        return [(event, data) for ref, event, data in self.sent if ref == connection_ref]

    def names_for(self, connection_ref):
        return [event for event, _ in self.events_for(connection_ref)]

    def last_for(self, connection_ref):
        events = self.events_for(connection_ref)
        return events[-1] if events else None

    def clear(self):
        self.sent.clear()
        self.broadcasts.clear()


def assert_consistent(controller):
    registry = controller.registry
    pool_ids = [u.id for u in controller.pool.scan()]
    assert len(pool_ids) == len(set(pool_ids))

    for user in registry:
        if user.partner_id is not None:
            partner = registry.lookup_by_id(user.partner_id)
            assert partner is not None
            assert partner.partner_id == user.id
            assert user.in_session and partner.in_session
            assert user.room_id == partner.room_id
        else:
            assert not user.in_session
            assert user.room_id is None
        assert (user.id in controller.pool) == (user.state is UserState.WAITING)

    for waiting in controller.pool.scan():
        assert registry.lookup_by_id(waiting.id) is waiting
        assert not waiting.in_session


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def controller(transport):
    return LifecycleController(transport)
