import logging
from typing import Dict, Iterator, Optional

from pairup.core.models import User

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Source of truth for which users the server currently knows about.

    Users are indexed both by transport connection reference and by user id so
    a partner reference can be resolved back to a reachable connection.
    """

    def __init__(self):
        self._by_connection: Dict[str, User] = {}
        self._by_id: Dict[str, User] = {}

    def register(self, connection_ref: str) -> User:
        user = User(connection_ref=connection_ref)
        self._by_connection[connection_ref] = user
        self._by_id[user.id] = user
        return user

    def lookup_by_connection(self, connection_ref: str) -> Optional[User]:
        return self._by_connection.get(connection_ref)

    def lookup_by_id(self, user_id: Optional[str]) -> Optional[User]:
        if user_id is None:
            return None
        return self._by_id.get(user_id)

    def remove(self, connection_ref: str) -> Optional[User]:
        user = self._by_connection.pop(connection_ref, None)
        if user is None:
            logger.debug(f"Remove for unknown connection {connection_ref} ignored")
            return None
        self._by_id.pop(user.id, None)
        return user

    def size(self) -> int:
        return len(self._by_connection)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[User]:
        return iter(list(self._by_connection.values()))
