from typing import List, Optional, Tuple

from pairup.core.models import User


class WaitingPool:
    """Users seeking a partner, kept in arrival order."""

    def __init__(self):
        self._queue: List[User] = []

    def enqueue(self, user: User) -> bool:
        if user.id in self:
            return False
        self._queue.append(user)
        return True

    def remove_by_id(self, user_id: str) -> Optional[User]:
        for index, waiting in enumerate(self._queue):
            if waiting.id == user_id:
                return self._queue.pop(index)
        return None

    def scan(self) -> Tuple[User, ...]:
        return tuple(self._queue)

    def __contains__(self, user_id: str) -> bool:
        return any(waiting.id == user_id for waiting in self._queue)

    def __len__(self) -> int:
        return len(self._queue)
