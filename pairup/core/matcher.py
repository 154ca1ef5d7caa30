from typing import Optional

from pairup.core.models import User
from pairup.core.waiting_pool import WaitingPool


def shares_interest(requester: User, candidate: User) -> bool:
    if not requester.interests or not candidate.interests:
        return False
    return not set(requester.interests).isdisjoint(candidate.interests)


def select_partner(requester: User, pool: WaitingPool) -> Optional[User]:
    """
    Greedy first fit over the waiting pool.

    A candidate sharing at least one interest with the requester wins over any
    other candidate; inside each tier the earliest arrival wins. The chosen
    partner is removed from the pool before returning.
    """
    candidates = [u for u in pool.scan() if u.id != requester.id]

    chosen = None
    if requester.interests:
        chosen = next((u for u in candidates if shares_interest(requester, u)), None)
    if chosen is None and candidates:
        chosen = candidates[0]

    if chosen is not None:
        pool.remove_by_id(chosen.id)
    return chosen
