from pairup.core.matcher import select_partner, shares_interest
from pairup.core.models import User
from pairup.core.waiting_pool import WaitingPool


def make_user(ref, interests=()):
    return User(connection_ref=ref, interests=list(interests))


def pool_of(*users):
    pool = WaitingPool()
    for user in users:
        pool.enqueue(user)
    return pool


def test_empty_pool_returns_none():
    assert select_partner(make_user("a"), WaitingPool()) is None


def test_never_selects_requester():
    requester = make_user("a", ["music"])
    pool = pool_of(requester)
    assert select_partner(requester, pool) is None
    assert requester.id in pool


def test_fifo_without_interests():
    first, second = make_user("b"), make_user("c")
    pool = pool_of(first, second)
    assert select_partner(make_user("a"), pool) is first
    assert pool.scan() == (second,)


def test_interest_tier_beats_arrival_order():
    no_interest = make_user("b")
    other_topic = make_user("c", ["films"])
    shared = make_user("d", ["music", "games"])
    pool = pool_of(no_interest, other_topic, shared)

    requester = make_user("a", ["music"])
    assert select_partner(requester, pool) is shared
    assert pool.scan() == (no_interest, other_topic)


def test_fifo_within_interest_tier():
    early = make_user("b", ["music"])
    late = make_user("c", ["music"])
    pool = pool_of(early, late)
    assert select_partner(make_user("a", ["music"]), pool) is early


def test_falls_back_to_first_arrival_without_overlap():
    films = make_user("b", ["films"])
    plain = make_user("c")
    pool = pool_of(films, plain)
    assert select_partner(make_user("a", ["music"]), pool) is films


def test_requester_without_interests_ignores_candidate_interests():
    plain = make_user("b")
    music = make_user("c", ["music"])
    pool = pool_of(plain, music)
    assert select_partner(make_user("a"), pool) is plain


def test_interest_match_is_case_sensitive():
    upper = make_user("b", ["Music"])
    assert not shares_interest(make_user("a", ["music"]), upper)


def test_requester_entry_skipped_when_scanning():
    requester = make_user("a", ["music"])
    other = make_user("b")
    pool = pool_of(requester, other)
    assert select_partner(requester, pool) is other
    assert pool.scan() == (requester,)
