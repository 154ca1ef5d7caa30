from pairup.core.models import User
from pairup.core.waiting_pool import WaitingPool


def make_user(ref):
    return User(connection_ref=ref)


def test_enqueue_keeps_arrival_order():
    pool = WaitingPool()
    a, b, c = make_user("a"), make_user("b"), make_user("c")
    for user in (a, b, c):
        pool.enqueue(user)
    assert pool.scan() == (a, b, c)
    assert len(pool) == 3


def test_enqueue_is_idempotent():
    pool = WaitingPool()
    a = make_user("a")
    assert pool.enqueue(a)
    assert not pool.enqueue(a)
    assert len(pool) == 1


def test_remove_by_id():
    pool = WaitingPool()
    a, b = make_user("a"), make_user("b")
    pool.enqueue(a)
    pool.enqueue(b)
    assert pool.remove_by_id(a.id) is a
    assert a.id not in pool
    assert pool.scan() == (b,)


def test_remove_missing_is_noop():
    pool = WaitingPool()
    pool.enqueue(make_user("a"))
    assert pool.remove_by_id("nobody") is None
    assert len(pool) == 1


def test_scan_is_a_snapshot():
    pool = WaitingPool()
    a = make_user("a")
    pool.enqueue(a)
    snapshot = pool.scan()
    pool.remove_by_id(a.id)
    assert snapshot == (a,)
    assert pool.scan() == ()
