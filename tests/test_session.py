"""Tests for the in-memory flow session store."""

import threading
from datetime import timedelta

from budgetbot.domain.entities import Direction
from budgetbot.flow.session import FlowSession, InMemorySessionStore
from budgetbot.flow.steps import GoalName, TxnAmount


def _session(user_id=1, step=None):
    return FlowSession(user_id=user_id, chat_id=user_id, step=step or GoalName())


def test_save_get_discard(clock):
    store = InMemorySessionStore(clock=clock)

    store.save(_session())

    assert store.get(1).step == GoalName()
    assert store.get(1).updated_at == clock()
    assert store.get(2) is None
    assert len(store) == 1

    store.discard(1)
    store.discard(1)
    assert store.get(1) is None
    assert len(store) == 0


def test_save_replaces_step(clock):
    store = InMemorySessionStore(clock=clock)
    session = _session()
    store.save(session)

    session.step = TxnAmount(direction=Direction.INCOME)
    clock.advance(minutes=5)
    store.save(session)

    assert store.get(1).step == TxnAmount(direction=Direction.INCOME)
    assert store.get(1).updated_at == clock()


def test_sessions_without_timeout_never_expire(clock):
    store = InMemorySessionStore(clock=clock)
    store.save(_session())

    clock.advance(days=30)

    assert store.get(1) is not None


def test_idle_session_is_discarded(clock):
    """An expired session disappears on the next read."""
    store = InMemorySessionStore(idle_timeout=timedelta(minutes=10), clock=clock)
    store.save(_session())

    clock.advance(minutes=10)
    assert store.get(1) is not None

    clock.advance(seconds=1)
    assert store.get(1) is None
    assert len(store) == 0


def test_lock_is_reentrant(clock):
    store = InMemorySessionStore(clock=clock)

    with store.lock(1):
        with store.lock(1):
            with store.lock(2):
                assert sorted(store._locks) == [1, 2]

    assert store._locks == {}


def test_lock_is_dropped_once_released(clock):
    """Users who are done leave no lock behind; a held lock outlives discard."""
    store = InMemorySessionStore(clock=clock)

    for user_id in range(100):
        with store.lock(user_id):
            store.save(_session(user_id))
            store.discard(user_id)
            assert user_id in store._locks

    assert store._locks == {}
    assert len(store) == 0


def test_lock_serializes_one_user(clock):
    """A second update of the same user waits for the first."""
    store = InMemorySessionStore(clock=clock)
    order = []
    entered = threading.Event()
    release = threading.Event()

    def first():
        with store.lock(7):
            entered.set()
            release.wait(5)
            order.append("first")

    def second():
        with store.lock(7):
            order.append("second")

    worker = threading.Thread(target=first)
    worker.start()
    entered.wait(5)
    waiting = threading.Thread(target=second)
    waiting.start()

    release.set()
    worker.join(5)
    waiting.join(5)

    assert order == ["first", "second"]
    assert store._locks == {}
