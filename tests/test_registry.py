"""Subscriber registry and outbox tests.

Learn: Tests cover:
1. Ids are monotonic and never reused
2. unregister() is idempotent
3. for_each() survives membership changes mid-iteration
4. Outbox close/overflow semantics
"""

import pytest

from logo_png.live.registry import Outbox, SendError, SubscriberRegistry


# ═══════════════════════════════════════════════════════════
# Registry
# ═══════════════════════════════════════════════════════════


def test_ids_start_at_one_and_increase():
    registry = SubscriberRegistry()
    ids = [registry.register(Outbox()) for _ in range(3)]
    assert ids == [1, 2, 3]


def test_ids_never_reused_after_unregister():
    registry = SubscriberRegistry()
    a = registry.register(Outbox())
    b = registry.register(Outbox())
    c = registry.register(Outbox())

    registry.unregister(b)
    d = registry.register(Outbox())

    assert d > c
    assert d != b
    assert a < b < c


def test_unregister_is_idempotent():
    registry = SubscriberRegistry()
    a = registry.register(Outbox())
    b = registry.register(Outbox())

    assert registry.unregister(a) is True
    assert registry.unregister(a) is False  # no error
    assert b in registry
    assert len(registry) == 1


def test_unregister_unknown_id_is_noop():
    registry = SubscriberRegistry()
    assert registry.unregister(999) is False


def test_for_each_visits_each_subscriber_once():
    registry = SubscriberRegistry()
    ids = {registry.register(Outbox()) for _ in range(5)}

    seen = []
    registry.for_each(lambda s: seen.append(s.id))

    assert sorted(seen) == sorted(ids)


def test_for_each_tolerates_mutation_during_visit():
    """Removing and adding subscribers mid-iteration neither crashes nor repeats."""
    registry = SubscriberRegistry()
    ids = [registry.register(Outbox()) for _ in range(4)]
    seen = []

    def visit(subscriber):
        seen.append(subscriber.id)
        registry.unregister(ids[-1])
        registry.register(Outbox())

    registry.for_each(visit)

    assert len(seen) == len(set(seen))
    assert set(seen) <= set(ids)
    # Every visit registered one more; the last original id is gone
    assert len(registry) == 3 + len(seen)


# ═══════════════════════════════════════════════════════════
# Outbox
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_outbox_delivers_in_order():
    outbox = Outbox()
    outbox.send_nowait(b"one")
    outbox.send_nowait(b"two")

    assert await outbox.get() == b"one"
    assert await outbox.get() == b"two"


@pytest.mark.asyncio
async def test_closed_outbox_rejects_and_returns_none():
    outbox = Outbox()
    outbox.close()

    with pytest.raises(SendError):
        outbox.send_nowait(b"frame")
    assert await outbox.get() is None


@pytest.mark.asyncio
async def test_unbounded_outbox_accepts_many_frames():
    outbox = Outbox()
    for i in range(1000):
        outbox.send_nowait(bytes([i % 256]))
    assert outbox.pending() == 1000
    assert not outbox.closed


@pytest.mark.asyncio
async def test_bounded_outbox_closes_on_overflow():
    outbox = Outbox(max_size=2)
    outbox.send_nowait(b"1")
    outbox.send_nowait(b"2")

    with pytest.raises(SendError, match="overflow"):
        outbox.send_nowait(b"3")

    assert outbox.closed
    assert await outbox.get() is None
