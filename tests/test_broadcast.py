from __future__ import annotations

import asyncio
import json

import pytest

from pygeotrack.broadcast import Subscriber, SubscriberRegistry, encode_message
from pygeotrack.models import EntityDetailMessage, SnapshotData, SnapshotMessage


def _snapshot() -> SnapshotMessage:
    return SnapshotMessage(data=SnapshotData())


def test_encode_message_is_compact_json() -> None:
    frame = encode_message(EntityDetailMessage(data=None))

    assert frame == '{"type":"entity_detail","data":null}'
    assert json.loads(encode_message(_snapshot())) == {
        "type": "snapshot",
        "data": {"entities": [], "anomalies": [], "clusters": []},
    }


@pytest.mark.asyncio
async def test_full_queue_drops_oldest() -> None:
    subscriber = Subscriber(queue_size=3)
    for i in range(5):
        subscriber.offer(f"frame-{i}")

    assert subscriber.dropped == 2
    assert subscriber.pending() == 3
    assert [await subscriber.next_frame() for _ in range(3)] == ["frame-2", "frame-3", "frame-4"]


@pytest.mark.asyncio
async def test_next_frame_waits_for_offer() -> None:
    subscriber = Subscriber(queue_size=2)
    waiter = asyncio.create_task(subscriber.next_frame())
    await asyncio.sleep(0)
    assert not waiter.done()

    subscriber.offer("hello")

    assert await asyncio.wait_for(waiter, timeout=1.0) == "hello"


def test_subscriber_ids_are_unique() -> None:
    registry = SubscriberRegistry()
    first, second = registry.register(), registry.register()
    assert first.id != second.id
    assert len(registry) == 2


def test_publish_offers_same_frame_to_everyone() -> None:
    registry = SubscriberRegistry(queue_size=4)
    subscribers = [registry.register() for _ in range(3)]

    assert registry.publish(_snapshot()) == 3

    frames = {subscriber._queue.get_nowait() for subscriber in subscribers}  # noqa: SLF001
    assert len(frames) == 1


def test_publish_without_subscribers() -> None:
    assert SubscriberRegistry().publish(_snapshot()) == 0


def test_unregistered_subscriber_stops_receiving() -> None:
    registry = SubscriberRegistry()
    kept, gone = registry.register(), registry.register()

    registry.unregister(gone)
    registry.unregister(gone)
    registry.publish(_snapshot())

    assert len(registry) == 1
    assert kept.pending() == 1
    assert gone.pending() == 0


def test_slow_subscriber_does_not_affect_others() -> None:
    registry = SubscriberRegistry(queue_size=2)
    slow, fast = registry.register(), registry.register()

    for _ in range(5):
        registry.publish(_snapshot())
        fast._queue.get_nowait()  # noqa: SLF001

    assert slow.dropped == 3
    assert fast.dropped == 0
