"""
Tests for the bounded relay queue and completion signal.
"""
import threading
import time

import pytest

from table_export.core.errors import ConfigurationError, ExportCancelledError
from table_export.export.relay_queue import NO_ITEM, CompletionSignal, RelayQueue


def test_fifo_order():
    relay = RelayQueue(capacity=5)
    for line in ("a\n", "b\n", "c\n"):
        relay.enqueue(line)
    assert [relay.dequeue(0.1) for _ in range(3)] == ["a\n", "b\n", "c\n"]


def test_dequeue_timeout_returns_sentinel():
    relay = RelayQueue(capacity=1)
    started = time.monotonic()
    assert relay.dequeue(0.05) is NO_ITEM
    assert time.monotonic() - started >= 0.04


def test_invalid_capacity():
    with pytest.raises(ConfigurationError):
        RelayQueue(capacity=0)


def test_producer_blocks_when_full():
    """A producer waits for space instead of dropping the line."""
    relay = RelayQueue(capacity=1, put_timeout=0.01)
    relay.enqueue("first\n")

    done = threading.Event()

    def produce():
        relay.enqueue("second\n")
        done.set()

    producer = threading.Thread(target=produce)
    producer.start()

    assert not done.wait(0.1)
    assert relay.size() == 1

    assert relay.dequeue(0.1) == "first\n"
    assert done.wait(2)
    producer.join()
    assert relay.dequeue(0.1) == "second\n"


def test_size_never_exceeds_capacity():
    relay = RelayQueue(capacity=3, put_timeout=0.01)
    producers = [
        threading.Thread(target=lambda n=n: [relay.enqueue(f"{n}-{i}\n") for i in range(50)])
        for n in range(4)
    ]
    for producer in producers:
        producer.start()

    received = []
    while len(received) < 200:
        assert relay.size() <= 3
        item = relay.dequeue(0.5)
        assert item is not NO_ITEM
        received.append(item)

    for producer in producers:
        producer.join()
    assert relay.peak_size <= 3
    assert len(set(received)) == 200


def test_cancel_releases_blocked_producer():
    relay = RelayQueue(capacity=1, put_timeout=0.01)
    relay.enqueue("fill\n")
    errors = []

    def produce():
        try:
            relay.enqueue("blocked\n")
        except ExportCancelledError as e:
            errors.append(e)

    producer = threading.Thread(target=produce)
    producer.start()
    time.sleep(0.05)
    relay.cancel()
    producer.join(timeout=2)

    assert not producer.is_alive()
    assert len(errors) == 1
    assert relay.cancelled


def test_enqueue_after_cancel_raises():
    relay = RelayQueue(capacity=10)
    relay.cancel()
    with pytest.raises(ExportCancelledError):
        relay.enqueue("late\n")


class TestCompletionSignal:
    def test_initially_clear(self):
        assert not CompletionSignal().is_set()

    def test_set_once(self):
        signal = CompletionSignal()
        signal.set()
        assert signal.is_set()
        with pytest.raises(RuntimeError):
            signal.set()
        assert signal.is_set()
