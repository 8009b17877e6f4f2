import logging

import pytest

from lbbroker.errors import EmptyWorkerQueue
from lbbroker.lruqueue import WorkerQueue


def test_next_returns_longest_idle_first():
    workers = WorkerQueue()
    for address in (b"W1", b"W2", b"W3"):
        assert workers.ready(address) is True
    assert len(workers) == 3
    assert [workers.next() for _ in range(3)] == [b"W1", b"W2", b"W3"]
    assert len(workers) == 0


def test_returning_worker_goes_to_the_tail():
    workers = WorkerQueue()
    workers.ready(b"W1")
    workers.ready(b"W2")
    workers.ready(workers.next())
    assert list(workers) == [b"W2", b"W1"]


def test_duplicate_ready_is_a_noop(caplog):
    workers = WorkerQueue()
    workers.ready(b"W1")
    workers.ready(b"W2")
    with caplog.at_level(logging.WARNING):
        assert workers.ready(b"W1") is False
    assert list(workers) == [b"W1", b"W2"]
    assert "already idle" in caplog.text


def test_next_on_empty_queue_raises():
    workers = WorkerQueue()
    with pytest.raises(EmptyWorkerQueue):
        workers.next()
    with pytest.raises(IndexError):
        workers.next()


def test_contains():
    workers = WorkerQueue()
    workers.ready(b"W1")
    assert b"W1" in workers
    assert b"W2" not in workers
