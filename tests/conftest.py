from collections import deque

import pytest

from lbbroker.lruqueue import LRUQueue


class FakeChannel(object):
    """In-memory stand-in for transport.Channel that records traffic."""

    def __init__(self, inbox=()):
        self.inbox = deque(inbox)
        self.sent = []
        self.receives = 0

    def push(self, *frames):
        self.inbox.append(list(frames))

    def try_receive(self, timeout):
        self.receives += 1
        if self.inbox:
            return list(self.inbox.popleft())
        return None

    def send(self, frames):
        self.sent.append(list(frames))


@pytest.fixture
def backend():
    return FakeChannel()


@pytest.fixture
def frontend():
    return FakeChannel()


@pytest.fixture
def broker(backend, frontend):
    return LRUQueue(backend, frontend, timeout=0)
