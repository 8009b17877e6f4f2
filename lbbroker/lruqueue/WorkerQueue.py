import logging
from collections import OrderedDict

from ..errors import EmptyWorkerQueue

log = logging.getLogger(__name__)


class WorkerQueue(object):
    """FIFO of idle worker addresses.

    A worker is in the queue exactly while it is idle: it is added when it
    announces READY or returns a reply, and removed when it is handed a
    request. The worker that has been idle longest is always served first.
    """

    def __init__(self, logger=None):
        self.queue = OrderedDict()
        self.log = logger or log

    def ready(self, address):
        """Put a worker at the tail. A worker already queued is left where it is."""
        if address in self.queue:
            self.log.warning("Worker %r is already idle, ignoring duplicate", address)
            return False
        self.queue[address] = True
        return True

    def next(self):
        """Remove and return the worker that has been idle longest."""
        if not self.queue:
            raise EmptyWorkerQueue("no idle workers")
        address, _ = self.queue.popitem(last=False)
        return address

    def __len__(self):
        return len(self.queue)

    def __contains__(self, address):
        return address in self.queue

    def __iter__(self):
        return iter(list(self.queue))

    def __repr__(self):
        return "WorkerQueue(%r)" % (list(self.queue),)
