import logging
import threading

import zmq

from ..constants import POLL_TIMEOUT, PPP_READY
from ..envelope import strip_address, wrap_address
from ..errors import MalformedEnvelope, TransportError
from ..transport import Channel
from .WorkerQueue import WorkerQueue

decode = lambda x: x.decode('utf-8', 'replace')


class LRUQueue(object):
    """Load-balancing broker loop over a worker-facing and a client-facing channel.

    Each iteration polls the backend (workers) unconditionally and the
    frontend (clients) only while at least one worker is idle, so client
    requests that cannot be served yet stay queued inside the frontend
    socket instead of in the broker.

    Backend messages arrive as ``[worker, b'', READY]`` or
    ``[worker, b'', client, b'', reply...]``; frontend messages as
    ``[client, b'', request...]``. Requests are forwarded to workers as
    ``[worker, b'', client, b'', request...]`` so the reply carries the
    client address back.

    ``pending`` is the number of replies after which the loop stops by
    itself; leave it as None to run until stop() is called.
    """

    def __init__(self, backend, frontend, timeout=POLL_TIMEOUT, pending=None,
                 max_workers=None, workers=None, logger=None):
        self.backend = _as_channel(backend)
        self.frontend = _as_channel(frontend)
        self.timeout = timeout
        self.pending = pending
        self.max_workers = max_workers
        self.log = logger or logging.getLogger(__name__)
        self.workers = workers if workers is not None else WorkerQueue(logger=self.log)

        self.task_count = 0
        self.reply_count = 0
        self.dropped = 0
        self.worker_stat = {}
        self.unique_workers = set()

        self._stop = threading.Event()

    @property
    def running(self):
        return not self._stop.is_set()

    def stop(self):
        self._stop.set()

    def run(self):
        """Route messages until stopped, the pending count runs out, or the context is terminated.

        A transport failure other than context termination is fatal: the
        loop stops and re-raises TransportError so the owner can shut down.
        """
        self.log.info("Broker loop started (timeout=%sms, pending=%s)", self.timeout, self.pending)
        if self.pending is not None and self.pending <= 0:
            self.stop()
        try:
            while self.running:
                self.step()
        except zmq.ContextTerminated:
            self.log.info("Context terminated, leaving broker loop")
            self.stop()
        except TransportError:
            self.log.exception("Transport failure, stopping broker loop")
            self.stop()
            raise
        self.log.info("Broker loop stopped: %d tasks sent to %d unique workers, %d replies, %d dropped",
                      self.task_count, len(self.unique_workers), self.reply_count, self.dropped)

    def step(self):
        self.poll_backend()
        if self.running and len(self.workers) > 0:
            self.poll_frontend()

    def poll_backend(self):
        msg = self.backend.try_receive(self.timeout)
        if msg is None:
            return False
        self.handle_backend(msg)
        return True

    def poll_frontend(self):
        # Never take client work we cannot hand to a worker right away
        if not len(self.workers):
            return False
        msg = self.frontend.try_receive(self.timeout)
        if msg is None:
            return False
        self.handle_frontend(msg)
        return True

    def handle_backend(self, msg):
        try:
            worker_addr, rest = strip_address(msg)
        except MalformedEnvelope as exc:
            self._drop("backend", exc)
            return

        if not self._admit(worker_addr):
            return

        # Worker is idle again, whatever it sent
        self.workers.ready(worker_addr)

        client_addr = rest[0]
        if client_addr == PPP_READY:
            if len(rest) > 1:
                self.log.warning("READY from %s carried %d extra frame(s), ignored",
                                 decode(worker_addr), len(rest) - 1)
            else:
                self.log.debug("Received READY signal from %s BE", decode(worker_addr))
            return

        try:
            client_addr, reply = strip_address(rest)
        except MalformedEnvelope as exc:
            self._drop("backend", exc)
            return

        self.log.debug("Received task, done by %s, to be sent to %s",
                       decode(worker_addr), decode(client_addr))
        self.frontend.send(wrap_address(client_addr, reply))
        self.reply_count += 1

        if self.pending is not None:
            self.pending -= 1
            if self.pending <= 0:
                self.log.info("All pending requests answered")
                self.stop()

    def handle_frontend(self, msg):
        try:
            client_addr, request = strip_address(msg)
        except MalformedEnvelope as exc:
            self._drop("frontend", exc)
            return

        worker_addr = self.workers.next()
        self.backend.send(wrap_address(worker_addr, wrap_address(client_addr, request)))

        self.task_count += 1
        self.worker_stat[worker_addr] = self.worker_stat.get(worker_addr, 0) + 1
        self.log.debug("Sent request from %s to %s (%d idle left)",
                       decode(client_addr), decode(worker_addr), len(self.workers))

    def _admit(self, worker_addr):
        if worker_addr in self.unique_workers:
            return True
        if self.max_workers is not None and len(self.unique_workers) >= self.max_workers:
            self.dropped += 1
            self.log.warning("Worker %s would exceed pool of %d workers, dropped",
                             decode(worker_addr), self.max_workers)
            return False
        self.unique_workers.add(worker_addr)
        return True

    def _drop(self, side, exc):
        self.dropped += 1
        self.log.warning("Dropped malformed %s message: %s", side, exc)


def _as_channel(channel):
    if isinstance(channel, zmq.Socket):
        return Channel(channel)
    return channel
