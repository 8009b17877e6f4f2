"""
Load-balancing request/reply broker over ZeroMQ.

Clients talk to the frontend, workers to the backend; the broker hands each
request to the worker that has been idle longest and routes the reply back
using the address envelope.
"""

__all__ = [
    "Envelope",
    "strip_address",
    "wrap_address",
    "WorkerQueue",
    "LRUQueue",
    "Channel",
    "BrokerError",
    "MalformedEnvelope",
    "EmptyWorkerQueue",
    "TransportError",
]

from .envelope import Envelope, strip_address, wrap_address
from .errors import BrokerError, EmptyWorkerQueue, MalformedEnvelope, TransportError
from .lruqueue import LRUQueue, WorkerQueue
from .transport import Channel
