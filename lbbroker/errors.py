class BrokerError(Exception):
    """Base class for broker errors."""


class MalformedEnvelope(BrokerError, ValueError):
    """A message does not have the address/delimiter layout it should."""

    def __init__(self, message, frames=None):
        super(MalformedEnvelope, self).__init__(message)
        self.frames = frames


class EmptyWorkerQueue(BrokerError, IndexError):
    """next() was called on a queue with no idle workers."""


class TransportError(BrokerError):
    """Sending or receiving on a channel failed."""
