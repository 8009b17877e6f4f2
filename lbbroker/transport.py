import logging

import zmq

from .errors import TransportError

log = logging.getLogger(__name__)


class Channel(object):
    """One side of the broker: a socket with a bounded-wait receive."""

    def __init__(self, socket):
        self.socket = socket
        self.poller = zmq.Poller()
        self.poller.register(socket, zmq.POLLIN)

    @classmethod
    def bind(cls, context, url, socket_type=zmq.ROUTER):
        socket = context.socket(socket_type)
        socket.bind(url)
        log.info("Bound %s", url)
        return cls(socket)

    @classmethod
    def connect(cls, context, url, socket_type=zmq.ROUTER):
        socket = context.socket(socket_type)
        socket.connect(url)
        return cls(socket)

    def try_receive(self, timeout):
        """Next multipart message, or None if nothing arrived within timeout ms."""
        try:
            socks = dict(self.poller.poll(timeout))
            if socks.get(self.socket) == zmq.POLLIN:
                return self.socket.recv_multipart()
        except zmq.ContextTerminated:
            raise
        except zmq.ZMQError as exc:
            raise TransportError("receive failed: %s" % exc) from exc
        return None

    def send(self, frames):
        try:
            self.socket.send_multipart(list(frames))
        except zmq.ContextTerminated:
            raise
        except zmq.ZMQError as exc:
            raise TransportError("send failed: %s" % exc) from exc

    def close(self, linger=0):
        if self.socket.closed:
            return
        self.poller.unregister(self.socket)
        self.socket.close(linger=linger)


def connect_url(url):
    """Turn a bind url like tcp://*:7000 into one a peer can connect to."""
    return url.replace('*', 'localhost')
