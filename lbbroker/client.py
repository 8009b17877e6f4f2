import argparse
import logging
import threading

import zmq

from .constants import BROKER_HOST, FRONTEND_PORT, LOG_FORMAT, LOG_LEVEL, NBR_CLIENTS
from .errors import TransportError

log = logging.getLogger(__name__)

decode = lambda x: x.decode('utf-8', 'replace')


def client_task(ident, context, url, request=b"Hello", requests=1, timeout=None):
    """ Basic request-reply client using REQ socket

    Sends ``request`` (bytes or a list of frames) ``requests`` times, one
    cycle after the other, and returns the reply frames of each cycle.
    With ``timeout`` (ms) set, a missing reply raises TransportError.
    """
    frames = [request] if isinstance(request, bytes) else list(request)
    replies = []
    with context.socket(zmq.REQ) as socket:
        socket.setsockopt(zmq.LINGER, 0)
        if timeout is not None:
            socket.setsockopt(zmq.RCVTIMEO, timeout)
        # Set client identity. Makes tracing easier
        socket.identity = (u"Client-%s" % ident).encode('ascii')
        socket.connect(url)

        try:
            for _ in range(requests):
                socket.send_multipart(frames)
                try:
                    reply = socket.recv_multipart()
                except zmq.Again as exc:
                    raise TransportError("%s got no reply within %sms" % (decode(socket.identity), timeout)) from exc
                log.debug("%s: %s", decode(socket.identity), [decode(frame) for frame in reply])
                replies.append(reply)
        except zmq.ContextTerminated:
            return replies
    return replies


def main(argv=None):
    p = argparse.ArgumentParser(description="Load-balancing broker test client.")
    p.add_argument("--clients", type=int, default=NBR_CLIENTS, help="Number of client threads")
    p.add_argument("--requests", type=int, default=1, help="Requests per client")
    p.add_argument("--request", default="Hello", help="Request payload")
    p.add_argument("--host", default=BROKER_HOST, help="Broker host")
    p.add_argument("--port", default=FRONTEND_PORT, help="Broker frontend port")
    p.add_argument("--timeout", type=int, default=None, help="Reply timeout in ms")
    p.add_argument("--log-level", default=LOG_LEVEL, help="Logging level")
    args = p.parse_args(argv)

    if not logging.getLogger().handlers:
        logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    url_client = "tcp://{}:{}".format(args.host, args.port)
    context = zmq.Context.instance()
    results = {}

    def run(i):
        try:
            results[i] = client_task(i, context, url_client, args.request.encode('utf-8'),
                                     args.requests, args.timeout)
        except TransportError as exc:
            log.error("Client-%s: %s", i, exc)
            results[i] = None

    threads = [threading.Thread(target=run, args=(i,)) for i in range(args.clients)]
    for thread_c in threads:
        thread_c.start()
    for thread_c in threads:
        thread_c.join()
    context.term()

    for i in sorted(results):
        if results[i] is not None:
            print("Client-{}: {}".format(i, [b" ".join(reply).decode('utf-8', 'replace') for reply in results[i]]))
    return 0 if all(r is not None for r in results.values()) else 1


if __name__ == "__main__":
    raise SystemExit(main())
