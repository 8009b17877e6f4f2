import argparse
import logging
import os

import zmq

from .constants import BACKEND_PORT, BROKER_HOST, LOG_FORMAT, LOG_LEVEL, PPP_ERROR, PPP_READY
from .envelope import check_body, strip_address, wrap_address
from .errors import MalformedEnvelope

log = logging.getLogger(__name__)

decode = lambda x: x.decode('utf-8', 'replace')


def default_handler(request):
    return [b"OK"]


def handle_request(handler, request):
    """Run the handler and return reply frames that are safe to send.

    A handler that raises or returns something that cannot be sent as a
    reply body still answers the client, with a single PPP_ERROR frame.
    """
    try:
        return check_body(handler(request))
    except MalformedEnvelope as exc:
        log.error("Handler returned an unsendable reply: %s", exc)
    except Exception:  # noqa: BLE001
        log.exception("Handler failed on request %r", request)
    return [PPP_ERROR]


def worker_task(ident, context, url, handler=None, ready=PPP_READY):
    """ Worker using REQ socket to do LRU routing

    Announces ``ready`` once, then answers every request with
    ``handler(request_frames)`` until the context is terminated. Failed or
    invalid handler results are answered with PPP_ERROR.
    """
    handler = handler or default_handler
    with context.socket(zmq.REQ) as socket:
        socket.setsockopt(zmq.LINGER, 0)
        # set worker identity
        socket.identity = (u"Worker-%s" % ident).encode('ascii')
        socket.connect(url)

        try:
            # Tell the broker we are ready for work
            socket.send(ready)

            while True:
                client_addr, request = strip_address(socket.recv_multipart())
                log.debug("Received in %s: %s", decode(socket.identity),
                          [decode(frame) for frame in request])
                reply = handle_request(handler, list(request))
                socket.send_multipart(list(wrap_address(client_addr, reply)))
        except zmq.ContextTerminated:
            # context terminated so quit silently
            return


def main(argv=None):
    p = argparse.ArgumentParser(description="Load-balancing broker worker.")
    p.add_argument("--id", default=os.environ.get('WORKER_ID', '000'), help="Worker identity suffix")
    p.add_argument("--host", default=BROKER_HOST, help="Broker host")
    p.add_argument("--port", default=BACKEND_PORT, help="Broker backend port")
    p.add_argument("--log-level", default=LOG_LEVEL, help="Logging level")
    args = p.parse_args(argv)

    if not logging.getLogger().handlers:
        logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    url_worker = "tcp://{}:{}".format(args.host, args.port)
    log.info("Worker-%s connecting to %s", args.id, url_worker)
    context = zmq.Context.instance()
    try:
        worker_task(args.id, context, url_worker)
    except KeyboardInterrupt:
        log.info("Worker-%s interrupted", args.id)
    finally:
        context.term()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
