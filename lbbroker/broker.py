"""
Standalone broker process: binds the client and worker sockets and routes
between them until interrupted.
"""
import argparse
import logging
import signal
import threading

import zmq

from .constants import BACKEND_PORT, FRONTEND_PORT, LOG_FORMAT, LOG_LEVEL, POLL_TIMEOUT
from .lruqueue import LRUQueue
from .transport import Channel

log = logging.getLogger(__name__)


def serve(frontend_url, backend_url, timeout=POLL_TIMEOUT, context=None):
    """Run the broker loop with no request limit.

    SIGINT/SIGTERM (when called from the main thread) stop the loop; the
    sockets are then closed, and the context terminated if serve created it.
    """
    own_context = context is None
    if own_context:
        context = zmq.Context()

    frontend = Channel.bind(context, frontend_url)
    backend = Channel.bind(context, backend_url)
    queue = LRUQueue(backend, frontend, timeout=timeout)

    previous = {}
    if threading.current_thread() is threading.main_thread():
        def shutdown(signum, frame):
            log.info("Received signal %s, stopping broker", signum)
            queue.stop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, shutdown)

    log.info("Broker is started: clients on %s, workers on %s", frontend_url, backend_url)
    try:
        queue.run()
    finally:
        frontend.close()
        backend.close()
        if own_context:
            context.term()
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)
    return queue


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Load-balancing request/reply broker.")
    p.add_argument("--frontend", default="tcp://*:{}".format(FRONTEND_PORT), help="Client-facing bind url")
    p.add_argument("--backend", default="tcp://*:{}".format(BACKEND_PORT), help="Worker-facing bind url")
    p.add_argument("--timeout", type=int, default=POLL_TIMEOUT, help="Poll timeout in ms")
    p.add_argument("--log-level", default=LOG_LEVEL, help="Logging level")
    return p.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)
    serve(args.frontend, args.backend, timeout=args.timeout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
