"""
Load-balancing broker with clients and workers shown in-process.

Each client and worker runs in its own thread and talks to the broker only
through its socket, so conceptually each is a separate process.
"""
import argparse
import logging
import threading
import time
from collections import namedtuple

import zmq

from .client import client_task
from .constants import (BACKEND_URL, FRONTEND_URL, LOG_FORMAT, LOG_LEVEL,
                        NBR_CLIENTS, NBR_WORKERS, POLL_TIMEOUT, READY_TIMEOUT)
from .errors import TransportError
from .lruqueue import LRUQueue
from .transport import Channel, connect_url
from .worker import worker_task

log = logging.getLogger(__name__)

Simulation = namedtuple("Simulation", ["queue", "replies"])


def simulate(clients=NBR_CLIENTS, workers=NBR_WORKERS, frontend_url=FRONTEND_URL,
             backend_url=BACKEND_URL, timeout=POLL_TIMEOUT, request=b"Hello",
             requests_per_client=1, handler=None, ready_timeout=READY_TIMEOUT):
    """Run ``clients`` clients against ``workers`` workers until every request is answered.

    Returns the finished broker loop and a dict mapping client number to
    the reply frames it received.

    Raises TransportError if the workers have not all announced READY
    within ``ready_timeout`` seconds.
    """
    if clients < 0 or workers < 0 or requests_per_client < 0:
        raise ValueError("clients, workers and requests_per_client must not be negative")
    if workers < 1 and clients * requests_per_client > 0:
        raise ValueError("at least one worker is needed to answer client requests")

    context = zmq.Context()
    frontend = Channel.bind(context, frontend_url)
    backend = Channel.bind(context, backend_url)
    queue = LRUQueue(backend, frontend, timeout=timeout,
                     pending=clients * requests_per_client, max_workers=workers)
    replies = {}

    def run_client(i):
        replies[i] = client_task(i, context, connect_url(frontend_url), request, requests_per_client)

    def start(task, *args):
        thread = threading.Thread(target=task, args=args)
        thread.daemon = True
        thread.start()
        return thread

    worker_threads = [start(worker_task, i, context, connect_url(backend_url), handler)
                      for i in range(workers)]

    try:
        # Let every worker announce itself before any client shows up
        deadline = time.monotonic() + ready_timeout
        while len(queue.workers) < workers:
            if time.monotonic() > deadline:
                raise TransportError("only %d of %d workers announced READY within %ss"
                                     % (len(queue.workers), workers, ready_timeout))
            queue.poll_backend()
        log.info("%d workers ready, starting %d clients", len(queue.workers), clients)

        client_threads = [start(run_client, i) for i in range(clients)]
        queue.run()
        for thread in client_threads:
            thread.join()
    finally:
        frontend.close()
        backend.close()
        # workers leave their loop on ContextTerminated
        context.term()

    for thread in worker_threads:
        thread.join()
    return Simulation(queue, replies)


def main(argv=None):
    p = argparse.ArgumentParser(description="In-process load-balancing broker demo.")
    p.add_argument("--clients", type=int, default=NBR_CLIENTS, help="Number of client threads")
    p.add_argument("--workers", type=int, default=NBR_WORKERS, help="Number of worker threads")
    p.add_argument("--requests", type=int, default=1, help="Requests per client")
    p.add_argument("--frontend", default=FRONTEND_URL, help="Client-facing bind url")
    p.add_argument("--backend", default=BACKEND_URL, help="Worker-facing bind url")
    p.add_argument("--timeout", type=int, default=POLL_TIMEOUT, help="Poll timeout in ms")
    p.add_argument("--log-level", default=LOG_LEVEL, help="Logging level")
    args = p.parse_args(argv)

    if not logging.getLogger().handlers:
        logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)

    result = simulate(args.clients, args.workers, args.frontend, args.backend,
                      args.timeout, requests_per_client=args.requests)
    queue = result.queue
    for i in sorted(result.replies):
        print("Client-{}: {}".format(i, [b" ".join(reply).decode('utf-8', 'replace')
                                         for reply in result.replies[i]]))
    print("Sent a total of {} tasks to {} unique workers".format(queue.task_count, len(queue.unique_workers)))
    print("stats: {}".format({k.decode('utf-8', 'replace'): v for k, v in queue.worker_stat.items()}))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
