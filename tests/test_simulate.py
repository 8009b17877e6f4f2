import pytest

import lbbroker.simulate as simulate_module
from lbbroker.errors import TransportError
from lbbroker.simulate import main, simulate


def test_one_worker_one_client():
    result = simulate(clients=1, workers=1, frontend_url="inproc://f1", backend_url="inproc://b1",
                      timeout=10, request=b"Hello")
    queue = result.queue

    assert result.replies == {0: [[b"OK"]]}
    assert len(queue.workers) == 1
    assert queue.task_count == 1
    assert queue.pending == 0


def test_three_workers_ten_clients():
    result = simulate(clients=10, workers=3, frontend_url="inproc://f2", backend_url="inproc://b2",
                      timeout=10)
    queue = result.queue

    assert sorted(result.replies) == list(range(10))
    assert all(replies == [[b"OK"]] for replies in result.replies.values())
    assert sorted(queue.workers) == [b"Worker-0", b"Worker-1", b"Worker-2"]
    assert queue.unique_workers == {b"Worker-0", b"Worker-1", b"Worker-2"}
    assert queue.pending == 0
    assert queue.task_count == 10
    assert sum(queue.worker_stat.values()) == 10
    assert queue.dropped == 0


def test_repeated_requests_per_client():
    result = simulate(clients=2, workers=2, frontend_url="inproc://f3", backend_url="inproc://b3",
                      timeout=10, request=b"ping", requests_per_client=3,
                      handler=lambda request: [b"pong:" + request[0]])

    assert result.replies == {0: [[b"pong:ping"]] * 3, 1: [[b"pong:ping"]] * 3}
    assert result.queue.reply_count == 6
    assert len(result.queue.workers) == 2


def test_main_prints_summary(capsys):
    assert main(["--clients", "2", "--workers", "1", "--frontend", "inproc://f4",
                 "--backend", "inproc://b4", "--timeout", "10"]) == 0
    out = capsys.readouterr().out
    assert "Client-0: ['OK']" in out
    assert "Sent a total of 2 tasks to 1 unique workers" in out


def test_empty_handler_reply_still_answers_client():
    result = simulate(clients=2, workers=1, frontend_url="inproc://f5", backend_url="inproc://b5",
                      timeout=10, handler=lambda request: [])

    assert result.replies == {0: [[b"ERROR"]], 1: [[b"ERROR"]]}
    assert result.queue.dropped == 0
    assert result.queue.pending == 0


def test_failing_handler_still_answers_client():
    def handler(request):
        raise RuntimeError("boom")

    result = simulate(clients=1, workers=1, frontend_url="inproc://f6", backend_url="inproc://b6",
                      timeout=10, handler=handler)
    assert result.replies == {0: [[b"ERROR"]]}


@pytest.mark.parametrize("kwargs", [
    dict(clients=1, workers=0),
    dict(clients=-1, workers=1),
    dict(clients=1, workers=1, requests_per_client=-1),
])
def test_invalid_pool_sizes_are_rejected(kwargs):
    with pytest.raises(ValueError):
        simulate(frontend_url="inproc://f7", backend_url="inproc://b7", timeout=10, **kwargs)


def test_no_clients_and_no_workers_is_an_empty_run():
    result = simulate(clients=0, workers=0, frontend_url="inproc://f8", backend_url="inproc://b8",
                      timeout=10)
    assert result.replies == {}
    assert result.queue.task_count == 0


def test_worker_that_never_announces_ready_times_out(monkeypatch):
    monkeypatch.setattr(simulate_module, "worker_task", lambda *args: None)

    with pytest.raises(TransportError):
        simulate(clients=1, workers=1, frontend_url="inproc://f9", backend_url="inproc://b9",
                 timeout=10, ready_timeout=0.2)
