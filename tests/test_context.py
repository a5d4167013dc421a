import socket
import threading
import time

import pytest
import requests

from powermax_client import ClientOptions, PowerMaxClient, RequestContext
from powermax_client.context import call_deadline, run_bounded
from powermax_client.exceptions import TransportError

HOST = "https://unisphere:8443"

RESPONSE_HEAD = (
    b"HTTP/1.1 200 OK\r\n"
    b"Content-Type: application/json\r\n"
    b"Content-Length: 40\r\n"
    b"\r\n"
)


class SlowServer:
    """One-shot HTTP server on localhost that answers with ``script``."""

    def __init__(self, script) -> None:
        self.release = threading.Event()
        self._script = script
        self._listener = socket.create_server(("127.0.0.1", 0))
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    @property
    def url(self) -> str:
        host, port = self._listener.getsockname()[:2]
        return f"http://{host}:{port}"

    def _serve(self) -> None:
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        with conn:
            received = b""
            while b"\r\n\r\n" not in received:
                chunk = conn.recv(4096)
                if not chunk:
                    return
                received += chunk
            try:
                self._script(conn, self.release)
            except OSError:
                # The client shut the connection down.
                return

    def close(self) -> None:
        self.release.set()
        self._listener.close()
        self._thread.join(timeout=5)


def stall_before_headers(conn, release):
    release.wait(4)


def stall_after_first_byte(conn, release):
    conn.sendall(RESPONSE_HEAD + b"{")
    release.wait(4)


def trickle_body(conn, release):
    conn.sendall(RESPONSE_HEAD)
    for _ in range(40):
        if release.wait(0.2):
            return
        conn.sendall(b" ")


@pytest.fixture
def slow_server():
    servers: list[SlowServer] = []

    def start(script) -> SlowServer:
        server = SlowServer(script)
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()


def local_client(url: str, **options) -> PowerMaxClient:
    session = requests.Session()
    session.trust_env = False
    return PowerMaxClient(url, ClientOptions(**options), session=session)


def test_cancelled_context_sends_nothing(requests_mock):
    client = PowerMaxClient(HOST)
    requests_mock.get(f"{HOST}/items", json={})
    context = RequestContext()
    context.cancel()

    with pytest.raises(TransportError, match="cancelled"):
        client.get("/items", context=context)

    assert requests_mock.called is False


def test_expired_deadline_sends_nothing(requests_mock):
    client = PowerMaxClient(HOST)
    requests_mock.get(f"{HOST}/items", json={})

    with pytest.raises(TransportError, match="deadline"):
        client.get("/items", context=RequestContext(deadline=time.monotonic() - 1))

    assert requests_mock.called is False


def test_deadline_narrows_request_timeout(requests_mock):
    client = PowerMaxClient(HOST, ClientOptions(timeout=30))
    matcher = requests_mock.get(f"{HOST}/items", json={})

    client.get("/items", context=RequestContext.with_timeout(2))

    assert 0 < matcher.last_request.timeout <= 2


def test_deadline_applies_without_client_timeout(requests_mock):
    client = PowerMaxClient(HOST)
    matcher = requests_mock.get(f"{HOST}/items", json={})

    client.get("/items", context=RequestContext.with_timeout(5))

    assert 0 < matcher.last_request.timeout <= 5


def test_context_closes_registered_responses_on_cancel():
    context = RequestContext()
    closed: list[str] = []

    handle = context.register(lambda: closed.append("first"))
    other = context.register(lambda: closed.append("second"))
    context.unregister(other)
    context.cancel()

    assert handle
    assert closed == ["first"]
    assert context.cancelled


def test_register_after_cancel_closes_immediately():
    context = RequestContext()
    context.cancel()
    closed: list[bool] = []

    assert context.register(lambda: closed.append(True)) == 0
    assert closed == [True]


def test_bound_timeout_without_deadline():
    context = RequestContext()

    assert context.remaining() is None
    assert context.bound_timeout(None) is None
    assert context.bound_timeout(4.0) == 4.0
    context.raise_if_done()


def test_successful_call_with_context(requests_mock):
    client = PowerMaxClient(HOST)
    requests_mock.get(f"{HOST}/items", json={"ok": True})

    assert client.get("/items", resp=dict, context=RequestContext.with_timeout(10)) == {"ok": True}


@pytest.mark.parametrize("script", [stall_before_headers, stall_after_first_byte], ids=["headers", "body"])
def test_cancel_aborts_stalled_exchange(slow_server, script):
    server = slow_server(script)
    client = local_client(server.url)
    context = RequestContext()
    timer = threading.Timer(0.3, context.cancel)
    timer.start()
    started = time.monotonic()

    with pytest.raises(TransportError, match="cancelled"):
        client.get("/x", resp=dict, context=context)

    timer.cancel()
    assert time.monotonic() - started < 1.5


def test_cancel_aborts_raw_response_wait(slow_server):
    server = slow_server(stall_before_headers)
    client = local_client(server.url)
    context = RequestContext()
    threading.Timer(0.3, context.cancel).start()
    started = time.monotonic()

    with pytest.raises(TransportError, match="cancelled"):
        client.do_and_get_response_body("GET", "/x", context=context)

    assert time.monotonic() - started < 1.5


def test_deadline_bounds_trickling_body(slow_server):
    server = slow_server(trickle_body)
    client = local_client(server.url)
    started = time.monotonic()

    with pytest.raises(TransportError, match="deadline"):
        client.get("/x", resp=dict, context=RequestContext.with_timeout(1.0))

    assert time.monotonic() - started < 2.5


def test_client_timeout_bounds_whole_request(slow_server):
    server = slow_server(trickle_body)
    client = local_client(server.url, timeout=1.0)
    started = time.monotonic()

    with pytest.raises(TransportError, match="deadline"):
        client.get("/x", resp=dict)

    assert time.monotonic() - started < 2.5


def test_call_deadline_takes_the_earlier_limit():
    context = RequestContext(deadline=time.monotonic() + 100)

    assert call_deadline(None, None) is None
    assert call_deadline(context, None) == context.deadline
    assert call_deadline(context, 1.0) < context.deadline
    assert call_deadline(RequestContext(deadline=time.monotonic() + 0.5), 60.0) < time.monotonic() + 1


def test_work_runs_inline_without_bounds():
    assert run_bounded(threading.current_thread, context=None, deadline=None) is threading.current_thread()


def test_late_result_is_discarded_after_cancel():
    context = RequestContext()
    gate = threading.Event()
    discarded: list[str] = []
    threading.Timer(0.1, context.cancel).start()

    with pytest.raises(TransportError, match="cancelled"):
        run_bounded(
            lambda: "late" if gate.wait(5) else "never",
            context=context,
            deadline=None,
            discard=discarded.append,
        )

    gate.set()
    wait_until = time.monotonic() + 5
    while not discarded and time.monotonic() < wait_until:
        time.sleep(0.01)
    assert discarded == ["late"]
