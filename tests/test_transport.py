"""Unit tests for webfry.transport."""

import asyncio
import select
import socket
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import httpx
import pytest

from fakes import FakeTransport
from webfry import WebfryClient
from webfry.errors import WebfryApiError, WebfryTimeoutError, WebfryTransportError
from webfry.transport import HttpxTransport, RawResponse, decode_payload, invoke


URL = "https://webfry.test/api/entropy"
HEADERS = {"Content-Type": "application/json"}


class TestRawResponse:
    """Status and body helpers on RawResponse."""

    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_ok_for_2xx(self, status):
        assert RawResponse(status).ok

    @pytest.mark.parametrize("status", [101, 301, 400, 401, 404, 500, 503])
    def test_not_ok_otherwise(self, status):
        assert not RawResponse(status).ok

    def test_text_decodes_utf8(self):
        assert RawResponse(200, content="héllo".encode("utf-8")).text == "héllo"

    def test_text_replaces_invalid_bytes(self):
        assert RawResponse(200, content=b"ok\xff").text == "ok�"


class TestDecodePayload:
    """Fail-soft JSON decoding."""

    def test_empty_body_is_none(self):
        assert decode_payload("") is None

    @pytest.mark.parametrize("text", ["<html>502</html>", "{", "not json", "{'a': 1}"])
    def test_invalid_json_is_none(self, text):
        assert decode_payload(text) is None

    def test_object(self):
        assert decode_payload('{"api_key": "abc123"}') == {"api_key": "abc123"}

    def test_nested_values(self):
        text = '{"results": [{"hash": "x", "found": false}], "n": null}'
        assert decode_payload(text) == {
            "results": [{"hash": "x", "found": False}],
            "n": None,
        }

    def test_deep_nesting_is_none(self):
        assert decode_payload("[" * 100000 + "]" * 100000) is None

    @pytest.mark.parametrize(
        "text", ["NaN", "Infinity", "-Infinity", '{"score": NaN}', "[1, Infinity]"]
    )
    def test_non_finite_constants_are_none(self, text):
        assert decode_payload(text) is None

    def test_large_numbers_still_parse(self):
        assert decode_payload("[1e308, -1e308]") == [1e308, -1e308]


class TestInvoke:
    """Deadline handling and failure mapping in invoke()."""

    @pytest.mark.asyncio
    async def test_returns_response(self):
        transport = FakeTransport([RawResponse(200, "OK", b'{"entropy": 3.5}')])

        response = await invoke(
            transport, "POST", URL, headers=HEADERS, body=b"{}", timeout_s=1.0
        )

        assert response.status_code == 200
        assert response.content == b'{"entropy": 3.5}'
        assert transport.last.method == "POST"
        assert transport.last.url == URL
        assert transport.last.body == b"{}"
        assert transport.last.timeout_s == 1.0

    @pytest.mark.asyncio
    async def test_timeout_cancels_transport(self):
        transport = FakeTransport(hang=True)

        started = time.monotonic()
        with pytest.raises(WebfryTimeoutError) as exc_info:
            await invoke(
                transport, "POST", URL, headers=HEADERS, timeout_s=0.05
            )
        elapsed = time.monotonic() - started

        assert "0.05" in str(exc_info.value)
        assert exc_info.value.timeout_s == 0.05
        assert exc_info.value.status == 0
        assert transport.cancelled
        assert 0.04 <= elapsed < 2.0

    @pytest.mark.asyncio
    async def test_caller_cancellation_cancels_transport(self):
        transport = FakeTransport(hang=True)

        task = asyncio.ensure_future(
            invoke(transport, "POST", URL, headers=HEADERS, timeout_s=30.0)
        )
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0.01)
        assert transport.cancelled

    @pytest.mark.asyncio
    async def test_os_error_becomes_transport_error(self):
        cause = ConnectionRefusedError("connection refused")
        transport = FakeTransport(error=cause)

        with pytest.raises(WebfryTransportError) as exc_info:
            await invoke(transport, "POST", URL, headers=HEADERS, timeout_s=1.0)

        assert exc_info.value.status == 0
        assert exc_info.value.__cause__ is cause
        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_webfry_errors_pass_through(self):
        error = WebfryApiError("teapot", status=418)
        transport = FakeTransport(error=error)

        with pytest.raises(WebfryApiError) as exc_info:
            await invoke(transport, "POST", URL, headers=HEADERS, timeout_s=1.0)

        assert exc_info.value is error


def _mock_transport(handler):
    return HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestHttpxTransport:
    """HttpxTransport on top of httpx.MockTransport."""

    @pytest.mark.asyncio
    async def test_sends_request_and_buffers_body(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, content=b'{"hash": "abc"}')

        transport = _mock_transport(handler)
        raw = await transport.send(
            "POST", URL, headers=HEADERS, body=b'{"a": 1}', timeout_s=2.5
        )
        await transport.aclose()

        assert raw == RawResponse(201, "Created", b'{"hash": "abc"}')
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == URL
        assert request.content == b'{"a": 1}'
        assert request.headers["Content-Type"] == "application/json"
        assert request.extensions["timeout"]["read"] == 2.5

    @pytest.mark.asyncio
    async def test_unknown_status_has_empty_reason(self):
        transport = _mock_transport(lambda request: httpx.Response(299))

        raw = await transport.send(
            "POST", URL, headers=HEADERS, body=None, timeout_s=1.0
        )

        assert raw.reason == ""
        assert raw.content == b""

    @pytest.mark.asyncio
    async def test_httpx_timeout_maps_to_timeout_error(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        transport = _mock_transport(handler)

        with pytest.raises(WebfryTimeoutError) as exc_info:
            await transport.send(
                "POST", URL, headers=HEADERS, body=None, timeout_s=3.0
            )

        assert exc_info.value.timeout_s == 3.0

    @pytest.mark.asyncio
    async def test_connect_error_maps_to_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("dns failure", request=request)

        transport = _mock_transport(handler)

        with pytest.raises(WebfryTransportError, match="dns failure"):
            await transport.send(
                "POST", URL, headers=HEADERS, body=None, timeout_s=3.0
            )

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self):
        client = httpx.AsyncClient()
        await HttpxTransport(client).aclose()
        assert client.is_closed

    def test_creates_client_by_default(self):
        transport = HttpxTransport()
        assert isinstance(transport.client, httpx.AsyncClient)
        assert transport.client.follow_redirects


class _SlowHandler(BaseHTTPRequestHandler):
    """Holds each POST open, noting whether the client hangs up first."""

    delay_s = 5.0

    def do_POST(self):
        self.rfile.read(int(self.headers.get("Content-Length") or 0))
        self.server.received.set()

        deadline = time.monotonic() + self.delay_s
        while time.monotonic() < deadline:
            readable, _, _ = select.select([self.connection], [], [], 0.05)
            if readable and not self.connection.recv(1, socket.MSG_PEEK):
                self.server.disconnected.set()
                return

        body = b'{"late": true}'
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)
        self.server.completed.set()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def slow_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), _SlowHandler)
    server.daemon_threads = True
    server.received = threading.Event()
    server.disconnected = threading.Event()
    server.completed = threading.Event()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


def _local_url(server):
    host, port = server.server_address[:2]
    return f"http://{host}:{port}/api/user_info"


class TestCancellationReleasesConnection:
    """A cancelled request hangs up on the server instead of finishing."""

    @pytest.mark.asyncio
    async def test_caller_cancellation_closes_connection(self, slow_server):
        transport = HttpxTransport(httpx.AsyncClient(trust_env=False))
        task = asyncio.ensure_future(
            invoke(
                transport,
                "POST",
                _local_url(slow_server),
                headers=HEADERS,
                body=b"{}",
                timeout_s=10.0,
            )
        )
        assert await asyncio.to_thread(slow_server.received.wait, 2.0)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert await asyncio.to_thread(slow_server.disconnected.wait, 2.0)
        assert not slow_server.completed.is_set()
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_deadline_closes_connection(self, slow_server):
        transport = HttpxTransport(httpx.AsyncClient(trust_env=False))
        client = WebfryClient(
            api_key="k",
            base_url=f"http://127.0.0.1:{slow_server.server_address[1]}",
            timeout_s=0.3,
            transport=transport,
        )

        with pytest.raises(WebfryTimeoutError, match="0.3"):
            await client.user_info()

        assert await asyncio.to_thread(slow_server.disconnected.wait, 2.0)
        assert not slow_server.completed.is_set()
        await transport.aclose()


class TestUndecodableBodies:
    """Bodies the decoder rejects reach callers as None, never as a crash."""

    DEEP = "[" * 100000 + "]" * 100000

    @pytest.mark.asyncio
    async def test_deeply_nested_success_body_is_none(self):
        client = WebfryClient(
            api_key="k",
            transport=FakeTransport([RawResponse(200, "OK", self.DEEP.encode())]),
        )

        assert await client.user_info() is None

    @pytest.mark.asyncio
    async def test_deeply_nested_error_body_uses_status_text(self):
        client = WebfryClient(
            api_key="k",
            transport=FakeTransport(
                [RawResponse(502, "Bad Gateway", self.DEEP.encode())]
            ),
        )

        with pytest.raises(WebfryApiError) as exc_info:
            await client.user_info()

        assert exc_info.value.status == 502
        assert exc_info.value.message == "Bad Gateway"
        assert exc_info.value.payload is None

    @pytest.mark.asyncio
    async def test_nan_body_is_none(self):
        client = WebfryClient(
            api_key="k",
            transport=FakeTransport([RawResponse(200, "OK", b'{"score": NaN}')]),
        )

        assert await client.entropy("pw") is None
