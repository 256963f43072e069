"""
Tests for HTTP11Transport over the mock network backend.
"""

import asyncio
import json

import pytest

from pathfetch.exceptions import ConfigurationError, ConnectionError, ProtocolError, TimeoutError
from pathfetch.network.mock import MockNetworkBackend
from pathfetch.network.utils import format_host_header, parse_url
from pathfetch.options import HTTPOptions
from pathfetch.transport import HTTP11Transport, encode_body


class TestURLHelpers:
    """Test URL parsing helpers used by the transport."""

    def test_parse_url(self) -> None:
        assert parse_url("https://api.test:8443/v1/items?a=1") == (
            "https", "api.test", 8443, "/v1/items?a=1",
        )
        assert parse_url("http://api.test") == ("http", "api.test", 80, "/")

    def test_parse_url_rejects(self) -> None:
        with pytest.raises(ValueError):
            parse_url("ftp://api.test/")
        with pytest.raises(ValueError):
            parse_url("http:///path")

    def test_format_host_header(self) -> None:
        assert format_host_header("api.test", 80, "http") == "api.test"
        assert format_host_header("api.test", 443, "https") == "api.test"
        assert format_host_header("api.test", 8080, "http") == "api.test:8080"
        assert format_host_header("::1", 8080, "http") == "[::1]:8080"


class TestEncodeBody:
    """Test request body encoding."""

    def test_bytes_and_str(self) -> None:
        headers = []
        assert encode_body(b"raw", headers) == b"raw"
        assert encode_body("tëxt", headers) == "tëxt".encode("utf-8")
        assert encode_body(None, headers) == b""
        assert headers == []

    def test_json_body(self) -> None:
        headers = []
        assert json.loads(encode_body({"a": [1, 2]}, headers)) == {"a": [1, 2]}
        assert headers == [("Content-Type", "application/json")]

    def test_json_body_keeps_content_type(self) -> None:
        headers = [("content-type", "application/vnd.api+json")]
        encode_body([1], headers)
        assert headers == [("content-type", "application/vnd.api+json")]

    def test_unsupported_body(self) -> None:
        with pytest.raises(ConfigurationError):
            encode_body(object(), [])


class TestHTTP11Transport:
    """Test exchanges through the transport."""

    @pytest.fixture
    def transport(self, mock_backend):
        return HTTP11Transport(backend=mock_backend)

    def test_build_request_headers(self, transport) -> None:
        request = transport.build_request(
            "http://api.test:8080/users?page=2",
            HTTPOptions(method="post", headers={"accept": "application/json", "X-Id": "7"}),
            {"name": "bob"},
        )

        assert request.method == b"POST"
        assert request.target == b"/users?page=2"
        assert request.get_header("Host") == b"api.test:8080"
        assert request.get_header("Accept") == b"application/json"
        assert request.get_header("X-Id") == b"7"
        assert request.get_header("Content-Type") == b"application/json"
        assert request.get_header("Content-Length") == str(len(request.body)).encode()

    def test_build_request_without_body(self, transport) -> None:
        request = transport.build_request("http://api.test/", HTTPOptions(), None)
        assert request.method == b"GET"
        assert request.get_header("Content-Length") is None
        assert request.get_header("User-Agent") == HTTP11Transport.USER_AGENT.encode()

    def test_build_request_invalid_url(self, transport) -> None:
        with pytest.raises(ConfigurationError):
            transport.build_request("/relative", HTTPOptions(), None)

    @pytest.mark.asyncio
    async def test_exchange(self, transport, mock_backend, raw_response) -> None:
        mock_backend.queue_response("api.test", 80, raw_response(
            200, body=b'{"pong": true}', headers=[("Content-Type", "application/json")],
        ))

        response = await transport.exchange("http://api.test/ping", HTTPOptions(method="GET"))

        assert response.ok
        assert response.url == "http://api.test/ping"
        assert await response.json() == {"pong": True}
        assert mock_backend.last_connection.is_closed
        assert mock_backend.last_connection.written_data.startswith(b"GET /ping HTTP/1.1")

    @pytest.mark.asyncio
    async def test_exchange_with_body(self, transport, mock_backend, raw_response) -> None:
        mock_backend.queue_response("api.test", 80, raw_response(201, "Created"))

        response = await transport.exchange(
            "http://api.test/items", HTTPOptions(method="PUT"), "payload",
        )

        assert response.status == 201
        assert mock_backend.last_connection.written_data.endswith(b"payload")

    @pytest.mark.asyncio
    async def test_https_upgrades_to_tls(self, transport, mock_backend, raw_response) -> None:
        mock_backend.queue_response("secure.test", 443, raw_response(204, "No Content"))

        response = await transport.exchange("https://secure.test/", HTTPOptions(method="GET"))

        assert response.status == 204
        assert mock_backend.tls_hosts == ["secure.test"]
        assert mock_backend.last_connection.get_extra_info("ssl_object") is True

    @pytest.mark.asyncio
    async def test_one_connection_per_exchange(self, transport, mock_backend, raw_response) -> None:
        for _ in range(2):
            mock_backend.queue_response("api.test", 80, raw_response(200))

        await transport.exchange("http://api.test/a", HTTPOptions(method="GET"))
        await transport.exchange("http://api.test/b", HTTPOptions(method="GET"))

        assert len(mock_backend.connections) == 2

    @pytest.mark.asyncio
    async def test_connection_refused(self, transport) -> None:
        with pytest.raises(ConnectionError):
            await transport.exchange("http://nowhere.test/", HTTPOptions(method="GET"))

    @pytest.mark.asyncio
    async def test_exchange_timeout(self) -> None:
        class SlowBackend(MockNetworkBackend):
            async def connect_tcp(self, host, port, timeout=None):
                stream = await super().connect_tcp(host, port, timeout)

                async def never_answers(max_bytes=None):
                    await asyncio.sleep(10)

                stream.read = never_answers
                return stream

        backend = SlowBackend()
        backend.queue_response("api.test", 80, b"")
        transport = HTTP11Transport(backend=backend)

        with pytest.raises(TimeoutError):
            await transport.exchange("http://api.test/", HTTPOptions(method="GET", timeout=0.01))

    @pytest.mark.asyncio
    async def test_tls_failure_closes_tcp_stream(self) -> None:
        class FailingTLSBackend(MockNetworkBackend):
            async def connect_tls(self, stream, host, port, timeout=None, alpn_protocols=None):
                raise OSError("handshake failed")

        backend = FailingTLSBackend()
        backend.queue_response("secure.test", 443, b"")
        transport = HTTP11Transport(backend=backend)

        with pytest.raises(ConnectionError, match="handshake failed"):
            await transport.exchange("https://secure.test/", HTTPOptions(method="GET"))
        assert backend.last_connection.is_closed

    @pytest.mark.asyncio
    async def test_timeout_during_tls_closes_tcp_stream(self) -> None:
        class StalledTLSBackend(MockNetworkBackend):
            async def connect_tls(self, stream, host, port, timeout=None, alpn_protocols=None):
                await asyncio.sleep(10)

        backend = StalledTLSBackend()
        backend.queue_response("secure.test", 443, b"")
        transport = HTTP11Transport(backend=backend)

        with pytest.raises(TimeoutError):
            await transport.exchange("https://secure.test/", HTTPOptions(method="GET", timeout=0.01))
        assert backend.last_connection.is_closed


class TestRedirects:
    """Test redirect handling in HTTP11Transport."""

    @pytest.fixture
    def transport(self, mock_backend):
        return HTTP11Transport(backend=mock_backend)

    @pytest.fixture
    def redirect(self, raw_response):
        def _create(status: int, location: str) -> bytes:
            return raw_response(status, "Redirect", headers=[("Location", location)])
        return _create

    @pytest.mark.asyncio
    async def test_follows_location(self, transport, mock_backend, raw_response, redirect) -> None:
        mock_backend.queue_response("api.test", 80, redirect(302, "/new"))
        mock_backend.queue_response("api.test", 80, raw_response(200, body=b'{"moved": true}'))

        response = await transport.exchange("http://api.test/old", HTTPOptions(method="GET"))

        assert response.status == 200
        assert response.url == "http://api.test/new"
        assert await response.json() == {"moved": True}
        assert len(mock_backend.connections) == 2
        assert all(stream.is_closed for stream in mock_backend.connections)
        assert mock_backend.connections[1].written_data.startswith(b"GET /new HTTP/1.1")

    @pytest.mark.asyncio
    async def test_cross_host_redirect(self, transport, mock_backend, raw_response, redirect) -> None:
        mock_backend.queue_response("api.test", 80, redirect(301, "https://secure.test/v2"))
        mock_backend.queue_response("secure.test", 443, raw_response(200))

        response = await transport.exchange("http://api.test/v1", HTTPOptions(method="GET"))

        assert response.url == "https://secure.test/v2"
        assert mock_backend.tls_hosts == ["secure.test"]
        assert b"host: secure.test" in mock_backend.last_connection.written_data.lower()

    @pytest.mark.asyncio
    async def test_see_other_switches_to_get(self, transport, mock_backend, raw_response, redirect) -> None:
        mock_backend.queue_response("api.test", 80, redirect(303, "/items/1"))
        mock_backend.queue_response("api.test", 80, raw_response(200))

        await transport.exchange("http://api.test/items", HTTPOptions(method="POST"), {"name": "bob"})

        written = mock_backend.last_connection.written_data
        assert written.startswith(b"GET /items/1 HTTP/1.1")
        assert b"bob" not in written

    @pytest.mark.asyncio
    async def test_temporary_redirect_keeps_method_and_body(
        self, transport, mock_backend, raw_response, redirect,
    ) -> None:
        mock_backend.queue_response("api.test", 80, redirect(307, "/v2/items"))
        mock_backend.queue_response("api.test", 80, raw_response(201, "Created"))

        response = await transport.exchange("http://api.test/items", HTTPOptions(method="PUT"), "payload")

        assert response.status == 201
        written = mock_backend.last_connection.written_data
        assert written.startswith(b"PUT /v2/items HTTP/1.1")
        assert written.endswith(b"payload")

    @pytest.mark.asyncio
    async def test_redirects_disabled(self, transport, mock_backend, redirect) -> None:
        mock_backend.queue_response("api.test", 80, redirect(302, "/new"))

        response = await transport.exchange(
            "http://api.test/old", HTTPOptions(method="GET", follow_redirects=False),
        )

        assert response.status == 302
        assert response.get_header("Location") == b"/new"
        assert len(mock_backend.connections) == 1

    @pytest.mark.asyncio
    async def test_redirect_without_location(self, transport, mock_backend, raw_response) -> None:
        mock_backend.queue_response("api.test", 80, raw_response(304, "Not Modified"))

        response = await transport.exchange("http://api.test/cached", HTTPOptions(method="GET"))

        assert response.status == 304

    @pytest.mark.asyncio
    async def test_redirect_limit(self, mock_backend, redirect) -> None:
        transport = HTTP11Transport(backend=mock_backend)
        transport.MAX_REDIRECTS = 2
        for _ in range(3):
            mock_backend.queue_response("api.test", 80, redirect(302, "/loop"))

        with pytest.raises(ProtocolError, match="Exceeded 2 redirects"):
            await transport.exchange("http://api.test/loop", HTTPOptions(method="GET"))
        assert len(mock_backend.connections) == 3
