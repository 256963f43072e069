"""
Transports for pathfetch.

A Transport performs one HTTP exchange for the client: given the
resolved URL, the effective options and the body, it returns a
Response descriptor. HTTP11Transport is the default implementation;
it opens a fresh connection per exchange and never pools.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Tuple
from urllib.parse import urljoin

from .http11 import HTTP11Connection
from .http_primitives import Request, Response
from .network import AsyncioNetworkBackend, NetworkBackend, NetworkStream
from .network.utils import format_host_header, parse_url
from .options import HTTPOptions
from .exceptions import (
    ConfigurationError,
    ConnectionError,
    HTTPClientError,
    ProtocolError,
    TimeoutError,
)

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Interface for performing a single HTTP exchange."""

    @abstractmethod
    async def exchange(self, url: str, options: HTTPOptions, body: Any = None) -> Response:
        """
        Perform an HTTP exchange.

        Args:
            url: Absolute request URL
            options: Effective options (method, headers, timeout, ...)
            body: Request body, or None

        Returns:
            The response descriptor
        """


def encode_body(body: Any, headers: List[Tuple[str, str]]) -> bytes:
    """
    Encode a request body to bytes.

    Strings are encoded as UTF-8 and bytes pass through. Mappings and
    lists are sent as JSON, adding a Content-Type header if none is set.
    """
    if body is None:
        return b""
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (Mapping, list, tuple)):
        if not any(name.lower() == "content-type" for name, _ in headers):
            headers.append(("Content-Type", "application/json"))
        return json.dumps(body).encode("utf-8")
    raise ConfigurationError(f"Unsupported body type: {type(body).__name__}")


class HTTP11Transport(Transport):
    """
    HTTP/1.1 transport over a NetworkBackend.

    One connection is opened per exchange, and per redirect hop, and
    closed once the response body has been read.
    """

    USER_AGENT = "pathfetch/0.1.0"
    DEFAULT_CONNECT_TIMEOUT = 10.0
    ALPN_PROTOCOLS = ["http/1.1"]
    MAX_REDIRECTS = 20
    REDIRECT_STATUSES = (301, 302, 303, 307, 308)

    def __init__(
        self,
        backend: Optional[NetworkBackend] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            backend: Network backend (AsyncioNetworkBackend if None)
            connect_timeout: Timeout for TCP connect and TLS handshake
            read_timeout: Timeout for each read on the connection
            write_timeout: Timeout for each write on the connection
        """
        self._backend = backend or AsyncioNetworkBackend()
        self._connect_timeout = connect_timeout or self.DEFAULT_CONNECT_TIMEOUT
        self._read_timeout = read_timeout
        self._write_timeout = write_timeout

    def build_request(self, url: str, options: HTTPOptions, body: Any = None) -> Request:
        """Build the wire request for ``url`` from the effective options."""
        try:
            scheme, host, port, target = parse_url(url)
        except ValueError as e:
            raise ConfigurationError(f"Invalid URL ({url}): {e}", cause=e) from e

        headers: List[Tuple[str, str]] = [
            ("Host", format_host_header(host, port, scheme)),
            ("User-Agent", self.USER_AGENT),
            ("Accept", "*/*"),
        ]
        for name, value in (options.headers or {}).items():
            headers = [(n, v) for n, v in headers if n.lower() != name.lower()]
            headers.append((name, str(value)))

        payload = encode_body(body, headers)
        if payload or body is not None:
            headers.append(("Content-Length", str(len(payload))))

        return Request.create(method=options.method or "GET", target=target, headers=headers, body=payload)

    async def exchange(self, url: str, options: HTTPOptions, body: Any = None) -> Response:
        if options.timeout is None:
            return await self._follow(url, options, body)
        try:
            return await asyncio.wait_for(self._follow(url, options, body), timeout=options.timeout)
        except asyncio.TimeoutError as e:
            method = (options.method or "GET").upper()
            raise TimeoutError(f"{method} {url} timed out", timeout=options.timeout) from e

    async def _follow(self, url: str, options: HTTPOptions, body: Any) -> Response:
        """
        Exchange ``url`` and follow redirects unless disabled.

        Each hop uses a new connection. A 303, or a 301/302 answering a
        POST, is retried as a GET without a body; 307 and 308 keep the
        method and body.

        Raises:
            ProtocolError: If more than MAX_REDIRECTS redirects occur
        """
        follow = options.follow_redirects is not False
        for _ in range(self.MAX_REDIRECTS + 1):
            request = self.build_request(url, options, body)
            response = await self._exchange(url, request)

            location = response.get_header("Location")
            if not follow or response.status not in self.REDIRECT_STATUSES or location is None:
                return response

            next_url = urljoin(url, location.decode("latin-1"))
            logger.debug(f"{response.status} redirect from {url} to {next_url}")
            if response.status == 303 or (response.status in (301, 302) and request.method == b"POST"):
                if request.method != b"HEAD":
                    options = options.copy()
                    options.method = "GET"
                body = None
            url = next_url

        raise ProtocolError(f"Exceeded {self.MAX_REDIRECTS} redirects ({url})")

    async def _connect(self, scheme: str, host: str, port: int) -> NetworkStream:
        stream = await self._backend.connect_tcp(host, port, timeout=self._connect_timeout)
        if scheme != "https":
            return stream
        try:
            return await self._backend.connect_tls(
                stream,
                host,
                port,
                timeout=self._connect_timeout,
                alpn_protocols=self.ALPN_PROTOCOLS,
            )
        except BaseException:
            # covers cancellation by wait_for during the handshake
            await stream.aclose()
            raise

    async def _exchange(self, url: str, request: Request) -> Response:
        scheme, host, port, _ = parse_url(url)

        try:
            stream = await self._connect(scheme, host, port)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"Connecting to {host}:{port}", timeout=self._connect_timeout) from e
        except OSError as e:
            logger.error(f"Failed to connect to {host}:{port}: {e}")
            raise ConnectionError(f"Failed to connect to {host}:{port}: {e}", cause=e) from e

        connection = HTTP11Connection(
            stream,
            read_timeout=self._read_timeout,
            write_timeout=self._write_timeout,
        )
        try:
            return await connection.handle_request(request, url=url)
        except HTTPClientError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise
        except asyncio.TimeoutError as e:
            logger.error(f"Request to {url} timed out")
            raise TimeoutError(f"{request.method.decode()} {url} timed out") from e
        except (OSError, RuntimeError) as e:
            logger.error(f"Request to {url} failed: {e}")
            raise ConnectionError(str(e), cause=e) from e
