"""
HTTP/1.1 connection implementation for pathfetch.

This module implements the HTTP11Connection class that performs a
single HTTP/1.1 request/response exchange over a NetworkStream.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional

import h11

from .http_primitives import Request, Response
from .network.stream import NetworkStream
from .streams import ByteStream
from .exceptions import ConnectionError, ProtocolError

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of an HTTP/1.1 connection."""
    NEW = "new"           # Connection created, not yet used
    ACTIVE = "active"     # Exchange in progress
    CLOSED = "closed"     # Connection closed, cannot be reused


class HTTP11Connection:
    """
    HTTP/1.1 connection driven by h11.

    Each connection carries exactly one exchange: the request is sent,
    the response is read in full and the stream is closed.
    """

    DEFAULT_READ_TIMEOUT = 30.0
    DEFAULT_WRITE_TIMEOUT = 30.0
    READ_CHUNK_SIZE = 65536

    def __init__(
        self,
        stream: NetworkStream,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
    ):
        """
        Initialize HTTP/1.1 connection.

        Args:
            stream: The NetworkStream to use for communication
            read_timeout: Timeout for each read operation in seconds
            write_timeout: Timeout for each write operation in seconds
        """
        self._stream = stream
        self._h11_connection = h11.Connection(h11.CLIENT)
        self._state = ConnectionState.NEW

        self._read_timeout = read_timeout or self.DEFAULT_READ_TIMEOUT
        self._write_timeout = write_timeout or self.DEFAULT_WRITE_TIMEOUT

        self._bytes_sent = 0
        self._bytes_received = 0
        self._duration: Optional[float] = None

    async def handle_request(self, request: Request, url: str = "") -> Response:
        """
        Send a request and read the complete response.

        Args:
            request: The HTTP request to send
            url: The absolute URL, recorded on the response

        Returns:
            The response, with its body buffered in memory

        Raises:
            ConnectionError: If the connection was already used or closed
            ProtocolError: If the peer violates HTTP/1.1
            asyncio.TimeoutError: If a read or write times out
        """
        if self._state != ConnectionState.NEW:
            raise ConnectionError(f"Connection is {self._state.value}")
        self._state = ConnectionState.ACTIVE
        start_time = time.monotonic()

        try:
            await self._send_request(request)
            status_code, headers = await self._receive_response_head()
            body = await self._receive_body()
        except h11.ProtocolError as e:
            raise ProtocolError(str(e), cause=e) from e
        finally:
            self._duration = time.monotonic() - start_time
            await self.close()

        logger.debug(
            f"{request.method.decode()} {request.target.decode()} "
            f"-> {status_code} ({self._duration:.3f}s)"
        )

        return Response(
            status_code=status_code,
            headers=headers,
            stream=ByteStream(body),
            url=url,
            extensions={"http_version": b"HTTP/1.1"},
        )

    async def _send_request(self, request: Request) -> None:
        await self._send_event(
            h11.Request(
                method=request.method,
                target=request.target,
                headers=request.headers,
            )
        )
        if request.body:
            await self._send_event(h11.Data(data=request.body))
        await self._send_event(h11.EndOfMessage())

    async def _send_event(self, event: h11.Event) -> None:
        data = self._h11_connection.send(event)
        if data:
            await asyncio.wait_for(self._stream.write(data), timeout=self._write_timeout)
            self._bytes_sent += len(data)

    async def _next_event(self) -> h11.Event:
        while True:
            event = self._h11_connection.next_event()
            if event is not h11.NEED_DATA:
                return event

            data = await asyncio.wait_for(
                self._stream.read(self.READ_CHUNK_SIZE),
                timeout=self._read_timeout,
            )
            # b"" tells h11 the peer closed; it decides whether that is valid
            self._h11_connection.receive_data(data)
            self._bytes_received += len(data)

    async def _receive_response_head(self):
        while True:
            event = await self._next_event()
            if isinstance(event, h11.InformationalResponse):
                continue
            if isinstance(event, h11.Response):
                return event.status_code, list(event.headers)
            if isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed by server")
            raise ProtocolError(f"Unexpected event {type(event).__name__}")

    async def _receive_body(self) -> bytes:
        chunks: List[bytes] = []
        while True:
            event = await self._next_event()
            if isinstance(event, h11.Data):
                chunks.append(bytes(event.data))
            elif isinstance(event, h11.EndOfMessage):
                return b"".join(chunks)
            elif isinstance(event, h11.ConnectionClosed):
                raise ProtocolError("Connection closed before end of body")

    async def close(self) -> None:
        """Close the connection and cleanup resources."""
        if self._state != ConnectionState.CLOSED:
            self._state = ConnectionState.CLOSED
            await self._stream.aclose()

    @property
    def is_closed(self) -> bool:
        """Check if connection is closed."""
        return self._state == ConnectionState.CLOSED

    @property
    def metrics(self) -> Dict[str, Any]:
        """Byte counters and duration of the exchange."""
        return {
            "bytes_sent": self._bytes_sent,
            "bytes_received": self._bytes_received,
            "duration": self._duration,
            "state": self._state.value,
        }
