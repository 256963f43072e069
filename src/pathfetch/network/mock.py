"""
Mock network implementations for testing.

This module provides in-memory implementations of NetworkStream and
NetworkBackend so the transport can be exercised without real I/O.
"""

from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional, Tuple

from .backend import NetworkBackend
from .stream import NetworkStream


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.

    Reads are served from a preloaded buffer and writes are recorded.
    """

    def __init__(self, data: bytes = b"") -> None:
        """
        Initialize the mock stream.

        Args:
            data: Initial data to be available for reading.
        """
        self._data = data
        self._position = 0
        self._closed = False
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")

        if max_bytes is None:
            end = len(self._data)
        else:
            end = min(self._position + max_bytes, len(self._data))
        result = self._data[self._position:end]
        self._position = end
        return result

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._write_buffer.append(data)

    async def aclose(self) -> None:
        self._closed = True

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)

    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value

    def add_data(self, data: bytes) -> None:
        """Add data to be available for reading."""
        self._data += data


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.

    Responses are queued per (host, port); every connection pops the
    next queued payload. Connecting with an empty queue raises
    OSError, like a refused connection.
    """

    def __init__(self) -> None:
        self._responses: Dict[Tuple[str, int], Deque[bytes]] = defaultdict(deque)
        self.connections: List[MockNetworkStream] = []
        self.tls_hosts: List[str] = []

    def queue_response(self, host: str, port: int, data: bytes) -> None:
        """Queue raw response bytes for the next connection to host:port."""
        self._responses[(host, port)].append(data)

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> MockNetworkStream:
        queue = self._responses.get((host, port))
        if not queue:
            raise OSError(f"Connection refused: {host}:{port}")

        stream = MockNetworkStream(queue.popleft())
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self.connections.append(stream)
        return stream

    async def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> NetworkStream:
        if isinstance(stream, MockNetworkStream):
            stream.set_extra_info("ssl_object", True)
            stream.set_extra_info(
                "selected_alpn_protocol",
                alpn_protocols[0] if alpn_protocols else "http/1.1",
            )
        self.tls_hosts.append(host)
        return stream

    @property
    def last_connection(self) -> Optional[MockNetworkStream]:
        return self.connections[-1] if self.connections else None

    def reset(self) -> None:
        """Reset all queued responses and recorded connections."""
        self._responses.clear()
        self.connections.clear()
        self.tls_hosts.clear()
