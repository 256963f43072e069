"""
asyncio network backend for pathfetch.

Wraps ``asyncio.open_connection`` streams in the NetworkStream
interface. This is the backend HTTP11Transport uses by default.
"""

import asyncio
from typing import Any, List, Optional

from .backend import NetworkBackend
from .stream import NetworkStream
from .utils import create_ssl_context


class AsyncioNetworkStream(NetworkStream):
    """NetworkStream over an asyncio StreamReader/StreamWriter pair."""

    DEFAULT_READ_SIZE = 65536

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer
        self._closed = False

    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        if self._closed:
            raise RuntimeError("Stream is closed")
        return await self._reader.read(max_bytes or self.DEFAULT_READ_SIZE)

    async def write(self, data: bytes) -> None:
        if self._closed:
            raise RuntimeError("Stream is closed")
        self._writer.write(data)
        await self._writer.drain()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError:
            # peer already reset the connection
            pass

    async def start_tls(
        self,
        host: str,
        timeout: Optional[float] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> "AsyncioNetworkStream":
        context = create_ssl_context(alpn_protocols=alpn_protocols)
        await self._writer.start_tls(
            context,
            server_hostname=host,
            ssl_handshake_timeout=timeout,
        )
        return self

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._writer.get_extra_info(name)

    @property
    def is_closed(self) -> bool:
        return self._closed


class AsyncioNetworkBackend(NetworkBackend):
    """Network backend built on asyncio streams."""

    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> AsyncioNetworkStream:
        reader, writer = await asyncio.wait_for(
            asyncio.open_connection(host, port),
            timeout=timeout,
        )
        return AsyncioNetworkStream(reader, writer)

    async def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> NetworkStream:
        if not isinstance(stream, AsyncioNetworkStream):
            raise TypeError("AsyncioNetworkBackend can only upgrade its own streams")
        return await stream.start_tls(host, timeout=timeout, alpn_protocols=alpn_protocols)
