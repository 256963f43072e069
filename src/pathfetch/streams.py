"""
Body streams for pathfetch.

Response bodies are read completely by the transport before the
response is handed to the client, so the streams here are in-memory
async iterables over already buffered data.
"""

from typing import AsyncIterable, List, Optional, Union

from .exceptions import StreamError


class ByteStream:
    """
    Async iterable over buffered body data.

    The stream can be consumed once; iterating a closed or exhausted
    stream yields nothing more.
    """

    def __init__(self, data: Union[bytes, List[bytes]] = b"") -> None:
        if isinstance(data, bytes):
            self._chunks = [data] if data else []
        else:
            self._chunks = [chunk for chunk in data if chunk]
        self._index = 0
        self._closed = False

    def __aiter__(self) -> "ByteStream":
        return self

    async def __anext__(self) -> bytes:
        if self._closed or self._index >= len(self._chunks):
            raise StopAsyncIteration
        chunk = self._chunks[self._index]
        self._index += 1
        return chunk

    async def aread(self) -> bytes:
        """Read the remaining data and close the stream."""
        if self._closed:
            raise StreamError("Stream is closed")
        data = b"".join(self._chunks[self._index:])
        self._index = len(self._chunks)
        await self.aclose()
        return data

    async def aclose(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def content_length(self) -> int:
        return sum(len(chunk) for chunk in self._chunks)


async def read_stream_to_bytes(stream: Optional[AsyncIterable[bytes]]) -> bytes:
    """
    Read an entire stream into bytes.

    Args:
        stream: The stream to read, or None for an empty body

    Returns:
        Complete data as bytes
    """
    if stream is None:
        return b""

    chunks = []
    try:
        async for chunk in stream:
            chunks.append(chunk)
    except StreamError:
        raise
    except Exception as e:
        raise StreamError(f"Failed to read stream: {e}", cause=e)
    return b"".join(chunks)
