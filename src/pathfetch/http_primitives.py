"""
HTTP primitives for pathfetch.

This module defines the request and response descriptors exchanged
between the client and its transport. Requests are immutable; a
response is a descriptor whose body can be extracted exactly once.
"""

import json
from typing import (
    Any,
    AsyncIterable,
    Dict,
    List,
    Optional,
    Tuple,
    Union,
)
from dataclasses import dataclass, field

from .exceptions import StreamError
from .streams import read_stream_to_bytes


# Type aliases for better readability
Headers = List[Tuple[bytes, bytes]]
StatusCode = int


def _encode(value: Union[str, bytes]) -> bytes:
    return value.encode("latin-1") if isinstance(value, str) else value


@dataclass(frozen=True)
class Request:
    """
    Immutable HTTP request representation.

    Holds everything the HTTP/1.1 connection needs to put a request
    on the wire: method, target, headers and the encoded body.
    """

    method: bytes
    target: bytes
    headers: Headers = field(default_factory=list)
    body: bytes = b""

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.method, bytes):
            raise ValueError("method must be bytes")

        if not isinstance(self.target, bytes):
            raise ValueError("target must be bytes")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

        if not isinstance(self.body, bytes):
            raise ValueError("body must be bytes")

    @classmethod
    def create(
        cls,
        method: Union[str, bytes],
        target: Union[str, bytes],
        headers: Optional[List[Tuple[Union[str, bytes], Union[str, bytes]]]] = None,
        body: Optional[bytes] = None,
    ) -> "Request":
        """
        Create a Request with proper type conversion.

        Args:
            method: HTTP method (GET, POST, etc.)
            target: Request target (path and query string)
            headers: Optional list of (name, value) header tuples
            body: Optional encoded request body

        Returns:
            New Request instance
        """
        return cls(
            method=_encode(method).upper(),
            target=_encode(target),
            headers=[(_encode(name), _encode(value)) for name, value in headers or []],
            body=body or b"",
        )

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        name_lower = _encode(name).lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value
        return None


@dataclass
class Response:
    """
    HTTP response descriptor.

    Exposes the status, headers and the extraction coroutines used
    by result types (``json``, ``text``, ``blob``, ``array_buffer``).
    The body stream is single-use; reading it twice raises StreamError.
    """

    status_code: StatusCode
    headers: Headers = field(default_factory=list)
    stream: Optional[AsyncIterable[bytes]] = None
    url: str = ""
    extensions: Dict[str, Any] = field(default_factory=dict)
    _body_used: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate response data after initialization."""
        if not isinstance(self.status_code, int):
            raise ValueError("status_code must be int")

        if not isinstance(self.headers, list):
            raise ValueError("headers must be a list")

        for name, value in self.headers:
            if not isinstance(name, bytes) or not isinstance(value, bytes):
                raise ValueError("header names and values must be bytes")

    @property
    def status(self) -> StatusCode:
        return self.status_code

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status_code < 300

    @property
    def body_used(self) -> bool:
        return self._body_used

    def get_header(self, name: Union[str, bytes]) -> Optional[bytes]:
        """Get a header value by name (case-insensitive)."""
        name_lower = _encode(name).lower()
        for header_name, header_value in self.headers:
            if header_name.lower() == name_lower:
                return header_value
        return None

    def has_header(self, name: Union[str, bytes]) -> bool:
        """Check if a header exists (case-insensitive)."""
        return self.get_header(name) is not None

    @property
    def encoding(self) -> str:
        """Charset from the Content-Type header, utf-8 when absent."""
        content_type = self.get_header(b"content-type")
        if content_type:
            for param in content_type.decode("latin-1").split(";")[1:]:
                key, _, value = param.strip().partition("=")
                if key.lower() == "charset" and value:
                    return value.strip('"')
        return "utf-8"

    async def aread(self) -> bytes:
        """Read the complete body. The body can only be read once."""
        if self._body_used:
            raise StreamError("Body has already been consumed")
        self._body_used = True
        return await read_stream_to_bytes(self.stream)

    async def json(self) -> Any:
        return json.loads(await self.text())

    async def text(self) -> str:
        return (await self.aread()).decode(self.encoding)

    async def blob(self) -> bytes:
        return await self.aread()

    async def array_buffer(self) -> bytearray:
        return bytearray(await self.aread())
