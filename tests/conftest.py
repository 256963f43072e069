"""
Pytest configuration for pathfetch tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import json
from typing import Any, List, Optional, Tuple

import pytest

from pathfetch.http_primitives import Response
from pathfetch.network.mock import MockNetworkBackend
from pathfetch.options import HTTPOptions
from pathfetch.streams import ByteStream
from pathfetch.transport import Transport


def make_response(
    status_code: int = 200,
    body: bytes = b"",
    headers: Optional[List[Tuple[bytes, bytes]]] = None,
    url: str = "",
) -> Response:
    return Response(
        status_code=status_code,
        headers=headers or [],
        stream=ByteStream(body),
        url=url,
    )


class StubTransport(Transport):
    """
    Transport returning a canned response and recording each exchange.

    Without a canned response every exchange gets a fresh 200 with an
    empty JSON object.
    """

    def __init__(self, response: Optional[Response] = None) -> None:
        self.response = response
        self.calls: List[Tuple[str, HTTPOptions, Any]] = []

    async def exchange(self, url: str, options: HTTPOptions, body: Any = None) -> Response:
        self.calls.append((url, options, body))
        if self.response is not None:
            return self.response
        return make_response(200, b"{}", url=url)

    @property
    def last_url(self) -> str:
        return self.calls[-1][0]

    @property
    def last_options(self) -> HTTPOptions:
        return self.calls[-1][1]


@pytest.fixture
def response_factory():
    """Build Response descriptors with buffered bodies."""
    return make_response


@pytest.fixture
def json_response():
    """Build a JSON Response for a status and payload."""
    def _create(status_code: int, payload: Any) -> Response:
        return make_response(
            status_code,
            json.dumps(payload).encode(),
            headers=[(b"Content-Type", b"application/json")],
        )
    return _create


@pytest.fixture
def stub_transport():
    """A transport answering 200 with an empty JSON object."""
    return StubTransport()


@pytest.fixture
def transport_factory():
    """Build a StubTransport answering with a given response."""
    return StubTransport


@pytest.fixture
def mock_backend():
    """An in-memory network backend."""
    return MockNetworkBackend()


@pytest.fixture
def raw_response():
    """Build raw HTTP/1.1 response bytes."""
    def _create(
        status: int = 200,
        reason: str = "OK",
        body: bytes = b"",
        headers: Optional[List[Tuple[str, str]]] = None,
    ) -> bytes:
        lines = [f"HTTP/1.1 {status} {reason}"]
        for name, value in headers or []:
            lines.append(f"{name}: {value}")
        lines.append(f"Content-Length: {len(body)}")
        return ("\r\n".join(lines) + "\r\n\r\n").encode() + body
    return _create
