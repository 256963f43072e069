"""
Network backend components for pathfetch.

This module provides the low-level networking abstractions used by
the HTTP/1.1 transport.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .asyncio_backend import AsyncioNetworkBackend, AsyncioNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream
from .utils import create_ssl_context, parse_url, format_host_header

__all__ = [
    "NetworkBackend",
    "NetworkStream",
    "AsyncioNetworkBackend",
    "AsyncioNetworkStream",
    "MockNetworkBackend",
    "MockNetworkStream",
    "create_ssl_context",
    "parse_url",
    "format_host_header",
]
