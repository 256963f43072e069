"""
Network backend interface for pathfetch.

This module defines the NetworkBackend interface used by the HTTP/1.1
transport to open connections.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .stream import NetworkStream


class NetworkBackend(ABC):
    """
    Interface for network backend implementations.

    A backend opens plain TCP connections and upgrades them to TLS.
    """

    @abstractmethod
    async def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = None
    ) -> NetworkStream:
        """
        Connect to a TCP endpoint.

        Args:
            host: The hostname or IP address to connect to.
            port: The port number to connect to.
            timeout: Optional timeout in seconds for the connection.

        Returns:
            A NetworkStream representing the TCP connection.

        Raises:
            OSError: If the connection fails.
            asyncio.TimeoutError: If the connection times out.
        """

    @abstractmethod
    async def connect_tls(
        self,
        stream: NetworkStream,
        host: str,
        port: int,
        timeout: Optional[float] = None,
        alpn_protocols: Optional[List[str]] = None,
    ) -> NetworkStream:
        """
        Upgrade a TCP stream to TLS.

        Args:
            stream: The existing TCP NetworkStream to upgrade.
            host: The hostname for TLS certificate verification.
            port: The port number (used for logging/debugging).
            timeout: Optional timeout in seconds for the TLS handshake.
            alpn_protocols: Optional list of ALPN protocols to negotiate.

        Returns:
            A NetworkStream representing the TLS connection.

        Raises:
            OSError: If the TLS handshake fails.
            asyncio.TimeoutError: If the TLS handshake times out.
        """
