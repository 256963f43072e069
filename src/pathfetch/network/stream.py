"""
Network stream interface for pathfetch.

This module defines the NetworkStream interface that the HTTP/1.1
connection reads from and writes to.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    Interface for network streams with async I/O operations.

    Implementations wrap a single TCP (or TLS) connection.
    """

    @abstractmethod
    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Read data from the stream.

        Args:
            max_bytes: Maximum number of bytes to read.

        Returns:
            The data read, or b"" once the peer has closed the connection.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the stream.

        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """

    @abstractmethod
    async def aclose(self) -> None:
        """Close the stream and release the underlying connection."""

    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the stream.

        Common names are "peername", "sockname" and "ssl_object".
        """

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """Check if the stream is closed."""
