"""
Custom exceptions for pathfetch.

This module defines the exception hierarchy used by the client,
the path templater and the HTTP transport.
"""

from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .http_primitives import Response


class HTTPClientError(Exception):
    """Base exception for all pathfetch errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConfigurationError(HTTPClientError, TypeError):
    """
    Raised when a request is configured incorrectly.

    This is a programmer error (unknown result type, unusable URL,
    broken path template) and is never suppressed by ``nothrow``.
    """


class PathTemplateError(ConfigurationError):
    """Raised when a path template cannot be compiled or expanded."""


class ImmutableStateError(HTTPClientError):
    """Raised when mutating a client declared as immutable."""

    def __init__(self, message: str = "Cannot modify; HTTP instance declared as immutable") -> None:
        super().__init__(message)


class RequestFailure(HTTPClientError):
    """
    Raised when a request fails at the response level.

    Carries the target URL, the upper-cased method, the response status
    (-1 when no response was obtained) and the extracted body, if any.
    """

    def __init__(
        self,
        url: str,
        method: Optional[str],
        response: Optional["Response"] = None,
        body: Any = None,
        message: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        self.url = url
        self.method = (method or "GET").upper()
        self.response = response
        self.body = body
        self.status = response.status if response is not None else -1
        super().__init__(message or f"Request failed ({self.method} {url})", cause)

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain record of the failure."""
        return {
            "message": self.message,
            "status": self.status,
            "method": self.method,
            "url": self.url,
            "body": self.body,
        }


class ConnectionError(HTTPClientError):
    """Raised when there's an error with network connections."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class ProtocolError(HTTPClientError):
    """Raised when there's an error with HTTP protocol handling."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class TimeoutError(HTTPClientError):
    """Raised when an operation times out."""

    def __init__(self, message: str, timeout: Optional[float] = None) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}")


class StreamError(HTTPClientError):
    """Raised when there's an error with stream operations."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)
