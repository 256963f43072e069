"""
pathfetch - configurable async HTTP request client

A small client that keeps default request options, merges them with
per-call overrides, expands path templates, serializes query strings
and turns responses into typed results or structured errors.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .client import HTTPClient, MutableHTTPClient, create, http
from .options import HTTPOptions, ResultType, merge_options, deep_merge
from .http_primitives import Request, Response
from .transport import Transport, HTTP11Transport
from .templating import compile_path
from .querystring import stringify
from .exceptions import (
    HTTPClientError,
    ConfigurationError,
    PathTemplateError,
    ImmutableStateError,
    RequestFailure,
    ConnectionError,
    ProtocolError,
    TimeoutError,
    StreamError,
)

__all__ = [
    "HTTPClient",
    "MutableHTTPClient",
    "create",
    "http",
    "HTTPOptions",
    "ResultType",
    "merge_options",
    "deep_merge",
    "Request",
    "Response",
    "Transport",
    "HTTP11Transport",
    "compile_path",
    "stringify",
    "HTTPClientError",
    "ConfigurationError",
    "PathTemplateError",
    "ImmutableStateError",
    "RequestFailure",
    "ConnectionError",
    "ProtocolError",
    "TimeoutError",
    "StreamError",
]
