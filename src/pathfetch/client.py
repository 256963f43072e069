"""
Request client for pathfetch.

HTTPClient holds default request options and turns calls such as
``get("/users/:id", {"id": 42})`` into a transport exchange: options
are merged, the URL is resolved (base URL, path template, query
string), the response is extracted according to its result type and
failures are raised as RequestFailure.

Two variants exist. HTTPClient is read-only; MutableHTTPClient also
supports ``mutate``. ``create`` and ``clone`` pick the variant.
"""

import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import urljoin, urlsplit

from .exceptions import (
    ConfigurationError,
    ImmutableStateError,
    RequestFailure,
)
from .options import HTTPOptions, ResultType, merge_options
from .querystring import stringify
from .templating import compile_path
from .transport import HTTP11Transport, Transport

logger = logging.getLogger(__name__)

OptionsLike = Union[HTTPOptions, Mapping[str, Any], None]


class HTTPClient:
    """
    Read-only HTTP client.

    Args:
        options: Default options applied to every call
        transport: Transport performing the exchanges (HTTP11Transport
            if None)
    """

    immutable = True

    def __init__(self, options: OptionsLike = None, transport: Optional[Transport] = None) -> None:
        self._options = HTTPOptions.coerce(options)
        self._transport = transport or HTTP11Transport()

    @property
    def options(self) -> HTTPOptions:
        """A copy of the held options."""
        return self._options.copy()

    @property
    def transport(self) -> Transport:
        return self._transport

    def mutate(self, options: OptionsLike) -> "HTTPClient":
        raise ImmutableStateError()

    def clone(self, options: OptionsLike = None, immutable: bool = False) -> "HTTPClient":
        """
        Return a new client whose options are these merged with ``options``.

        The new client shares the transport but not the options.
        """
        merged = merge_options(self._options, HTTPOptions.coerce(options))
        cls = HTTPClient if immutable else MutableHTTPClient
        return cls(merged, transport=self._transport)

    def effective_options(self, options: OptionsLike = None) -> HTTPOptions:
        """Options for one call, after the exclude_defaults policy."""
        call_options = HTTPOptions.coerce(options)
        if self._options.exclude_defaults:
            return call_options
        return merge_options(self._options, call_options)

    def resolve_url(self, path: str, options: HTTPOptions) -> str:
        """
        Resolve ``path`` to the absolute request URL.

        Any ``:`` in the URL path triggers template expansion, with values
        taken from the whole options record.
        """
        url = urljoin(options.base_url or "", path)
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            raise ConfigurationError(f"Invalid URL ({url})")

        if ":" in parts.path:
            expanded = compile_path(parts.path)(options.to_dict())
            url = url.replace(parts.path, expanded, 1)

        if options.query is not None:
            url += "?" + stringify(options.query)
        return url

    async def request(self, path: str, options: OptionsLike = None, body: Any = None) -> Any:
        """
        Perform a request and return the extracted result.

        Returns:
            The extracted result, the raw Response for the "response"
            result type, or None when extraction failed under nothrow

        Raises:
            ConfigurationError: For an unknown result type or unusable URL
            RequestFailure: On extraction failure or a non-2xx status,
                unless nothrow is set
        """
        options = self.effective_options(options)
        url = self.resolve_url(path, options)

        if options.debug:
            logger.debug(f"{options.method} {url} path={path!r} options={options!r}")

        response = await self._transport.exchange(url, options, body)

        result_type = options.resolved_result_type()
        extractor = None
        if isinstance(result_type, ResultType) and result_type.extractor:
            extractor = getattr(response, result_type.extractor, None)
        if not isinstance(result_type, ResultType) or (result_type.extractor and not callable(extractor)):
            raise ConfigurationError(f"Unknown resultType ({result_type})")

        result: Any = response
        if extractor is not None:
            try:
                result = await extractor()
            except Exception as e:
                if not options.nothrow:
                    raise RequestFailure(
                        url, options.method, response, None,
                        message=f"Response failed ({e})", cause=e,
                    ) from e
                result = None

        if not response.ok and not options.nothrow:
            raise RequestFailure(url, options.method, response, result)
        return result

    async def get(self, path: str, options: OptionsLike = None) -> Any:
        return await self.request(path, self._with_method(options, "GET"))

    async def head(self, path: str, options: OptionsLike = None) -> Any:
        return await self.request(path, self._with_method(options, "HEAD"))

    async def post(self, path: str, body: Any, options: OptionsLike = None) -> Any:
        return await self.request(path, self._with_method(options, "POST"), body)

    async def patch(self, path: str, body: Any, options: OptionsLike = None) -> Any:
        return await self.request(path, self._with_method(options, "PATCH"), body)

    async def put(self, path: str, body: Any, options: OptionsLike = None) -> Any:
        return await self.request(path, self._with_method(options, "PUT"), body)

    async def delete(self, path: str, body: Any = None, options: OptionsLike = None) -> Any:
        return await self.request(path, self._with_method(options, "DELETE"), body)

    @staticmethod
    def _with_method(options: OptionsLike, method: str) -> HTTPOptions:
        options = HTTPOptions.coerce(options)
        options.method = method
        return options

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._options!r})"


class MutableHTTPClient(HTTPClient):
    """HTTP client whose options can be changed in place with ``mutate``."""

    immutable = False

    def mutate(self, options: OptionsLike) -> "MutableHTTPClient":
        """Merge ``options`` into the held options and return self."""
        self._options = merge_options(self._options, HTTPOptions.coerce(options))
        return self


def create(
    options: OptionsLike = None,
    immutable: bool = False,
    transport: Optional[Transport] = None,
) -> HTTPClient:
    """Create a client; mutable unless ``immutable`` is set."""
    cls = HTTPClient if immutable else MutableHTTPClient
    return cls(options, transport=transport)


http = HTTPClient()
