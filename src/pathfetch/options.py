"""
Request options for pathfetch.

HTTPOptions is the configuration record held by a client and passed
to each call. Well-known fields are explicit; every other key is kept
in ``params`` and used to fill path template placeholders.
"""

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class ResultType(Enum):
    """How a response is turned into the value a call returns."""
    RESPONSE = "response"        # the raw Response descriptor
    JSON = "json"
    TEXT = "text"
    BLOB = "blob"                # bytes
    ARRAY_BUFFER = "array_buffer"  # bytearray

    @property
    def extractor(self) -> Optional[str]:
        """Name of the Response coroutine that extracts this type."""
        return None if self is ResultType.RESPONSE else self.value


# camelCase names accepted in plain mappings
_ALIASES = {
    "resultType": "result_type",
    "excludeDefaults": "exclude_defaults",
    "baseURL": "base_url",
    "baseUrl": "base_url",
    "followRedirects": "follow_redirects",
}

# camelCase result type values
_RESULT_TYPE_ALIASES = {
    "arrayBuffer": ResultType.ARRAY_BUFFER,
}

_NESTED = ("headers", "query", "params")


@dataclass
class HTTPOptions:
    """
    Options for a client or a single call.

    A field left as None is unset and never overrides a set value
    when two option records are merged.
    """

    method: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    query: Optional[Dict[str, Any]] = None
    result_type: Optional[Union[ResultType, str]] = None
    exclude_defaults: Optional[bool] = None
    base_url: Optional[str] = None
    debug: Optional[bool] = None
    nothrow: Optional[bool] = None
    timeout: Optional[float] = None
    follow_redirects: Optional[bool] = None
    params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "HTTPOptions":
        """
        Build options from a plain mapping.

        Known field names (and their camelCase aliases) fill the fields;
        any other key becomes a path parameter.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        params: Dict[str, Any] = {}
        for key, value in values.items():
            name = _ALIASES.get(key, key)
            if name == "params":
                params.update(value or {})
            elif name in known:
                kwargs[name] = value
            else:
                params[key] = value
        return cls(params=copy.deepcopy(params), **copy.deepcopy(kwargs))

    @classmethod
    def coerce(cls, value: Union["HTTPOptions", Mapping[str, Any], None]) -> "HTTPOptions":
        """Return a private HTTPOptions copy of ``value``."""
        if value is None:
            return cls()
        if isinstance(value, HTTPOptions):
            return value.copy()
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        raise TypeError(f"options must be a mapping or HTTPOptions, got {type(value).__name__}")

    def copy(self) -> "HTTPOptions":
        return copy.deepcopy(self)

    def resolved_result_type(self) -> Union[ResultType, str]:
        """
        The result type for a call; unset means JSON.

        Unrecognised strings are returned as-is so the caller can
        report them.
        """
        if self.result_type is None:
            return ResultType.JSON
        if isinstance(self.result_type, ResultType):
            return self.result_type
        if isinstance(self.result_type, str) and self.result_type in _RESULT_TYPE_ALIASES:
            return _RESULT_TYPE_ALIASES[self.result_type]
        try:
            return ResultType(self.result_type)
        except ValueError:
            return self.result_type

    def to_dict(self) -> Dict[str, Any]:
        """Set fields as a flat mapping, with params at the top level."""
        values = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "params" and getattr(self, f.name) is not None
        }
        values.update(self.params)
        return values


def deep_merge(base: Any, override: Any) -> Any:
    """
    Recursively merge two values into a new one.

    Mappings merge key by key, lists are concatenated and any other
    value is replaced by ``override``. Inputs are never modified.
    """
    if isinstance(base, Mapping) and isinstance(override, Mapping):
        merged = {key: copy.deepcopy(value) for key, value in base.items()}
        for key, value in override.items():
            if key in merged:
                merged[key] = deep_merge(merged[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged
    if isinstance(base, list) and isinstance(override, list):
        return copy.deepcopy(base) + copy.deepcopy(override)
    return copy.deepcopy(override)


def merge_options(base: HTTPOptions, override: HTTPOptions) -> HTTPOptions:
    """
    Merge two option records into a new one.

    Scalar fields take the override's value when it is set; headers,
    query and params are merged recursively.
    """
    merged = HTTPOptions()
    for f in fields(HTTPOptions):
        left = getattr(base, f.name)
        right = getattr(override, f.name)
        if f.name in _NESTED:
            if left is None or right is None:
                value = copy.deepcopy(right if left is None else left)
            else:
                value = deep_merge(left, right)
        else:
            value = copy.deepcopy(left if right is None else right)
        setattr(merged, f.name, value)
    return merged
