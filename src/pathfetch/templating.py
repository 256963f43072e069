"""
Path templates for pathfetch.

A template is a URL path with named placeholders such as
``/users/:id``. ``compile_path`` turns it into a function that fills
the placeholders from a mapping of values.

Placeholders take an optional modifier: ``?`` (optional), ``*`` (zero
or more values) or ``+`` (one or more values). Repeated values are
joined with the placeholder's prefix, e.g. ``/files/:path+`` with
``["a", "b"]`` gives ``/files/a/b``.
"""

import re
from typing import Any, Callable, List, Mapping, NamedTuple, Union
from urllib.parse import quote

from .exceptions import PathTemplateError

_NAME = re.compile(r"\w+")
_PREFIXES = "./"


class Token(NamedTuple):
    name: str
    prefix: str
    modifier: str


def _encode_segment(value: Any) -> str:
    return quote(str(value), safe="")


def parse_path(pattern: str) -> List[Union[str, Token]]:
    """
    Split a pattern into literal strings and placeholder tokens.

    Raises:
        PathTemplateError: If a ``:`` is not followed by a name
    """
    tokens: List[Union[str, Token]] = []
    literal = ""
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\" and i + 1 < len(pattern):
            literal += pattern[i + 1]
            i += 2
            continue
        if char != ":":
            literal += char
            i += 1
            continue

        match = _NAME.match(pattern, i + 1)
        if not match:
            raise PathTemplateError(f"Missing parameter name at {i} in {pattern!r}")
        i = match.end()

        prefix = ""
        if literal and literal[-1] in _PREFIXES:
            prefix = literal[-1]
            literal = literal[:-1]
        if literal:
            tokens.append(literal)
            literal = ""

        modifier = ""
        if i < len(pattern) and pattern[i] in "?*+":
            modifier = pattern[i]
            i += 1
        tokens.append(Token(match.group(0), prefix, modifier))

    if literal:
        tokens.append(literal)
    return tokens


def compile_path(pattern: str) -> Callable[[Mapping[str, Any]], str]:
    """
    Compile a path pattern into a function that expands it.

    Args:
        pattern: Path with ``:name`` placeholders

    Returns:
        A function taking a mapping of values and returning the path

    Raises:
        PathTemplateError: If the pattern is malformed, or (when the
            returned function is called) a required value is missing
    """
    tokens = parse_path(pattern)

    def expand(values: Mapping[str, Any]) -> str:
        path = ""
        for token in tokens:
            if isinstance(token, str):
                path += token
                continue

            value = values.get(token.name)
            optional = token.modifier in ("?", "*")
            repeat = token.modifier in ("*", "+")

            if isinstance(value, (list, tuple)):
                if not repeat:
                    raise PathTemplateError(f'Expected "{token.name}" to not repeat, but got a list')
                if not value:
                    if optional:
                        continue
                    raise PathTemplateError(f'Expected "{token.name}" to not be empty')
                for item in value:
                    path += token.prefix + _encode_segment(item)
                continue

            if value is None:
                if optional:
                    continue
                raise PathTemplateError(f'Expected "{token.name}" to be a string')

            path += token.prefix + _encode_segment(value)
        return path

    return expand
