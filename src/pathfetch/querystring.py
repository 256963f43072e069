"""
Query string serialization for pathfetch.

``stringify`` renders a mapping as ``key=value`` pairs joined by ``&``
(no leading ``?``). Keys are sorted, lists repeat their key, nested
mappings use bracket notation and None renders the bare key.
"""

from typing import Any, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode


def _flatten(key: str, value: Any) -> List[Tuple[str, Optional[str]]]:
    if value is None:
        return [(key, None)]
    if isinstance(value, Mapping):
        pairs = []
        for sub_key in sorted(value, key=str):
            pairs.extend(_flatten(f"{key}[{sub_key}]", value[sub_key]))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for item in value:
            pairs.extend(_flatten(key, item))
        return pairs
    if isinstance(value, bool):
        value = "true" if value else "false"
    return [(key, str(value))]


def stringify(query: Mapping[str, Any]) -> str:
    """
    Serialize a mapping into a query string.

    Args:
        query: Mapping of keys to values

    Returns:
        The query string, without the leading ``?``
    """
    pairs: List[Tuple[str, Optional[str]]] = []
    for key in sorted(query, key=str):
        pairs.extend(_flatten(str(key), query[key]))

    # urlencode has no form for a key without a value
    return "&".join(
        quote(key, safe="") if value is None else urlencode([(key, value)], safe="", quote_via=quote)
        for key, value in pairs
    )
