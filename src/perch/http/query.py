"""Query string parsing.

Two entry points, one result type:

- ``QueryParams``: immutable mapping built from the ASGI
  ``query_string`` bytes, first value per key, ``get_list`` for all.
- ``parse_query_string``: derives ``QueryParams`` from a full URL
  when the server supplied no query string.

Both drop a single leading ``?`` from the query portion, so a target
like ``/page??a=1&b=`` parses to ``{"a": "1", "b": ""}`` either way.
"""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qsl


def _pairs(query: str) -> list[tuple[str, str]]:
    if query.startswith("?"):
        query = query[1:]
    return parse_qsl(query, keep_blank_values=True)


def parse_query_string(url: str) -> "QueryParams":
    """Parse the query portion of *url*.

    Everything after the first ``?`` is the query. Values are
    URL-decoded and a key without ``=`` maps to ``""``. No ``?``
    yields an empty mapping.

        >>> dict(parse_query_string("/page??a=1&b="))
        {'a': '1', 'b': ''}
    """
    _, sep, query = url.partition("?")
    if not sep:
        return QueryParams()
    return QueryParams(query)


class QueryParams(Mapping[str, str]):
    """Immutable query string parameters.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key.

    Accepts the raw ASGI bytes (decoded as latin-1) or an already
    decoded query string.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes | str = b"") -> None:
        if isinstance(query_string, str):
            self._raw = query_string.encode("utf-8")
            text = query_string
        else:
            self._raw = query_string
            text = query_string.decode("latin-1")
        data: dict[str, list[str]] = {}
        for key, value in _pairs(text):
            data.setdefault(key, []).append(value)
        self._data = data

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({dict(self.items())!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._data.get(key, []))

    @property
    def raw(self) -> bytes:
        return self._raw
