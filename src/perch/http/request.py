"""Immutable HTTP request.

Frozen metadata only. The SSR pipeline never reads a request body,
so the ASGI receive callable is kept for render functions that want
it and otherwise left alone.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from perch._internal.asgi import Receive
from perch.http.headers import Headers
from perch.http.query import QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``query`` is ``None`` when the ASGI server did not hand over a
    query string; consumers then derive one from ``url``.
    """

    method: str
    path: str
    raw_path: bytes
    query_string: bytes
    headers: Headers
    query: QueryParams | None
    http_version: str
    root_path: str
    client: tuple[str, int] | None

    # Private: ASGI receive callable
    _receive: Receive | None = None

    @property
    def mount_path(self) -> str:
        """Decoded path relative to the mount point (``root_path`` stripped)."""
        path = self.path
        if self.root_path and path.startswith(self.root_path):
            path = path[len(self.root_path) :] or "/"
        return path

    @property
    def url(self) -> str:
        """Request URL relative to the mount point (path + query string).

        When the app is mounted under ``root_path`` the prefix is
        stripped, so a render function sees the same URL whether or
        not it is mounted.
        """
        path = quote(self.mount_path, safe="/%:@!$&'()*+,;=~-._")
        if self.query_string:
            return f"{path}?{self.query_string.decode('latin-1')}"
        return path

    @property
    def original_url(self) -> str:
        """Request target exactly as received (undecoded path + query string)."""
        if self.raw_path:
            target = self.raw_path.decode("latin-1")
        else:
            target = quote(self.path, safe="/%:@!$&'()*+,;=~-._")
        if self.query_string:
            return f"{target}?{self.query_string.decode('latin-1')}"
        return target

    @property
    def receive(self) -> Receive | None:
        return self._receive

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive | None = None) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        client = scope.get("client")
        query_string = scope.get("query_string")
        return cls(
            method=scope["method"],
            path=scope["path"],
            raw_path=scope.get("raw_path") or b"",
            query_string=query_string or b"",
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(query_string) if query_string is not None else None,
            http_version=scope.get("http_version", "1.1"),
            root_path=scope.get("root_path", ""),
            client=tuple(client) if client else None,
            _receive=receive,
        )
