"""Live transformer protocol.

The development-time collaborator that reflects current source on
every request. ``LiveServer`` is the built-in implementation; any
object with this shape can be handed to ``DevBackend`` instead.
"""

from types import ModuleType
from typing import Protocol

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next


class LiveTransformer(Protocol):
    """Rewrites HTML and loads modules fresh, in middleware mode."""

    async def middleware(self, request: Request, next: Next) -> Response:
        """Answer development asset requests or call *next*."""
        ...

    async def transform_index_html(self, url: str, html: str) -> str:
        """Return *html* with development-only tags injected for *url*."""
        ...

    async def load_module(self, path: str) -> ModuleType:
        """Evaluate the module at *path* (relative to root) from current source."""
        ...

    def fix_stacktrace(self, exc: BaseException) -> None:
        """Attach source positions (``id``, ``frame``, ``plugin_code``) to *exc*."""
        ...
