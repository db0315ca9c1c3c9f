"""Static file serving middleware.

Serves files from a directory for matching URL prefixes and falls
through to the next handler for everything else.

Directory requests serve an index file only when one is configured.
The production backend passes ``index=None`` so that ``/`` reaches the
render pipeline instead of the built ``index.html``.
"""

import mimetypes
from pathlib import Path

from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next


class StaticFiles:
    """Middleware that serves static files from a directory.

    Security: resolves symlinks and verifies the final path is within
    the configured directory to prevent path traversal.

    Usage::

        # Compiled client bundle at the root, no index files
        StaticFiles(directory="dist/client", prefix="/", index=None)

        # Development assets, never cached
        StaticFiles(directory="public", prefix="/", index=None, cache_control="no-cache")
    """

    __slots__ = ("_cache_control", "_directory", "_index", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/",
        *,
        index: str | None = None,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._index = index
        self._cache_control = cache_control

        # "/" normalizes to "" (every path is a candidate)
        stripped = "/" + prefix.strip("/")
        self._prefix = stripped if stripped != "/" else ""

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve a static file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        path = request.mount_path
        if self._prefix:
            if not path.startswith(self._prefix + "/") and path != self._prefix:
                return await next(request)
            relative = path[len(self._prefix) :].lstrip("/")
        else:
            relative = path.lstrip("/")

        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            return Response(body="Forbidden", status=403, content_type="text/plain; charset=utf-8")

        if file_path.is_dir():
            if self._index is None:
                return await next(request)
            file_path = file_path / self._index

        if not file_path.is_file():
            return await next(request)

        return self._serve_file(file_path)

    def _serve_file(self, file_path: Path) -> Response:
        """Read a file and build a response."""
        content_type, _ = mimetypes.guess_type(str(file_path))
        if content_type is None:
            content_type = "application/octet-stream"

        return Response(
            body=file_path.read_bytes(),
            content_type=content_type,
        ).with_header("Cache-Control", self._cache_control)
