"""Built-in live transformer.

``LiveServer`` runs in middleware mode inside the SSR handle: it never
opens a listener of its own, it only sees requests passed to it.

- ``middleware``: answers the live-reload client endpoints and files
  under ``<root>/public``; everything else falls through.
- ``transform_index_html``: injects the live-reload client script.
- ``load_module``: compiles and executes a source file as a fresh
  module on every call. Application modules it imported last time are
  evicted from ``sys.modules`` first, so edits anywhere under root take
  effect on the next request.
- ``fix_stacktrace``: attaches source positions to render errors.

Thread safety:
    Module evaluation runs in a worker thread and is serialized by a
    lock, since it touches ``sys.modules`` and ``sys.path``. The other
    methods read only immutable state.
"""

import json
import logging
import os
import sys
import threading
import types
from pathlib import Path

import anyio

from perch.config import is_test_run
from perch.dev.client import CLIENT_JS, CLIENT_PATH, CLIENT_SNIPPET, VERSION_PATH
from perch.dev.frames import attach_positions, code_frame, source_positions
from perch.errors import BootstrapError, ModuleLoadError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.middleware.static import StaticFiles

logger = logging.getLogger("perch.dev")

# Never walked when fingerprinting the source tree
_IGNORED_DIRS = frozenset({
    ".git",
    ".hg",
    ".venv",
    "__pycache__",
    "dist",
    "node_modules",
    "venv",
})


class LiveServer:
    """Development-time transformer bound to a project root.

    Usage::

        live = LiveServer("web")
        html = await live.transform_index_html("/", template_html)
        module = await live.load_module("src/entry_server.py")

    Raises:
        BootstrapError: If *root* does not exist or is not a directory.
    """

    __slots__ = ("_inject_client", "_load_lock", "_loaded", "_root", "_static")

    def __init__(
        self,
        root: str | Path,
        *,
        public_dir: str = "public",
        inject_client: bool = True,
        log_level: int | None = None,
    ) -> None:
        resolved = Path(root).resolve()
        if not resolved.is_dir():
            msg = f"Live transformer root {resolved} is not a directory"
            raise BootstrapError(msg)

        if log_level is None:
            log_level = logging.ERROR if is_test_run() else logging.INFO
        logger.setLevel(log_level)

        self._root = resolved
        self._inject_client = inject_client
        self._static = StaticFiles(
            resolved / public_dir,
            prefix="/",
            index=None,
            cache_control="no-cache",
        )
        self._load_lock = threading.Lock()
        self._loaded: set[str] = set()

        logger.info("Live transformer serving %s", resolved)

    @property
    def root(self) -> Path:
        return self._root

    # -- Middleware --

    async def middleware(self, request: Request, next: Next) -> Response:
        """Serve client endpoints and public files, or fall through."""
        if request.mount_path == CLIENT_PATH:
            return Response(
                body=CLIENT_JS,
                content_type="application/javascript; charset=utf-8",
            ).with_header("Cache-Control", "no-cache")

        if request.mount_path == VERSION_PATH:
            version = await anyio.to_thread.run_sync(self.source_version)
            return Response(
                body=json.dumps({"version": version}),
                content_type="application/json",
            ).with_header("Cache-Control", "no-store")

        return await self._static(request, next)

    def source_version(self) -> str:
        """Fingerprint of the source tree: newest mtime and file count."""
        newest = 0
        count = 0
        for dirpath, dirnames, filenames in os.walk(self._root):
            dirnames[:] = [d for d in dirnames if d not in _IGNORED_DIRS]
            for name in filenames:
                try:
                    mtime = os.stat(os.path.join(dirpath, name)).st_mtime_ns
                except OSError:
                    continue
                count += 1
                newest = max(newest, mtime)
        return f"{newest:x}-{count}"

    # -- HTML --

    async def transform_index_html(self, url: str, html: str) -> str:
        """Inject the live-reload client into *html*."""
        if not self._inject_client:
            return html
        logger.debug("Transforming index for %s", url)
        if "</head>" in html:
            return html.replace("</head>", CLIENT_SNIPPET + "</head>", 1)
        return html + CLIENT_SNIPPET

    # -- Modules --

    async def load_module(self, path: str) -> types.ModuleType:
        """Evaluate ``<root>/<path>`` from current source.

        Raises:
            ModuleLoadError: If the file is missing, does not compile,
                or raises while executing.
        """
        return await anyio.to_thread.run_sync(self._load_sync, path)

    def _load_sync(self, path: str) -> types.ModuleType:
        file_path = (self._root / path).resolve()
        if not file_path.is_relative_to(self._root):
            msg = f"Module {path!r} is outside the project root {self._root}"
            raise ModuleLoadError(msg, id=str(file_path))

        try:
            source = file_path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot read module {file_path}: {exc.strerror or exc}"
            raise ModuleLoadError(msg, id=str(file_path)) from exc

        with self._load_lock:
            return self._execute(file_path, source)

    def _execute(self, file_path: Path, source: str) -> types.ModuleType:
        filename = str(file_path)
        try:
            code = compile(source, filename, "exec")
        except SyntaxError as exc:
            msg = f"{exc.msg} ({file_path.name}:{exc.lineno})"
            raise ModuleLoadError(
                msg,
                id=filename,
                frame=code_frame(source, exc.lineno or 0, exc.offset),
                plugin_code=(exc.text or "").rstrip("\n"),
            ) from exc

        self._evict_loaded()
        root = str(self._root)
        if root not in sys.path:
            sys.path.insert(0, root)

        module = types.ModuleType(f"perch_live_{file_path.stem}")
        module.__file__ = filename
        before = set(sys.modules)
        # Registered while it runs so dataclasses and typing can find it
        sys.modules[module.__name__] = module
        try:
            exec(code, module.__dict__)  # noqa: S102 - evaluating the project's own source
        except Exception as exc:
            sys.modules.pop(module.__name__, None)
            positions = source_positions(exc, self._root) or {"id": filename}
            msg = f"{type(exc).__name__}: {exc}"
            raise ModuleLoadError(msg, **positions) from exc
        finally:
            self._track_loaded(set(sys.modules) - before)

        logger.debug("Evaluated %s", file_path)
        return module

    def _track_loaded(self, names: set[str]) -> None:
        for name in names:
            module = sys.modules.get(name)
            filename = getattr(module, "__file__", None)
            if filename and Path(filename).resolve().is_relative_to(self._root):
                self._loaded.add(name)

    def _evict_loaded(self) -> None:
        for name in self._loaded:
            sys.modules.pop(name, None)
        self._loaded.clear()

    # -- Errors --

    def fix_stacktrace(self, exc: BaseException) -> None:
        """Point *exc* at the innermost frame in project source."""
        attach_positions(exc, self._root)
