"""The SSR handle: an ASGI application serving server-rendered pages.

Setup happens once: the index template is loaded and exactly one
backend is constructed for the configured mode. After that the handle
is read-only and safe to share across concurrent requests.

Usage::

    from perch import create_ssr_handle

    app = create_ssr_handle(root="web", dev=True, index="web/index.html")

Any ASGI server can serve ``app``. Mount it under another framework
the same way; ``root_path`` is honored.
"""

import logging
import threading

from perch._internal.asgi import Receive, Scope, Send
from perch.backend import Backend, DevBackend, bootstrap
from perch.config import Mode, SSRConfig
from perch.dev.protocol import LiveTransformer
from perch.server.handler import handle_request
from perch.template import IndexTemplate, load_template

logger = logging.getLogger("perch.server")


class SSRHandle:
    """ASGI 3.0 application for server-side rendering.

    Thread safety:
        ``startup()`` uses a Lock + double-check so exactly one thread
        loads the template and constructs the backend, even when
        several workers receive their first request at once.
    """

    __slots__ = ("_backend", "_live", "_started", "_startup_lock", "_template", "config")

    def __init__(
        self,
        config: SSRConfig | None = None,
        *,
        live: LiveTransformer | None = None,
    ) -> None:
        self.config: SSRConfig = config or SSRConfig()
        # Custom live transformer (development only) in place of LiveServer
        self._live = live
        self._backend: Backend | None = None
        self._template: IndexTemplate | None = None
        self._started = False
        self._startup_lock = threading.Lock()

    @property
    def mode(self) -> Mode:
        return self.config.mode

    @property
    def backend(self) -> Backend:
        self.startup()
        assert self._backend is not None
        return self._backend

    @property
    def template(self) -> IndexTemplate:
        self.startup()
        assert self._template is not None
        return self._template

    def startup(self) -> None:
        """Load the template and bootstrap the backend, once.

        Raises:
            BootstrapError: If the template or backend cannot be set up.
            ConfigurationError: If the configuration is invalid.
        """
        if self._started:
            return
        with self._startup_lock:
            if self._started:
                return
            template = load_template(self.config.index_path)
            if self._live is not None and self.config.dev:
                self.config.validate()
                backend: Backend = DevBackend(self._live, self.config.dev_entry)
            else:
                backend = bootstrap(self.config)
            self._template = template
            self._backend = backend
            self._started = True
            logger.info("Serving %s in %s mode", template.path, self.mode.value)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self.startup()
        assert self._backend is not None
        assert self._template is not None

        await handle_request(
            scope,
            receive,
            send,
            backend=self._backend,
            template=self._template,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Bootstrap on ``lifespan.startup`` so failures stop the server."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self.startup()
                except Exception as exc:
                    logger.error("Startup failed: %s", exc)
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return


def create_ssr_handle(
    *,
    root: str = ".",
    dev: bool = True,
    index: str = "index.html",
    dist: str = "dist",
    live: LiveTransformer | None = None,
    **options: object,
) -> SSRHandle:
    """Create and start an SSR handle.

    Bootstraps immediately, so a missing template or a broken live
    transformer aborts here rather than on the first request.

    Extra keyword *options* are passed to ``SSRConfig``.
    """
    config = SSRConfig(root=root, dev=dev, index=index, dist=dist, **options)  # type: ignore[arg-type]
    handle = SSRHandle(config, live=live)
    handle.startup()
    return handle
