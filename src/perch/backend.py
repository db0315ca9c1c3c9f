"""Asset backends and the environment bootstrapper.

Exactly one backend exists per process, chosen once by ``bootstrap``:

- ``DevBackend`` wraps a live transformer. Its middleware answers
  development asset requests; its resolver re-evaluates the server
  entry on every request.
- ``ProdBackend`` wraps ``StaticFiles`` over the compiled client
  bundle. Its resolver imports the built server entry once.

Both implement the same intercept-or-fallthrough interface, so the
request handler never branches on the mode.
"""

import logging
from typing import Protocol

from perch.config import Mode, SSRConfig
from perch.dev.protocol import LiveTransformer
from perch.errors import BootstrapError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Next
from perch.middleware.static import StaticFiles
from perch.resolver import BuildResolver, LiveResolver, Resolver

logger = logging.getLogger("perch.server")


class Backend(Protocol):
    """Mode-specific asset layer plus render function strategy."""

    @property
    def mode(self) -> Mode: ...

    @property
    def resolver(self) -> Resolver: ...

    @property
    def live(self) -> LiveTransformer | None: ...

    async def intercept(self, request: Request, fallthrough: Next) -> Response:
        """Answer *request* from the asset layer or call *fallthrough*."""
        ...


class DevBackend:
    """Live transformer middleware + fresh-per-request resolution."""

    __slots__ = ("_live", "_resolver")

    def __init__(self, live: LiveTransformer, entry: str) -> None:
        self._live = live
        self._resolver = LiveResolver(live, entry)

    @property
    def mode(self) -> Mode:
        return Mode.DEVELOPMENT

    @property
    def resolver(self) -> LiveResolver:
        return self._resolver

    @property
    def live(self) -> LiveTransformer:
        return self._live

    async def intercept(self, request: Request, fallthrough: Next) -> Response:
        return await self._live.middleware(request, fallthrough)


class ProdBackend:
    """Static client bundle + build-once resolution."""

    __slots__ = ("_resolver", "_static")

    def __init__(self, static: StaticFiles, resolver: BuildResolver) -> None:
        self._static = static
        self._resolver = resolver

    @property
    def mode(self) -> Mode:
        return Mode.PRODUCTION

    @property
    def resolver(self) -> BuildResolver:
        return self._resolver

    @property
    def live(self) -> None:
        return None

    async def intercept(self, request: Request, fallthrough: Next) -> Response:
        return await self._static(request, fallthrough)


def bootstrap(config: SSRConfig) -> Backend:
    """Construct the backend for *config*'s mode.

    Raises:
        ConfigurationError: If *config* is invalid.
        BootstrapError: If the live transformer cannot initialize, or
            the production client bundle is missing.
    """
    config.validate()

    if config.dev:
        # Deferred: production processes never import the live transformer
        from perch.dev.server import LiveServer

        live = LiveServer(
            config.root,
            public_dir=config.public_dir,
            inject_client=config.debug_client,
        )
        logger.info("Development mode: rendering %s from source", config.dev_entry)
        return DevBackend(live, config.dev_entry)

    client_dir = config.client_dir
    if not client_dir.is_dir():
        msg = f"Client build directory {client_dir} does not exist; run the production build first"
        raise BootstrapError(msg)

    logger.info("Production mode: serving %s", client_dir)
    return ProdBackend(
        StaticFiles(client_dir, prefix="/", index=None),
        BuildResolver(config.server_entry_path),
    )
