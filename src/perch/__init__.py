"""Perch: server-side rendering host for single-page applications.

Serves server-rendered HTML in two modes: development, where the
server entry is re-evaluated from source on every request, and
production, where a prebuilt entry is imported once and client
assets are served from disk.

Basic usage::

    from perch import create_ssr_handle

    app = create_ssr_handle(root="web", dev=True, index="web/index.html")

The server entry exports a render function::

    async def render(url, context):
        if not context.query.get("user"):
            return {"redirect": "/login"}
        return {"app_html": "<div>Hello</div>", "props_data": {"user": ...}}
"""

__version__ = "0.1.0-dev"
__all__ = [
    "BootstrapError",
    "ConfigurationError",
    "Mode",
    "PerchError",
    "Redirect",
    "RenderContext",
    "RenderError",
    "Rendered",
    "SSRConfig",
    "SSRHandle",
    "create_ssr_handle",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name in ("SSRHandle", "create_ssr_handle"):
        from perch import handle as _handle

        return getattr(_handle, name)

    if name in ("SSRConfig", "Mode"):
        from perch import config as _config

        return getattr(_config, name)

    if name in ("Redirect", "Rendered"):
        from perch.render import result as _result

        return getattr(_result, name)

    if name == "RenderContext":
        from perch.render.context import RenderContext

        return RenderContext

    if name in ("BootstrapError", "ConfigurationError", "PerchError", "RenderError"):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
