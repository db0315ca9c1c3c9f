"""Perch exception hierarchy.

Shared across the bootstrapper, resolvers, live transformer and the
request handler so every module raises and catches the same types.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when ``SSRConfig`` values are invalid."""


class BootstrapError(PerchError):
    """Raised when the process cannot start serving.

    Covers a missing or unreadable index template, a template without
    exactly one of each injection marker, a live transformer that
    cannot initialize, and a missing production client build.

    Never caught per request: startup aborts.
    """


class RenderError(PerchError):
    """Raised when a render function or its module breaks the contract.

    Examples: the server entry has no callable ``render``, the render
    function returns something that is neither a result nor a mapping,
    or a redirect location is unusable as a header value.
    """


class ModuleLoadError(PerchError):
    """A module failed to compile or execute under the live transformer.

    Carries the same optional diagnostic attributes the debug page reads
    from any exception:

    - ``id``: path of the offending source file
    - ``frame``: code frame around the failing line
    - ``plugin_code``: the source text that was being evaluated

    The original exception is chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        id: str | None = None,  # noqa: A002 - matches the diagnostic attribute name
        frame: str | None = None,
        plugin_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.id = id
        self.frame = frame
        self.plugin_code = plugin_code
