"""Development mode: the live transformer.

``LiveServer`` is the built-in implementation of ``LiveTransformer``.
Pass any object with the same shape to ``DevBackend`` to plug in a
different one.
"""

__all__ = [
    "LiveServer",
    "LiveTransformer",
]


def __getattr__(name: str) -> object:
    """Lazy imports so production processes never load the live transformer."""
    if name == "LiveServer":
        from perch.dev.server import LiveServer

        return LiveServer

    if name == "LiveTransformer":
        from perch.dev.protocol import LiveTransformer

        return LiveTransformer

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
