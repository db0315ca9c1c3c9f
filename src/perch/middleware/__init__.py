"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    StaticFiles -- Serve static files from a directory
"""

from perch.middleware.protocol import Middleware, Next
from perch.middleware.static import StaticFiles

__all__ = [
    "Middleware",
    "Next",
    "StaticFiles",
]
