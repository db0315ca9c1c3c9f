"""Render failure handling.

Every exception raised while resolving, invoking or composing a page
ends here and becomes a 500. The process keeps serving.

- Development: the live transformer attaches source positions, the
  error is logged, and the response is the diagnostic page.
- Production: the error is logged and the response is an opaque
  ``Server Error`` that discloses nothing about the source.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from perch.config import Mode
from perch.http.response import TEXT_CONTENT_TYPE, Response
from perch.server.terminal_errors import log_error

if TYPE_CHECKING:
    from perch.backend import Backend
    from perch.http.request import Request

logger = logging.getLogger("perch.server")

PRODUCTION_ERROR_BODY = "Server Error"


def handle_render_error(exc: Exception, request: Request, backend: Backend) -> Response:
    """Log *exc* and build the mode-appropriate 500 response."""
    live = backend.live
    if live is not None:
        try:
            live.fix_stacktrace(exc)
        except Exception:
            logger.warning("Could not map %s to source positions", type(exc).__name__, exc_info=True)

    log_error(exc, request)

    if backend.mode is Mode.DEVELOPMENT:
        from perch.server.debug_page import render_debug_page

        body = render_debug_page(exc, request)
        return Response(body=body, status=500, content_type="text/html; charset=utf-8")

    return Response(body=PRODUCTION_ERROR_BODY, status=500, content_type=TEXT_CONTENT_TYPE)
