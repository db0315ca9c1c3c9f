"""Terminal error formatting for render failures.

Replaces a raw ``logger.exception()`` with output that highlights the
useful part. Errors that carry a code frame (attached by the live
transformer) are printed with it::

    -- Render Error -------------------------------------------------
    ModuleLoadError: invalid syntax (entry_server.py:4)
      File: /app/src/entry_server.py

        3 | async def render(url, context):
      > 4 |     return {"app_html": markup(}
          |                               ^

      Request: GET /dashboard
    -----------------------------------------------------------------

Other errors use the traceback style from ``PERCH_TRACEBACK``:
``compact`` (default, application frames only), ``full`` or
``minimal``.
"""

from __future__ import annotations

import logging
import os
import traceback as _traceback
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.http.request import Request

logger = logging.getLogger("perch.server")

# Width of the terminal error banner
_BANNER_WIDTH = 65


def _is_app_frame(filename: str) -> bool:
    """True if the frame is from the application (not stdlib/site-packages)."""
    if "site-packages" in filename or filename.startswith("<"):
        return False
    stdlib_prefix = os.path.dirname(os.__file__)
    return not filename.startswith(stdlib_prefix)


def format_source_error(exc: BaseException, request: Request | None = None) -> str:
    """Banner-wrapped message, source file and code frame."""
    parts = [f"-- Render Error {'-' * (_BANNER_WIDTH - 16)}"]
    parts.append(f"{type(exc).__name__}: {exc}")

    source_id = getattr(exc, "id", None)
    if source_id:
        parts.append(f"  File: {source_id}")

    frame = getattr(exc, "frame", None)
    if frame:
        parts.append("")
        parts.extend(f"  {line}" for line in str(frame).splitlines())

    if request is not None:
        parts.append("")
        parts.append(f"  Request: {request.method} {request.url}")

    parts.append("-" * _BANNER_WIDTH)
    return "\n".join(parts)


def format_compact_traceback(exc: BaseException) -> str:
    """Error summary plus the last few application frames."""
    frames = _traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    display_frames = app_frames if app_frames else frames[-3:]

    parts = [f"{type(exc).__name__}: {exc}"]
    if display_frames:
        parts.append("  Trace (app frames):")
        for frame in display_frames[-5:]:
            parts.append(f"    {frame.filename}:{frame.lineno} in {frame.name}")
            if frame.line:
                parts.append(f"      {frame.line.strip()}")
    return "\n".join(parts)


def format_minimal_error(exc: BaseException) -> str:
    """One-line error summary."""
    frames = _traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    last = frames[-1] if frames else None
    location = f" at {last.filename}:{last.lineno}" if last else ""
    return f"{type(exc).__name__}{location}: {exc}"


def log_error(exc: BaseException, request: Request | None = None) -> None:
    """Log a render failure with the configured formatting."""
    prefix = f"500 {request.method} {request.url}" if request is not None else "Render error"

    if getattr(exc, "frame", None):
        logger.error("%s\n%s", prefix, format_source_error(exc, request))
        return

    style = os.environ.get("PERCH_TRACEBACK", "compact").lower()
    if style == "full":
        logger.error("%s", prefix, exc_info=exc)
    elif style == "minimal":
        logger.error("%s: %s", prefix, format_minimal_error(exc))
    else:
        logger.error("%s\n%s", prefix, format_compact_traceback(exc))
