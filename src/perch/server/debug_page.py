"""Self-contained development error page.

Uses plain f-strings so that a broken application cannot prevent
error reporting. Rendered only in development mode.

The page shows:

- Exception type and message
- Source file the error was traced to (editor-clickable via
  ``PERCH_EDITOR``), or ``n/a``
- Code frame, one ``<code>`` element per line
- Compiled output for the failing line, one ``<code>`` per line
- Application traceback frames
- Request summary with sensitive headers masked

The source, frame and output sections come from the optional ``id``,
``frame`` and ``plugin_code`` attributes. Any of them may be missing;
a missing one is omitted (or shown as ``n/a``) rather than failing
while reporting the failure.
"""

from __future__ import annotations

import html
import os
import traceback
from dataclasses import dataclass
from typing import Any

from perch.server.terminal_errors import _is_app_frame

# ---------------------------------------------------------------------------
# Diagnostic extraction
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """The parts of an error worth rendering richly."""

    message: str
    source_id: str | None = None
    code_frame: str | None = None
    compiled_output: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> Diagnostic:
        def text(name: str) -> str | None:
            value = getattr(exc, name, None)
            return str(value) if value else None

        return cls(
            message=str(exc),
            source_id=text("id"),
            code_frame=text("frame"),
            compiled_output=text("plugin_code"),
        )


# ---------------------------------------------------------------------------
# Editor link support
# ---------------------------------------------------------------------------

_EDITOR_PRESETS: dict[str, str] = {
    "vscode": "vscode://file/__FILE__",
    "cursor": "cursor://file/__FILE__",
    "sublime": "subl://open?url=file://__FILE__",
    "idea": "idea://open?file=__FILE__",
    "pycharm": "pycharm://open?file=__FILE__",
}


def _editor_url(filepath: str) -> str | None:
    """Build an editor URL from ``PERCH_EDITOR`` (preset name or ``__FILE__`` pattern)."""
    pattern = os.environ.get("PERCH_EDITOR", "")
    if not pattern:
        return None
    pattern = _EDITOR_PRESETS.get(pattern.lower(), pattern)
    return pattern.replace("__FILE__", filepath)


# Headers whose values are masked on the page
_SENSITIVE_HEADERS = frozenset({
    "authorization",
    "cookie",
    "proxy-authorization",
    "x-api-key",
    "x-auth-token",
})

# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

_CSS = """\
html { font-size: 14px; }
body {
    font-family: ui-monospace, 'Cascadia Code', 'Source Code Pro', Menlo, Consolas, monospace;
    background: #1a1b26; color: #a9b1d6; line-height: 1.5; margin: 0;
}
main {
    max-width: 800px; margin: 5rem auto; padding: 12px;
    border: 3px solid #f7768e; border-radius: 12px;
}
h1 { color: #f7768e; font-size: 1.3rem; margin: 0 0 0.5rem; }
h2 { color: #7aa2f7; font-size: 1rem; margin: 1.2rem 0 0.4rem; }
.message { color: #e0af68; white-space: pre-wrap; word-break: break-word; }
.source-id { color: #f7768e; }
.source-id a { color: #7dcfff; }
pre { white-space: pre-line; margin: 0; background: #24283b; border-radius: 6px; padding: 6px 10px; overflow-x: auto; }
code { display: block; margin: 2px auto; white-space: pre; }
.frames div, .request div { font-size: 0.85rem; }
.muted { color: #565f89; }
"""

# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def _esc(text: object) -> str:
    """HTML-escape a value."""
    return html.escape(str(text), quote=True)


def _code_block(text: str) -> str:
    """One ``<code>`` per line inside a ``<pre>``."""
    lines = "".join(f"<code>{_esc(line)}</code>" for line in text.split("\n"))
    return f"<pre>{lines}</pre>"


def _render_source_id(source_id: str | None) -> str:
    if not source_id:
        return '<p class="source-id">Error at file: n/a</p>'
    location = _esc(source_id)
    link = _editor_url(source_id)
    if link:
        location = f'<a href="{_esc(link)}">{location}</a>'
    return f'<p class="source-id">Error at file: {location}</p>'


def _render_frames(exc: BaseException) -> str:
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    app_frames = [f for f in frames if _is_app_frame(f.filename)]
    if not app_frames:
        return ""
    rows = "".join(
        f"<div>{_esc(f.filename)}:{f.lineno} in {_esc(f.name)}</div>" for f in app_frames
    )
    return f'<h2>Traceback</h2><div class="frames">{rows}</div>'


def _render_request(request: Any) -> str:
    if request is None:
        return ""
    rows = [f"<div>{_esc(request.method)} {_esc(request.url)}</div>"]
    headers = getattr(request, "headers", None)
    if headers:
        for name, value in headers.items():
            shown = "••••••••" if name.lower() in _SENSITIVE_HEADERS else value
            rows.append(f'<div><span class="muted">{_esc(name)}:</span> {_esc(shown)}</div>')
    return f'<h2>Request</h2><div class="request">{"".join(rows)}</div>'


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_debug_page(exc: BaseException, request: Any = None) -> str:
    """Render the development diagnostic page for *exc*.

    Args:
        exc: The render failure, after the live transformer has had a
            chance to attach source positions.
        request: The request being rendered, if available.

    Returns:
        A complete HTML document.
    """
    diagnostic = Diagnostic.from_exception(exc)
    exc_type = type(exc).__name__

    sections = [
        f"<h1>{_esc(exc_type)}</h1>",
        f'<div class="message">{_esc(diagnostic.message)}</div>',
        _render_source_id(diagnostic.source_id),
    ]
    if diagnostic.code_frame:
        sections.append("<div><p>Frame at:</p>" + _code_block(diagnostic.code_frame) + "</div>")
    if diagnostic.compiled_output:
        sections.append("<div><p>Output:</p>" + _code_block(diagnostic.compiled_output) + "</div>")
    sections.append(_render_frames(exc))
    sections.append(_render_request(request))

    body_html = "\n".join(s for s in sections if s)
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head>'
        '<meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"<title>{_esc(exc_type)}: {_esc(diagnostic.message[:80])}</title>"
        f"<style>{_CSS}</style>"
        "</head><body>"
        f"<main>{body_html}</main>"
        "</body></html>"
    )
