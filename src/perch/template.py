"""Index template store.

The base HTML document is read once at startup and held as an
immutable ``IndexTemplate``. Per-request transformation (development
only) produces a new string; the stored text is never modified.

Two literal markers are replaced on every successful render:

- ``<!--init-props-->``: serialized initial state
- ``<!--app-html-->``: rendered application markup
"""

from dataclasses import dataclass
from pathlib import Path

from perch.errors import BootstrapError, PerchError, RenderError

STATE_MARKER = "<!--init-props-->"
MARKUP_MARKER = "<!--app-html-->"


def _check_markers(html: str, source: str, error: type[PerchError] = BootstrapError) -> None:
    for marker in (STATE_MARKER, MARKUP_MARKER):
        count = html.count(marker)
        if count != 1:
            msg = f"{source} must contain {marker} exactly once (found {count})"
            raise error(msg)


@dataclass(frozen=True, slots=True)
class IndexTemplate:
    """The base HTML document for every rendered page."""

    path: Path
    html: str

    def inject(self, html: str, *, state_html: str, app_html: str) -> str:
        """Replace each marker in *html* exactly once.

        *html* is this template's text or a transformed copy of it.
        Both markers are located before anything is substituted, so
        marker-like text inside the inserted state or markup is never
        itself replaced.
        """
        _check_markers(html, f"Transformed template for {self.path}", RenderError)
        state_at = html.index(STATE_MARKER)
        markup_at = html.index(MARKUP_MARKER)

        spans = sorted(
            (
                (state_at, state_at + len(STATE_MARKER), state_html),
                (markup_at, markup_at + len(MARKUP_MARKER), app_html),
            )
        )
        parts: list[str] = []
        cursor = 0
        for start, end, replacement in spans:
            parts.append(html[cursor:start])
            parts.append(replacement)
            cursor = end
        parts.append(html[cursor:])
        return "".join(parts)


def load_template(path: str | Path) -> IndexTemplate:
    """Read and validate the index template.

    Raises:
        BootstrapError: If the file is missing or unreadable, or a
            marker is absent or repeated.
    """
    resolved = Path(path).resolve()
    try:
        html = resolved.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read index template {resolved}: {exc}"
        raise BootstrapError(msg) from exc

    _check_markers(html, str(resolved))
    return IndexTemplate(path=resolved, html=html)
