"""Render results: what a server entry's ``render`` produces.

Two frozen dataclasses form a tagged union. A render function may
return either directly, or a plain mapping::

    {"app_html": "<div>...</div>", "props_data": {...}}
    {"redirect": "/login"}

``coerce_result`` normalizes all three shapes. A truthy ``redirect``
wins over any markup in the same mapping, so a result is never both
redirected and rendered.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from perch.errors import RenderError


@dataclass(frozen=True, slots=True)
class Redirect:
    """Send the browser elsewhere instead of rendering."""

    location: str


@dataclass(frozen=True, slots=True)
class Rendered:
    """Markup plus the JSON-serializable state it was rendered from."""

    app_html: str
    props_data: Any = None


RenderResult: TypeAlias = Redirect | Rendered


def coerce_result(value: Any) -> RenderResult:
    """Convert a render function's return value to a ``RenderResult``."""
    match value:
        case Redirect() | Rendered():
            return value
        case Mapping():
            redirect = value.get("redirect")
            if redirect:
                return Redirect(location=redirect)
            return Rendered(
                app_html=str(value.get("app_html") or ""),
                props_data=value.get("props_data"),
            )
        case _:
            msg = (
                f"render() returned {type(value).__name__}; expected a mapping with "
                "'app_html'/'props_data' (or 'redirect'), Rendered, or Redirect"
            )
            raise RenderError(msg)
