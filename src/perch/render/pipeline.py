"""Render pipeline: one page request from resolution to Response.

1. Resolve the render function and effective template for the URL.
2. Build the render context.
3. Await ``render(url, context)``.
4. Redirect -> 302; Rendered -> inject state and markup -> 200.

Exceptions propagate to the caller, which turns them into a 500.
"""

import json

from perch._internal.invoke import invoke
from perch.backend import Backend
from perch.errors import RenderError
from perch.http.request import Request
from perch.http.response import HTML_CONTENT_TYPE, TEXT_CONTENT_TYPE, Response
from perch.render.context import build_render_context
from perch.render.result import Redirect, Rendered, coerce_result
from perch.template import IndexTemplate


def serialize_props(props_data: object) -> str:
    """JSON for the state script element, every ``/`` escaped as ``\\/``.

    Escaping the slash keeps a string like ``"</script>"`` in the data
    from closing the element early. ``JSON.parse`` reads ``\\/`` as ``/``.
    NaN and Infinity are rejected with ``ValueError``; ``JSON.parse``
    cannot read them.
    """
    text = json.dumps(props_data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return text.replace("/", "\\/")


def state_script(props_data: object) -> str:
    """The element that replaces the state-injection marker."""
    return f'<script id="ssr-data" type="text/json">{serialize_props(props_data)}</script>'


def redirect_response(location: object) -> Response:
    """302 with ``Location`` and a ``Location:<url>`` body.

    Raises:
        RenderError: If *location* cannot be sent as a header value.
    """
    if not isinstance(location, str) or not location.strip():
        msg = f"Redirect location must be a non-empty string, got {location!r}"
        raise RenderError(msg)
    if "\r" in location or "\n" in location:
        msg = f"Redirect location contains a line break: {location!r}"
        raise RenderError(msg)
    try:
        location.encode("latin-1")
    except UnicodeEncodeError as exc:
        msg = f"Redirect location is not a valid header value: {location!r}"
        raise RenderError(msg) from exc

    return Response(
        body=f"Location:{location}",
        status=302,
        content_type=TEXT_CONTENT_TYPE,
    ).with_header("Location", location)


def page_response(template: IndexTemplate, html: str, result: Rendered) -> Response:
    """200 with state and markup injected into *html*."""
    document = template.inject(
        html,
        state_html=state_script(result.props_data),
        app_html=result.app_html,
    )
    return Response(body=document, content_type=HTML_CONTENT_TYPE)


async def render_page(request: Request, template: IndexTemplate, backend: Backend) -> Response:
    """Render *request* into a full page or a redirect."""
    url = request.url
    render, html = await backend.resolver.resolve(url, template)
    context = build_render_context(request)

    result = coerce_result(await invoke(render, url, context))

    match result:
        case Redirect(location=location):
            return redirect_response(location)
        case Rendered():
            return page_response(template, html, result)
