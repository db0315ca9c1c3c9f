"""ASGI handler: translates ASGI scope/messages to perch types.

The only component that touches raw ASGI directly. Builds a Request,
runs the backend's asset phase, falls through to the render pipeline
when the asset layer does not answer, and sends the Response back
through ASGI ``send()``.
"""

from perch._internal.asgi import Receive, Scope, Send
from perch.backend import Backend
from perch.http.request import Request
from perch.http.response import Response
from perch.render.pipeline import render_page
from perch.server.errors import handle_render_error
from perch.server.sender import send_response
from perch.template import IndexTemplate


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    backend: Backend,
    template: IndexTemplate,
) -> None:
    """Process a single HTTP request.

    Asset phase: ``backend.intercept`` answers directly or calls the
    fallthrough. Render phase: only reached through the fallthrough,
    never re-enters the asset phase, and always yields exactly one
    response (page, redirect, or 500).

    Asset-phase failures belong to the backend and propagate to the
    server.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def fallthrough(req: Request) -> Response:
        try:
            return await render_page(req, template, backend)
        except Exception as exc:
            return handle_render_error(exc, req, backend)

    response = await backend.intercept(request, fallthrough)
    await send_response(response, send, head=request.method == "HEAD")
