"""Per-request render context handed to the server entry's ``render``.

Built fresh for every request and never retained.
"""

from dataclasses import dataclass

from perch.http.query import QueryParams, parse_query_string
from perch.http.request import Request


@dataclass(frozen=True, slots=True)
class RenderContext:
    """What a render function knows about the request.

    Attributes:
        url: Request URL relative to the mount point.
        query: Query parameters; first value per key, ``get_list`` for all.
        original_url: Request target exactly as received.
        request: The underlying request, for headers or the client address.
        is_ssr: Always ``True``; lets shared code detect server rendering.
    """

    url: str
    query: QueryParams
    original_url: str
    request: Request
    is_ssr: bool = True


def build_render_context(request: Request) -> RenderContext:
    """Create the context for *request*.

    Uses the request's parsed query when the server supplied one,
    otherwise parses the query portion of the URL.
    """
    if request.query is not None:
        query = request.query
    else:
        query = parse_query_string(request.original_url)

    return RenderContext(
        url=request.url,
        query=query,
        original_url=request.original_url,
        request=request,
    )
