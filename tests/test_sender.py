"""Tests for perch.server.sender response emission rules."""

from perch.http.response import Response
from perch.server.sender import send_response


class TestSendResponse:
    async def test_redirect_headers(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        response = Response("Location:/login", status=302, content_type="text/plain").with_header(
            "Location", "/login"
        )
        await send_response(response, send)

        assert messages[0]["status"] == 302
        headers = dict(messages[0]["headers"])
        assert headers[b"location"] == b"/login"
        assert headers[b"content-type"] == b"text/plain"
        assert messages[1]["body"] == b"Location:/login"

    async def test_304_drops_body_and_sets_zero_content_length(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        response = Response("unexpected-body").with_status(304)
        await send_response(response, send)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"0"
        assert messages[1]["body"] == b""

    async def test_utf8_length(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response("Jürgen"), send)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"7"
        assert messages[1]["body"] == "Jürgen".encode()

    async def test_head_keeps_length_and_drops_body(self) -> None:
        messages: list[dict] = []

        async def send(message: dict) -> None:
            messages.append(message)

        await send_response(Response("<p>page</p>"), send, head=True)

        headers = dict(messages[0]["headers"])
        assert headers[b"content-length"] == b"11"
        assert messages[1]["body"] == b""
