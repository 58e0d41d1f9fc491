"""Tests for perch.server.sender: Response to ASGI messages."""

from typing import Any

from perch.http.response import Response
from perch.server.sender import send_response


async def _capture(response: Response, *, head: bool = False) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = []

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)

    await send_response(response, send, head=head)
    return messages


class TestSendResponse:
    async def test_start_and_body(self) -> None:
        start, body = await _capture(Response("Hello World!"))
        assert start["type"] == "http.response.start"
        assert start["status"] == 200
        headers = dict(start["headers"])
        assert headers[b"content-type"] == b"text/plain; charset=utf-8"
        assert headers[b"content-length"] == b"12"
        assert body == {"type": "http.response.body", "body": b"Hello World!"}

    async def test_user_content_length_is_replaced(self) -> None:
        start, _ = await _capture(Response("abc").with_header("Content-Length", "999"))
        lengths = [v for k, v in start["headers"] if k == b"content-length"]
        assert lengths == [b"3"]

    async def test_head_keeps_length_drops_body(self) -> None:
        start, body = await _capture(Response("abc"), head=True)
        assert dict(start["headers"])[b"content-length"] == b"3"
        assert body["body"] == b""

    async def test_no_body_for_204(self) -> None:
        start, body = await _capture(Response("ignored", status=204))
        assert dict(start["headers"])[b"content-length"] == b"0"
        assert body["body"] == b""
