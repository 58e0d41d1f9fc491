"""Write a Response to ASGI ``send``."""

from perch._internal.asgi import Send
from perch.http.response import Response

# RFC 9110: these never carry content
_BODYLESS = frozenset({204, 304})


async def send_response(response: Response, send: Send, *, head: bool = False) -> None:
    """Emit ``http.response.start`` and one ``http.response.body``.

    Content-Length is always computed here; a value set by a handler is
    dropped. HEAD responses keep the length of the body they omit.
    """
    status = response.status
    body = b"" if status < 200 or status in _BODYLESS else response.body_bytes

    headers = [(b"content-type", response.content_type.encode("latin-1"))]
    headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
        if name.lower() != "content-length"
    )
    headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": b"" if head else body})
