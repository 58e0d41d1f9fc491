"""The request as handlers see it.

Metadata is fixed when the ASGI scope arrives. The body is read lazily,
at most once, and only by handlers that ask for it.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

from perch._internal.asgi import Receive, Scope
from perch.http.fields import Headers, QueryParams


@dataclass(frozen=True, slots=True)
class Request:
    """An incoming HTTP request.

    Path tokens live on the ``Context`` of the handler that bound them,
    not here: the same request is seen with different tokens as it moves
    through prefix groups.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    client: tuple[str, int] | None = None

    _receive: Receive | None = field(default=None, repr=False, compare=False)
    # Filled by body(); the dict itself stays mutable on the frozen instance
    _body: dict[str, bytes] = field(default_factory=dict, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def accept_language(self) -> str | None:
        return self.headers.get("accept-language")

    @property
    def url(self) -> str:
        """Path plus query string, as the client sent it."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw}"
        return self.path

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield body chunks as ASGI delivers them."""
        if self._receive is None:
            return
        more_body = True
        while more_body:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            more_body = message.get("more_body", False)

    async def body(self) -> bytes:
        if "body" not in self._body:
            self._body["body"] = b"".join([chunk async for chunk in self.stream()])
        return self._body["body"]

    async def text(self, encoding: str = "utf-8") -> str:
        return (await self.body()).decode(encoding)

    async def json(self) -> Any:
        return json_module.loads(await self.body())

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive | None = None) -> Request:
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query=QueryParams(scope.get("query_string", b"")),
            client=tuple(client) if client else None,
            _receive=receive,
        )
