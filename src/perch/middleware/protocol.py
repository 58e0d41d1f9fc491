"""The middleware shape.

Middleware sees the request before the handler chain does and the
response after it::

    async def server_header(request: Request, next: Next) -> Response:
        response = await next(request)
        return response.with_header("Server", "perch")

Returning without calling ``next`` short-circuits the chain. Errors raised
by the chain pass through middleware to the error pipeline.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from perch.http.request import Request
from perch.http.response import Response

# Everything inside this middleware: the rest of the stack, then the chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Any async callable taking ``(request, next)``.

    Plain functions and objects with an async ``__call__`` both qualify,
    so per-instance state (a counter, a client) needs no base class.
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
