"""ASGI request handling: scope in, response messages out.

This is where raw ASGI meets perch types. The request is built from the
scope, passed through middleware into the dispatcher, the outcome is
rendered, and any exception on the way is turned into an error response.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from perch._internal.asgi import Receive, Scope, Send
from perch.context import negotiate_locale
from perch.errors import HTTPError
from perch.files import FileSystem
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Middleware, Next
from perch.server.dispatch import Dispatcher
from perch.server.errors import handle_http_error, handle_internal_error
from perch.server.negotiation import negotiate
from perch.server.sender import send_response
from perch.templating.integration import TemplateRenderer


def _wrap(middleware: Middleware, inner: Next) -> Next:
    async def call(request: Request) -> Response:
        return await middleware(request, inner)

    return call


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
    middleware: Sequence[Middleware] = (),
    error_handlers: Mapping[int | type, Callable[..., Any]],
    templates: TemplateRenderer | None = None,
    files: FileSystem | None = None,
    cache_control: str = "public, max-age=3600",
    max_content_length: int | None = None,
    debug: bool = False,
) -> None:
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    async def run_chain(req: Request) -> Response:
        _check_content_length(req, max_content_length)
        resolution = await dispatcher.dispatch(req)
        rendered = negotiate(
            resolution.outcome,
            templates=templates,
            files=files,
            locale=resolution.locale,
            cache_control=cache_control,
        )
        return resolution.response.apply(rendered)

    # First registered middleware ends up outermost
    stack: Next = run_chain
    for mw in reversed(middleware):
        stack = _wrap(mw, stack)

    # Error handlers render with the same templates and files as routes
    rendering: dict[str, Any] = {
        "templates": templates,
        "files": files,
        "locale": negotiate_locale(request.accept_language, dispatcher.default_locale),
    }
    try:
        response = await stack(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug, **rendering)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug, **rendering)

    await send_response(response, send, head=request.method == "HEAD")


def _check_content_length(request: Request, limit: int | None) -> None:
    declared = request.headers.get("content-length")
    if limit is None or declared is None:
        return
    if not declared.isdigit():
        raise HTTPError(status=400, detail="Invalid Content-Length header")
    if int(declared) > limit:
        raise HTTPError(status=413, detail=f"Request body exceeds {limit} bytes")
