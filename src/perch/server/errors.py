"""Turn exceptions raised while serving a request into responses.

``HTTPError`` subclasses keep their status. Anything else is a 500.
Handlers registered with ``app.error()`` are looked up by exception type
first, then by status code.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from perch._internal.invoke import invoke
from perch.errors import HTTPError
from perch.files import FileSystem
from perch.http.request import Request
from perch.http.response import Response
from perch.server.negotiation import negotiate
from perch.templating.integration import TemplateRenderer

logger = logging.getLogger("perch.server")

ErrorHandlers = Mapping[int | type, Callable[..., Any]]


def _find_handler(
    error_handlers: ErrorHandlers, exc: Exception, status: int
) -> Callable[..., Any] | None:
    for kind in type(exc).__mro__:
        if kind in error_handlers:
            return error_handlers[kind]
    return error_handlers.get(status)


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
    *,
    templates: TemplateRenderer | None = None,
    files: FileSystem | None = None,
    locale: str | None = None,
) -> Response:
    """Run a registered error handler and render what it returns.

    Handlers take ``()``, ``(request)`` or ``(request, exc)`` and may
    return anything a route handler can, templates and files included.
    A handler that does not pick a status gets the status of the error.
    """
    arity = len(inspect.signature(handler).parameters)
    args = (request, exc)[: min(arity, 2)]
    response = negotiate(
        await invoke(handler, *args), templates=templates, files=files, locale=locale
    )
    if response.status == 200:
        response = response.with_status(status)
    return response


async def _try_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
    **render: Any,
) -> Response | None:
    try:
        return await call_error_handler(handler, request, exc, status, **render)
    except Exception:
        logger.exception(
            "Error handler for %d failed on %s %s", status, request.method, request.path
        )
        return None


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
    *,
    templates: TemplateRenderer | None = None,
    files: FileSystem | None = None,
    locale: str | None = None,
) -> Response:
    """Answer an ``HTTPError``, through a registered handler when one exists.

    If that handler itself fails, the plain default body is sent instead.
    """
    level = logging.ERROR if exc.status >= 500 else logging.DEBUG
    logger.log(level, "%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = _find_handler(error_handlers, exc, exc.status)
    if handler is not None:
        response = await _try_error_handler(
            handler, request, exc, exc.status, templates=templates, files=files, locale=locale
        )
        if response is not None:
            return response

    if exc.status >= 500 and not debug:
        body = "Internal Server Error"
    elif debug and exc.detail:
        body = f"{exc.status}: {exc.detail}"
    else:
        body = exc.detail or f"Error {exc.status}"
    return Response(body=body, status=exc.status, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
    *,
    templates: TemplateRenderer | None = None,
    files: FileSystem | None = None,
    locale: str | None = None,
) -> Response:
    """Log an unexpected exception and answer 500."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = _find_handler(error_handlers, exc, 500)
    if handler is not None:
        response = await _try_error_handler(
            handler, request, exc, 500, templates=templates, files=files, locale=locale
        )
        if response is not None:
            return response

    body = f"500: {type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response(body=body, status=500)
