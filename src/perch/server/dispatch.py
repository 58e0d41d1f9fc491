"""Dispatcher — walks the handler chain for one request.

Entries are tried in registration order against the remaining path.
A prefix group consumes its leading segments and walks its own entries;
if none of them finishes the request, scanning resumes after the group
with the outer tokens and registry untouched. A handler that calls
``ctx.next()`` layers its additions onto the registry seen by the
entries after it in the same chain.

The entry tree is shared read-only between concurrent requests. Every
piece of mutable state lives in the per-request ``_Walk``.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from perch._internal.invoke import invoke
from perch.context import Context, ResponseBuilder, negotiate_locale
from perch.errors import FileNotFound, HandlerFailure, MethodNotAllowed, NoRouteMatch
from perch.files import serve_file
from perch.http.request import Request
from perch.registry import Registry
from perch.routing.pattern import Tokens, match_prefix, split_path
from perch.routing.pattern import match as match_pattern
from perch.routing.route import Entry, FileSystemRoute, PrefixGroup, Route

logger = logging.getLogger("perch.dispatch")

# Returned by _walk when no entry in a chain finished the request
_UNHANDLED: Any = object()


@dataclass(frozen=True, slots=True)
class Resolution:
    """What the dispatcher hands to the renderer."""

    outcome: Any
    response: ResponseBuilder
    locale: str | None = None


@dataclass(slots=True)
class _Walk:
    """Mutable state for one request's trip through the chain."""

    request: Request
    response: ResponseBuilder
    locale: str | None
    allowed: set[str] = field(default_factory=set)


class Dispatcher:
    """Resolve requests against an immutable entry tree.

    Usage::

        dispatcher = Dispatcher(build_chain(handlers), Registry.of(greeting="World!"))
        resolution = await dispatcher.dispatch(request)

    Raises ``NoRouteMatch`` when nothing handles the request and
    ``MethodNotAllowed`` when only the method was wrong. Exceptions from
    handlers propagate unchanged; they are never retried.
    """

    __slots__ = ("_cache_control", "_default_locale", "_entries", "_registry")

    def __init__(
        self,
        entries: tuple[Entry, ...],
        registry: Registry | None = None,
        *,
        default_locale: str | None = None,
        cache_control: str = "public, max-age=3600",
    ) -> None:
        self._entries = entries
        self._registry = registry if registry is not None else Registry.empty()
        self._default_locale = default_locale
        self._cache_control = cache_control

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    @property
    def default_locale(self) -> str | None:
        return self._default_locale

    async def dispatch(self, request: Request) -> Resolution:
        walk = _Walk(
            request=request,
            response=ResponseBuilder(),
            locale=negotiate_locale(request.accept_language, self._default_locale),
        )
        outcome = await self._walk(
            self._entries, split_path(request.path), {}, self._registry, walk
        )
        if outcome is _UNHANDLED:
            if walk.allowed:
                if "GET" in walk.allowed:
                    walk.allowed.add("HEAD")
                raise MethodNotAllowed(frozenset(walk.allowed))
            raise NoRouteMatch(f"No route matches {request.method} {request.path!r}")
        return Resolution(outcome=outcome, response=walk.response, locale=walk.locale)

    async def _walk(
        self,
        entries: tuple[Entry, ...],
        parts: tuple[str, ...],
        tokens: Tokens,
        registry: Registry,
        walk: _Walk,
    ) -> Any:
        for entry in entries:
            match entry:
                case Route():
                    bound = {} if entry.any_path else match_pattern(entry.segments, parts)
                    if bound is None:
                        continue
                    if not _method_matches(entry, walk.request.method):
                        walk.allowed.add(entry.method)
                        continue
                    ctx = Context(
                        walk.request,
                        path_tokens={**tokens, **bound},
                        registry=registry,
                        response=walk.response,
                        locale=walk.locale,
                    )
                    outcome = await self._run(entry, ctx)
                    if ctx.continuation is not None:
                        registry = registry.join(ctx.continuation)
                        continue
                    return outcome

                case PrefixGroup():
                    if entry.exact:
                        bound = match_pattern(entry.segments, parts)
                        rest: tuple[str, ...] = ()
                    else:
                        prefixed = match_prefix(entry.segments, parts)
                        bound, rest = prefixed if prefixed is not None else (None, ())
                    if bound is None:
                        continue
                    logger.debug("Entering group %r with %r", entry.path, bound)
                    saved = (walk.response.status_code, list(walk.response.headers))
                    outcome = await self._walk(
                        entry.entries, rest, {**tokens, **bound}, registry, walk
                    )
                    if outcome is not _UNHANDLED:
                        return outcome
                    # Fell through: nothing the group set reaches its siblings
                    walk.response.status_code, walk.response.headers = saved

                case FileSystemRoute():
                    if walk.request.method not in ("GET", "HEAD"):
                        continue
                    try:
                        file_path = entry.file_system.resolve("/".join(parts), index=entry.index)
                    except FileNotFound:
                        continue
                    logger.debug("Serving static file %s", file_path)
                    return serve_file(file_path, cache_control=self._cache_control)

        return _UNHANDLED

    async def _run(self, route: Route, ctx: Context) -> Any:
        """Invoke one handler and enforce the finish-or-continue contract."""
        logger.debug("%s %s -> %s", ctx.method, ctx.path, _describe(route))
        writes_before = ctx.response.status_writes
        result = await invoke(route.handler, ctx)
        builder = ctx.response

        if ctx.continued:
            if result is not None or builder.rendered:
                msg = f"{_describe(route)} rendered a response and also called next()"
                raise HandlerFailure(msg)
            return None

        if result is not None:
            if builder.rendered:
                msg = f"{_describe(route)} both returned a value and called render()"
                raise HandlerFailure(msg)
            return result

        if builder.rendered:
            return builder.outcome

        # A status this handler set through ctx.response counts as a (bodiless) response
        if builder.status_writes != writes_before:
            return ""

        msg = f"{_describe(route)} neither rendered a response nor called next()"
        raise HandlerFailure(msg)


def _method_matches(route: Route, method: str) -> bool:
    # GET routes also answer HEAD; the sender drops the body
    if route.any_method or route.method == method:
        return True
    return route.method == "GET" and method == "HEAD"


def _describe(route: Route) -> str:
    name = getattr(route.handler, "__qualname__", repr(route.handler))
    where = "*" if route.path is None else repr(route.path)
    return f"handler {name} ({route.method} {where})"
