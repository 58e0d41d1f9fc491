"""Chain builder — the registration surface handed to configuration functions.

A configuration function receives a ``Chain`` and registers routes on it,
in order. Groups get their own nested ``Chain``. Nothing is compiled: the
result of ``build()`` is the ordered entry tree the dispatcher walks.

Usage::

    def handlers(chain: Chain) -> None:
        chain.get("hello", lambda ctx: "Hello World!")

        @chain.prefix("person/:id")
        def person(group: Chain) -> None:
            group.all(load_person)
            group.get("status", person_status)
"""

from pathlib import Path
from typing import Any

from perch._internal.types import Configure, Handler
from perch.errors import ConfigurationError
from perch.files import FileSystem
from perch.routing.pattern import parse_pattern
from perch.routing.route import METHODS, Entry, FileSystemRoute, PrefixGroup, Route


class Chain:
    """An ordered, growable list of chain entries.

    Registration order is the only tie-break between overlapping
    patterns: the first matching entry wins.
    """

    __slots__ = ("_entries", "_static_dir")

    def __init__(self, *, static_dir: str | Path | None = None) -> None:
        self._entries: list[Entry] = []
        self._static_dir = static_dir

    # -- Core registration --

    def route(self, method: str, path: str, handler: Handler) -> Handler:
        """Register *handler* for *method* at *path*. Returns the handler."""
        normalized = method.upper()
        if normalized not in METHODS:
            msg = f"Unsupported method {method!r}. Expected one of: {', '.join(sorted(METHODS))}"
            raise ConfigurationError(msg)
        if not callable(handler):
            msg = f"Handler for {normalized} {path!r} is not callable: {handler!r}"
            raise ConfigurationError(msg)
        self._entries.append(
            Route(method=normalized, path=path, segments=parse_pattern(path), handler=handler)
        )
        return handler

    # -- Method shortcuts (plain call or decorator) --

    def get(self, path: str = "", handler: Handler | None = None) -> Any:
        return self._method("GET", path, handler)

    def put(self, path: str = "", handler: Handler | None = None) -> Any:
        return self._method("PUT", path, handler)

    def post(self, path: str = "", handler: Handler | None = None) -> Any:
        return self._method("POST", path, handler)

    def delete(self, path: str = "", handler: Handler | None = None) -> Any:
        return self._method("DELETE", path, handler)

    def options(self, path: str = "", handler: Handler | None = None) -> Any:
        return self._method("OPTIONS", path, handler)

    def patch(self, path: str = "", handler: Handler | None = None) -> Any:
        return self._method("PATCH", path, handler)

    def all(self, handler: Handler | None = None) -> Any:
        """Register a handler for every method and every remaining path.

        Inside a prefix group this is the group's pre-handler: it runs
        before the nested routes and forwards with ``ctx.next(...)``.
        """
        if handler is None:

            def decorator(func: Handler) -> Handler:
                return self._all(func)

            return decorator
        return self._all(handler)

    # -- Groups --

    def prefix(self, path: str, configure: Configure | None = None) -> Any:
        """Register a group of entries under a leading *path* pattern.

        Tokens bound by *path* are visible to every handler in the group.
        """
        return self._group(path, configure, exact=False)

    def path(self, path: str, configure: Configure | None = None) -> Any:
        """Register a group that only matches *path* exactly.

        Used to give one URL per-method handlers::

            @chain.path("path/:name")
            def by_method(c: Chain) -> None:
                c.get(handler=show)
                c.put(handler=update)
        """
        return self._group(path, configure, exact=True)

    # -- Static files --

    def files(self, directory: str | Path | None = None, *, index: str = "index.html") -> None:
        """Serve files from *directory* (default: the app's static dir).

        Requests that do not name an existing file continue down the chain.
        """
        target = directory if directory is not None else self._static_dir
        if target is None:
            msg = "chain.files() needs a directory: pass one or set AppConfig.static_dir."
            raise ConfigurationError(msg)
        self._entries.append(FileSystemRoute(file_system=FileSystem(target), index=index))

    # -- Result --

    def build(self) -> tuple[Entry, ...]:
        """Return the registered entries as an immutable tuple."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    # -- Internal --

    def _method(self, method: str, path: str, handler: Handler | None) -> Any:
        if handler is None:

            def decorator(func: Handler) -> Handler:
                return self.route(method, path, func)

            return decorator
        return self.route(method, path, handler)

    def _all(self, handler: Handler) -> Handler:
        if not callable(handler):
            msg = f"Handler passed to all() is not callable: {handler!r}"
            raise ConfigurationError(msg)
        self._entries.append(Route(method="ALL", path=None, segments=(), handler=handler))
        return handler

    def _group(self, path: str, configure: Configure | None, *, exact: bool) -> Any:
        def register(func: Configure) -> Configure:
            nested = Chain(static_dir=self._static_dir)
            func(nested)
            self._entries.append(
                PrefixGroup(
                    path=path,
                    segments=parse_pattern(path),
                    entries=nested.build(),
                    exact=exact,
                )
            )
            return func

        if configure is None:
            return register
        register(configure)
        return None


def build_chain(*configure: Configure, static_dir: str | Path | None = None) -> tuple[Entry, ...]:
    """Run configuration functions against a fresh root chain."""
    chain = Chain(static_dir=static_dir)
    for func in configure:
        func(chain)
    return chain.build()
