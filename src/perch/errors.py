"""Perch exception hierarchy.

Shared across the chain builder, dispatcher, renderer, and ASGI handler
so every module raises and catches the same types.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when routes or app configuration are invalid.

    Pattern problems surface when the route is registered; a bad outcome
    type surfaces when it is rendered.
    """


class TemplateNotFound(PerchError):  # noqa: N818
    """The template collaborator has no template under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Template not found: {name!r}")
        self.name = name


class NotInRegistry(PerchError, KeyError):  # noqa: N818
    """A handler asked the request registry for a tag nobody provided."""

    def __init__(self, tag: object) -> None:
        super().__init__(tag)
        self.tag = tag

    def __str__(self) -> str:
        return f"No value registered for {self.tag!r}"


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error with an HTTP status.

    Handlers may raise these directly; the status (and headers) reach the
    client unless an ``app.error()`` handler answers instead.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — the requested resource does not exist."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class NoRouteMatch(NotFound):  # noqa: N818
    """404 — no entry in the handler chain matched the request."""


class FileNotFound(NotFound):  # noqa: N818
    """404 — a static file is missing or outside the served directory."""


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — a route exists at this path but not for this HTTP method.

    Carries an ``Allow`` header naming the methods the path does accept.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class HandlerFailure(HTTPError):  # noqa: N818
    """500 — a handler broke the chain contract or its outcome could not render.

    Raised when a handler neither renders nor calls ``next()``, when it
    does both, or when a template has no variant for any locale.
    """

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)
