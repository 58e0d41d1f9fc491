"""Per-handler request context.

The dispatcher creates a fresh ``Context`` for every handler it invokes.
Contexts carry the request, the path tokens bound so far, and the
registry visible at that point in the chain. The ``ResponseBuilder`` is
the one piece shared by every context of a request.

Usage::

    def load_person(ctx: Context) -> None:
        person = Person(ctx.path_tokens["id"], "example-status", "example-age")
        ctx.next(Registry.single("person", person))

    def person_status(ctx: Context) -> str:
        person = ctx.get("person")
        return f"person {person.id} status: {person.status}"
"""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from perch.http.request import Request
from perch.http.response import Response
from perch.registry import Registry


@dataclass(slots=True)
class ResponseBuilder:
    """Mutable response state shared across one request's handlers.

    Status and headers set here are applied on top of whatever the
    outcome renders to. ``outcome`` holds the value passed to
    ``ctx.render()``.
    """

    status_code: int | None = None
    headers: list[tuple[str, str]] = field(default_factory=list)
    outcome: Any = None
    rendered: bool = False
    # Bumped by status(); lets the dispatcher tell which handler set it
    status_writes: int = field(default=0, repr=False)

    def status(self, code: int) -> ResponseBuilder:
        self.status_code = code
        self.status_writes += 1
        return self

    def header(self, name: str, value: str) -> ResponseBuilder:
        self.headers.append((name, value))
        return self

    def apply(self, response: Response) -> Response:
        """Layer the builder's status and headers onto *response*."""
        if self.status_code is not None:
            response = response.with_status(self.status_code)
        for name, value in self.headers:
            response = response.with_header(name, value)
        return response


class Context:
    """What a handler sees: request, tokens, registry, response builder.

    A handler finishes by returning an outcome, by calling
    ``render(outcome)``, or by calling ``next()`` to hand the request to
    the entries after it.
    """

    __slots__ = ("_continuation", "locale", "path_tokens", "registry", "request", "response")

    def __init__(
        self,
        request: Request,
        *,
        path_tokens: Mapping[str, str],
        registry: Registry,
        response: ResponseBuilder,
        locale: str | None = None,
    ) -> None:
        self.request = request
        self.path_tokens: Mapping[str, str] = MappingProxyType(dict(path_tokens))
        self.registry = registry
        self.response = response
        self.locale = locale
        self._continuation: Registry | None = None

    @property
    def method(self) -> str:
        return self.request.method

    @property
    def path(self) -> str:
        return self.request.path

    # -- Registry --

    def get(self, tag: Hashable) -> Any:
        """Registry value for *tag*. Raises ``NotInRegistry`` if absent."""
        return self.registry.get(tag)

    def maybe_get(self, tag: Hashable, default: Any = None) -> Any:
        return self.registry.maybe_get(tag, default)

    # -- Finishing --

    def render(self, outcome: Any) -> None:
        """Set the outcome for this request instead of returning it."""
        self.response.outcome = outcome
        self.response.rendered = True

    def next(self, registry: Mapping[Hashable, Any] | None = None, /, **values: Any) -> None:
        """Continue with the next entry, adding values to the registry.

        Additions are visible to every entry after this one in the same
        chain, and to nothing outside it. Calling it again in the same
        handler adds to the earlier values; later tags win.
        """
        additions = {**(registry or {}), **values}
        if self._continuation is None:
            self._continuation = Registry(additions)
        else:
            self._continuation = self._continuation.join(additions)

    @property
    def continued(self) -> bool:
        return self._continuation is not None

    @property
    def continuation(self) -> Registry | None:
        return self._continuation

    def __repr__(self) -> str:
        return f"<Context {self.method} {self.path!r} tokens={dict(self.path_tokens)!r}>"


def negotiate_locale(accept_language: str | None, default: str | None = None) -> str | None:
    """Pick the preferred language tag from an Accept-Language header.

    ``"fr;q=0.5, en-US;q=0.9"`` -> ``"en-US"``. Wildcards and malformed
    entries are skipped; *default* is returned when nothing usable is left.
    """
    if not accept_language:
        return default
    best: str | None = None
    best_q = 0.0
    for item in accept_language.split(","):
        tag, _, params = item.strip().partition(";")
        tag = tag.strip()
        if not tag or tag == "*":
            continue
        q = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                q = float(params[2:])
            except ValueError:
                continue
        # Strict comparison: earlier entries win ties
        if q > best_q:
            best, best_q = tag, q
    return best or default
