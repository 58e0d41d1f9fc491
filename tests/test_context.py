"""Tests for perch.context: Context, ResponseBuilder, locale negotiation."""

from typing import Any

import pytest

from perch.context import Context, ResponseBuilder, negotiate_locale
from perch.errors import NotInRegistry
from perch.http.request import Request
from perch.http.response import Response
from perch.registry import Registry


def _context(**kwargs: Any) -> Context:
    scope = {"type": "http", "method": "GET", "path": "/person/10", "headers": []}

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    defaults: dict[str, Any] = {
        "path_tokens": {"id": "10"},
        "registry": Registry.empty(),
        "response": ResponseBuilder(),
    }
    defaults.update(kwargs)
    return Context(Request.from_asgi(scope, receive), **defaults)


class TestContext:
    def test_request_accessors(self) -> None:
        ctx = _context()
        assert ctx.method == "GET"
        assert ctx.path == "/person/10"

    def test_path_tokens_are_read_only(self) -> None:
        ctx = _context()
        with pytest.raises(TypeError):
            ctx.path_tokens["id"] = "11"  # type: ignore[index]

    def test_registry_lookup(self) -> None:
        ctx = _context(registry=Registry.of(greeting="World!"))
        assert ctx.get("greeting") == "World!"
        assert ctx.maybe_get("missing", "fallback") == "fallback"
        with pytest.raises(NotInRegistry):
            ctx.get("missing")

    def test_next_records_continuation(self) -> None:
        ctx = _context()
        assert not ctx.continued
        ctx.next({"a": 1}, b=2)
        assert ctx.continued
        assert dict(ctx.continuation) == {"a": 1, "b": 2}

    def test_next_without_values(self) -> None:
        ctx = _context()
        ctx.next()
        assert ctx.continued
        assert len(ctx.continuation) == 0

    def test_repeated_next_accumulates(self) -> None:
        ctx = _context()
        ctx.next(a=1, b=2)
        ctx.next({"b": 3}, c=4)
        assert dict(ctx.continuation) == {"a": 1, "b": 3, "c": 4}

    def test_render_sets_outcome(self) -> None:
        ctx = _context()
        ctx.render("done")
        assert ctx.response.rendered
        assert ctx.response.outcome == "done"


class TestResponseBuilder:
    def test_apply_status_and_headers(self) -> None:
        builder = ResponseBuilder().status(201).header("X-A", "1")
        response = builder.apply(Response("body"))
        assert response.status == 201
        assert response.header("x-a") == "1"
        assert response.text == "body"

    def test_apply_without_changes(self) -> None:
        original = Response("body", status=202)
        assert ResponseBuilder().apply(original) == original


class TestNegotiateLocale:
    def test_none(self) -> None:
        assert negotiate_locale(None) is None
        assert negotiate_locale("", "en") == "en"

    def test_single(self) -> None:
        assert negotiate_locale("fr") == "fr"

    def test_highest_quality_wins(self) -> None:
        assert negotiate_locale("fr;q=0.5, en-US;q=0.9, de;q=0.1") == "en-US"

    def test_first_wins_on_tie(self) -> None:
        assert negotiate_locale("de, fr") == "de"

    def test_skips_wildcard_and_malformed(self) -> None:
        assert negotiate_locale("*, fr;q=abc, it;q=0.3") == "it"

    def test_all_unusable_falls_back(self) -> None:
        assert negotiate_locale("*", "en") == "en"
