"""Tests for perch.server.negotiation: outcome to Response mapping."""

import pytest

from perch.errors import ConfigurationError
from perch.http.response import Response
from perch.server.negotiation import negotiate
from perch.templating.returns import File, Template


class TestNegotiate:
    def test_response_passthrough(self) -> None:
        original = Response("x", status=418)
        assert negotiate(original) is original

    def test_string_is_plain_text(self) -> None:
        response = negotiate("Hello World!")
        assert response.status == 200
        assert response.content_type == "text/plain; charset=utf-8"
        assert response.text == "Hello World!"

    def test_bytes(self) -> None:
        response = negotiate(b"\x00\x01")
        assert response.content_type == "application/octet-stream"
        assert response.body == b"\x00\x01"

    def test_dict_and_list_are_json(self) -> None:
        assert negotiate({"a": 1}).content_type == "application/json"
        assert negotiate([1, 2]).text == "[1, 2]"

    def test_none_is_empty(self) -> None:
        assert negotiate(None).body == ""

    def test_tuple_with_status(self) -> None:
        response = negotiate(("created", 201))
        assert response.status == 201
        assert response.text == "created"

    def test_tuple_with_status_and_headers(self) -> None:
        response = negotiate(("created", 201, {"Location": "/person/7"}))
        assert response.header("location") == "/person/7"

    def test_template_without_renderer(self) -> None:
        with pytest.raises(ConfigurationError, match="kida"):
            negotiate(Template("page.html"))

    def test_file_without_file_system(self) -> None:
        with pytest.raises(ConfigurationError, match="static_dir"):
            negotiate(File("x.txt"))

    def test_unsupported_type(self) -> None:
        with pytest.raises(ConfigurationError, match="Cannot convert"):
            negotiate(object())


class TestReturnTypes:
    def test_template_context(self) -> None:
        template = Template("page.html", title="Home")
        assert template.name == "page.html"
        assert template.context == {"title": "Home"}
        assert template.locale is None

    def test_template_is_frozen(self) -> None:
        template = Template("page.html")
        with pytest.raises(AttributeError):
            template.name = "other.html"  # type: ignore[misc]
