"""Template rendering through kida, including locale fallback."""

from pathlib import Path

import pytest

from perch.app import App
from perch.config import AppConfig
from perch.context import Context
from perch.errors import TemplateNotFound
from perch.registry import Registry
from perch.routing.chain import Chain
from perch.templating.integration import (
    TemplateRenderer,
    create_environment,
    locale_candidates,
    localized_name,
)
from perch.templating.returns import Template
from perch.testing import TestClient

TEMPLATES_DIR = Path(__file__).parent / "templates"


def _greeting(ctx: Context) -> Template:
    return Template("greeting.html", title="Greeting", content=f"Hello {ctx.get(str)}")


def _app(handlers, **config_overrides: object) -> App:
    """Build an App wired to the test templates directory."""
    app = App.from_handlers(handlers, AppConfig(template_dir=TEMPLATES_DIR, **config_overrides))
    app.registry(Registry.single(str, "World!"))
    app.template_global("site", "perch")
    return app


def _renderer() -> TemplateRenderer:
    env = create_environment(AppConfig(template_dir=TEMPLATES_DIR), {}, {"site": "perch"})
    return TemplateRenderer(env)


class TestTemplateOutcome:
    async def test_default_variant(self) -> None:
        app = _app(lambda chain: chain.get("", _greeting))
        async with TestClient(app) as client:
            response = await client.get("/")
            assert response.status == 200
            assert "text/html" in response.content_type
            assert "<title>Greeting</title>" in response.text
            assert "Hello World!" in response.text
            assert '<p class="site">perch</p>' in response.text
            assert '<p class="variant">default</p>' in response.text

    async def test_locale_from_accept_language(self) -> None:
        app = _app(lambda chain: chain.get("", _greeting))
        async with TestClient(app) as client:
            response = await client.get("/", headers={"Accept-Language": "en-US,en;q=0.8"})
            assert '<p class="variant">english</p>' in response.text
            assert "Hello World!" in response.text

    async def test_unknown_locale_falls_back_to_default(self) -> None:
        app = _app(lambda chain: chain.get("", _greeting))
        async with TestClient(app) as client:
            response = await client.get("/", headers={"Accept-Language": "ja"})
            assert '<p class="variant">default</p>' in response.text

    async def test_default_locale_config(self) -> None:
        app = _app(lambda chain: chain.get("", _greeting), default_locale="en")
        async with TestClient(app) as client:
            response = await client.get("/")
            assert '<p class="variant">english</p>' in response.text

    async def test_pinned_locale(self) -> None:
        def handlers(chain: Chain) -> None:
            pinned = Template("greeting.html", locale="en", title="t", content="c")
            chain.get("", lambda ctx: pinned)

        async with TestClient(_app(handlers)) as client:
            response = await client.get("/", headers={"Accept-Language": "fr"})
            assert '<p class="variant">english</p>' in response.text

    async def test_non_localized_text_template(self) -> None:
        def handlers(chain: Chain) -> None:
            chain.get("text", lambda ctx: Template("no_localized.txt"))

        async with TestClient(_app(handlers)) as client:
            response = await client.get("/text", headers={"Accept-Language": "en"})
            assert response.text.strip() == "This template is not localized"
            assert response.content_type == "text/plain; charset=utf-8"

    async def test_only_localized_variant(self) -> None:
        def handlers(chain: Chain) -> None:
            chain.get("notice", lambda ctx: Template("notice.html", message="Bonjour"))

        async with TestClient(_app(handlers)) as client:
            french = await client.get("/notice", headers={"Accept-Language": "fr-CA"})
            english = await client.get("/notice", headers={"Accept-Language": "en"})
            assert french.status == 200
            assert "<p>Bonjour</p>" in french.text
            assert english.status == 500

    async def test_missing_template_is_500(self) -> None:
        def handlers(chain: Chain) -> None:
            chain.get("missing", lambda ctx: Template("does_not_exist.html"))

        async with TestClient(_app(handlers, debug=True)) as client:
            response = await client.get("/missing")
            assert response.status == 500
            assert "does_not_exist.html" in response.text

    async def test_rendered_template_outcome(self) -> None:
        def handlers(chain: Chain) -> None:
            chain.get("", lambda ctx: ctx.render(Template("greeting.html", title="R", content="c")))

        async with TestClient(_app(handlers)) as client:
            assert "<title>R</title>" in (await client.get("/")).text

    async def test_custom_filter(self) -> None:
        app = _app(lambda chain: chain.get("shout", lambda ctx: Template("shout.html", word="hey")))

        @app.template_filter()
        def shout(value: str) -> str:
            return value.upper()

        async with TestClient(app) as client:
            assert "<p>HEY</p>" in (await client.get("/shout")).text

    async def test_template_with_status_tuple(self) -> None:
        def handlers(chain: Chain) -> None:
            chain.get("", lambda ctx: (Template("greeting.html", title="t", content="c"), 201))

        async with TestClient(_app(handlers)) as client:
            assert (await client.get("/")).status == 201


class TestTemplateRenderer:
    def test_render_template_exact_variant(self) -> None:
        html = _renderer().render_template("greeting.html", "en", {"title": "t", "content": "c"})
        assert '<p class="variant">english</p>' in html

    def test_render_template_does_not_fall_back(self) -> None:
        with pytest.raises(TemplateNotFound) as exc_info:
            _renderer().render_template("greeting.html", "fr", {})
        assert exc_info.value.name == "greeting_fr.html"

    def test_render_localized_falls_back(self) -> None:
        html = _renderer().render_localized("greeting.html", "fr", {"title": "t", "content": "c"})
        assert '<p class="variant">default</p>' in html

    def test_render_localized_no_variant(self) -> None:
        with pytest.raises(TemplateNotFound) as exc_info:
            _renderer().render_localized("notice.html", "en", {})
        assert exc_info.value.name == "notice.html"


class TestLocaleNames:
    def test_localized_name(self) -> None:
        assert localized_name("page.html", "en_US") == "page_en_US.html"
        assert localized_name("emails/welcome.txt", "fr") == "emails/welcome_fr.txt"

    def test_candidates(self) -> None:
        assert locale_candidates("en-US") == ["en_US", "en", None]
        assert locale_candidates("fr") == ["fr", None]
        assert locale_candidates(None) == [None]
