"""Static files: chain.files() entries, File outcomes, and FileSystem."""

import pytest

from perch.app import App
from perch.config import AppConfig
from perch.errors import FileNotFound
from perch.files import FileSystem, guess_type
from perch.routing.chain import Chain
from perch.templating.returns import File
from perch.testing import TestClient


@pytest.fixture
def public_dir(tmp_path):
    """Create a temporary public directory with a few files."""
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>Home</h1>")
    (public / "style.css").write_text("body { color: red; }")
    (public / "data.bin").write_bytes(b"\x00\x01\x02\x03")
    docs = public / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<h1>Docs</h1>")
    (tmp_path / "secret.txt").write_text("top secret")
    return public


def _app(public_dir, handlers) -> App:
    return App.from_handlers(handlers, AppConfig(static_dir=public_dir))


class TestFilesEntry:
    async def test_serves_file(self, public_dir) -> None:
        async with TestClient(_app(public_dir, lambda chain: chain.files())) as client:
            response = await client.get("/style.css")
            assert response.status == 200
            assert "text/css" in response.content_type
            assert response.text == "body { color: red; }"
            assert response.header("cache-control") == "public, max-age=3600"

    async def test_binary_file(self, public_dir) -> None:
        async with TestClient(_app(public_dir, lambda chain: chain.files())) as client:
            response = await client.get("/data.bin")
            assert response.body == b"\x00\x01\x02\x03"
            assert response.header("content-length") == "4"

    async def test_directory_index(self, public_dir) -> None:
        async with TestClient(_app(public_dir, lambda chain: chain.files())) as client:
            assert (await client.get("/")).text == "<h1>Home</h1>"
            assert (await client.get("/docs")).text == "<h1>Docs</h1>"

    async def test_missing_file_falls_through(self, public_dir) -> None:
        def handlers(chain: Chain) -> None:
            chain.files()
            chain.get("hello", lambda ctx: "Hello World!")

        async with TestClient(_app(public_dir, handlers)) as client:
            assert (await client.get("/hello")).text == "Hello World!"
            assert (await client.get("/nope.txt")).status == 404

    async def test_traversal_blocked(self, public_dir) -> None:
        async with TestClient(_app(public_dir, lambda chain: chain.files())) as client:
            response = await client.get("/../secret.txt")
            assert response.status == 404
            assert "top secret" not in response.text

    async def test_files_under_prefix(self, public_dir) -> None:
        def handlers(chain: Chain) -> None:
            chain.prefix("static", lambda group: group.files())

        async with TestClient(_app(public_dir, handlers)) as client:
            assert (await client.get("/static/style.css")).status == 200
            assert (await client.get("/style.css")).status == 404

    async def test_head(self, public_dir) -> None:
        async with TestClient(_app(public_dir, lambda chain: chain.files())) as client:
            response = await client.head("/style.css")
            assert response.status == 200
            assert response.body == b""


class TestFileOutcome:
    async def test_file_outcome(self, public_dir) -> None:
        def handlers(chain: Chain) -> None:
            chain.get("report", lambda ctx: File("docs/index.html"))

        async with TestClient(_app(public_dir, handlers)) as client:
            response = await client.get("/report")
            assert response.text == "<h1>Docs</h1>"
            assert "text/html" in response.content_type

    async def test_missing_file_outcome_is_404(self, public_dir) -> None:
        def handlers(chain: Chain) -> None:
            chain.get("report", lambda ctx: File("missing.pdf"))

        async with TestClient(_app(public_dir, handlers)) as client:
            assert (await client.get("/report")).status == 404

    async def test_file_outcome_without_static_dir_is_500(self) -> None:
        app = App.from_handlers(
            lambda chain: chain.get("report", lambda ctx: File("x.txt")),
            AppConfig(static_dir=None),
        )
        async with TestClient(app) as client:
            assert (await client.get("/report")).status == 500


class TestFileSystem:
    def test_read_file(self, public_dir) -> None:
        assert FileSystem(public_dir).read_file("style.css") == b"body { color: red; }"

    def test_resolve_rejects_outside(self, public_dir) -> None:
        with pytest.raises(FileNotFound, match="outside"):
            FileSystem(public_dir).resolve("../secret.txt")

    def test_resolve_directory_without_index(self, public_dir) -> None:
        with pytest.raises(FileNotFound):
            FileSystem(public_dir).resolve("docs")

    def test_resolve_directory_with_index(self, public_dir) -> None:
        path = FileSystem(public_dir).resolve("docs", index="index.html")
        assert path.name == "index.html"

    def test_guess_type(self) -> None:
        assert guess_type("a.css") == "text/css; charset=utf-8"
        assert guess_type("a.png") == "image/png"
        assert guess_type("a.unknownext") == "application/octet-stream"
