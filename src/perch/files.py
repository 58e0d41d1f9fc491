"""Static file access for ``File`` outcomes and ``chain.files()`` entries.

Security: resolves symlinks and verifies the final path is within the
configured directory to prevent path traversal.
"""

import mimetypes
from pathlib import Path

from perch.errors import FileNotFound
from perch.http.response import Response


class FileSystem:
    """Read-only view of one directory.

    Usage::

        public = FileSystem("./public")
        body = public.read_file("css/site.css")
    """

    __slots__ = ("_directory",)

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory).resolve()

    @property
    def directory(self) -> Path:
        return self._directory

    def resolve(self, relative_path: str, *, index: str | None = None) -> Path:
        """Return the file a relative path refers to.

        A directory resolves to its *index* file when one is given and
        exists. Raises ``FileNotFound`` for anything that is not a regular
        file inside the directory.
        """
        relative = relative_path.lstrip("/")
        file_path = (self._directory / relative).resolve() if relative else self._directory
        if not file_path.is_relative_to(self._directory):
            raise FileNotFound(f"{relative_path!r} is outside the served directory")

        if file_path.is_dir() and index:
            file_path = file_path / index

        if not file_path.is_file():
            raise FileNotFound(f"No file at {relative_path!r}")
        return file_path

    def read_file(self, relative_path: str) -> bytes:
        """Return the bytes of a file, or raise ``FileNotFound``."""
        return self.resolve(relative_path).read_bytes()

    def __repr__(self) -> str:
        return f"FileSystem({str(self._directory)!r})"


def guess_type(path: str | Path) -> str:
    """Content type inferred from the file extension."""
    content_type, _ = mimetypes.guess_type(str(path))
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/"):
        return f"{content_type}; charset=utf-8"
    return content_type


def serve_file(file_path: Path, *, cache_control: str, status: int = 200) -> Response:
    """Read a file and build a response."""
    body = file_path.read_bytes()
    return (
        Response(body=body, content_type=guess_type(file_path), status=status)
        .with_header("Content-Length", str(len(body)))
        .with_header("Cache-Control", cache_control)
    )
