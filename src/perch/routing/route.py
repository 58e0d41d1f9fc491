"""Route, PrefixGroup, and FileSystemRoute frozen dataclasses.

These are the nodes of the handler chain. A chain is a plain tuple of
entries; prefix groups own a nested tuple. Created while the app is
configured, read-only once it starts serving requests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from perch._internal.types import Handler

if TYPE_CHECKING:
    from perch.files import FileSystem

# Every method a route may be bound to. ALL matches any incoming method.
METHODS: frozenset[str] = frozenset({"GET", "PUT", "POST", "DELETE", "OPTIONS", "PATCH", "ALL"})


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Literal: ``person``  (is_token=False)
    Token:   ``:id``     (is_token=True, name="id")
    """

    value: str
    is_token: bool = False
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A method + pattern + handler binding.

    ``path`` is ``None`` for path-less ``all`` handlers, which run for
    every remaining path.
    """

    method: str
    path: str | None
    segments: tuple[PathSegment, ...]
    handler: Handler

    @property
    def any_path(self) -> bool:
        return self.path is None

    @property
    def any_method(self) -> bool:
        return self.method == "ALL"


@dataclass(frozen=True, slots=True)
class PrefixGroup:
    """A subtree of entries sharing a leading pattern.

    With ``exact=True`` the pattern must consume the whole remaining path,
    which is how ``chain.path(...)`` groups per-method handlers at one URL.
    """

    path: str
    segments: tuple[PathSegment, ...]
    entries: tuple[Entry, ...]
    exact: bool = False


@dataclass(frozen=True, slots=True)
class FileSystemRoute:
    """Serve files from a directory for GET/HEAD, else continue the chain."""

    file_system: FileSystem
    index: str = "index.html"


Entry: TypeAlias = "Route | PrefixGroup | FileSystemRoute"
