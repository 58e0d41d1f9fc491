"""Read-only multi-valued mappings for request headers and query strings.

Both keep every ``(name, value)`` pair in arrival order. Item access
returns the first value for a name; ``get_all`` returns every value.
"""

from collections.abc import Iterable, Iterator, Mapping
from urllib.parse import parse_qsl


class _Fields(Mapping[str, str]):
    __slots__ = ("_pairs",)

    def __init__(self, pairs: tuple[tuple[str, str], ...]) -> None:
        self._pairs = pairs

    def _normalize(self, name: str) -> str:
        return name

    def __getitem__(self, name: str) -> str:
        if not isinstance(name, str):
            raise KeyError(name)
        wanted = self._normalize(name)
        for field, value in self._pairs:
            if field == wanted:
                return value
        raise KeyError(name)

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(field for field, _ in self._pairs))

    def __len__(self) -> int:
        return len(dict.fromkeys(field for field, _ in self._pairs))

    def get_all(self, name: str) -> list[str]:
        wanted = self._normalize(name)
        return [value for field, value in self._pairs if field == wanted]

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        return self._pairs

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._pairs)!r})"


class Headers(_Fields):
    """Case-insensitive request headers.

    Built from the ASGI ``headers`` list of latin-1 byte pairs. Names are
    stored lowercased.
    """

    __slots__ = ()

    def __init__(self, raw: Iterable[tuple[bytes, bytes]] = ()) -> None:
        super().__init__(
            tuple((name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw)
        )

    def _normalize(self, name: str) -> str:
        return name.lower()


class QueryParams(_Fields):
    """Query string parameters, blank values kept."""

    __slots__ = ("_raw",)

    def __init__(self, query_string: bytes = b"") -> None:
        self._raw = query_string.decode("latin-1")
        super().__init__(tuple(parse_qsl(self._raw, keep_blank_values=True)))

    @property
    def raw(self) -> str:
        return self._raw
