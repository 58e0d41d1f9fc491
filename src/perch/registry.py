"""Request-scoped registry — immutable tag -> value lookup.

Handlers pass values to the handlers after them by calling
``ctx.next(Registry.single("person", person))``. Every join produces a new
registry, so a value added inside a prefix group is only visible to the
entries that run after it inside that group.

Tags are plain hashable keys (usually strings). Lookup never depends on
the runtime type of the stored value.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from perch.errors import NotInRegistry

_MISSING: Any = object()


class Registry(Mapping[Hashable, Any]):
    """An immutable mapping from tag to value.

    Usage::

        base = Registry.of(greeting="World!")
        scoped = base.join(Registry.single("person", person))
        scoped.get("person")
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[Hashable, Any] | None = None) -> None:
        self._values: Mapping[Hashable, Any] = MappingProxyType(dict(values or {}))

    # -- Factories --

    @classmethod
    def empty(cls) -> Registry:
        return _EMPTY

    @classmethod
    def single(cls, tag: Hashable, value: Any) -> Registry:
        """A registry holding exactly one value."""
        return cls({tag: value})

    @classmethod
    def of(cls, mapping: Mapping[Hashable, Any] | None = None, /, **values: Any) -> Registry:
        """A registry from a mapping and/or keyword tags."""
        return cls({**(mapping or {}), **values})

    # -- Lookup --

    def get(self, tag: Hashable, default: Any = _MISSING) -> Any:  # type: ignore[override]
        """Return the value for *tag*.

        Raises ``NotInRegistry`` when nothing was registered and no
        *default* is given.
        """
        try:
            return self._values[tag]
        except KeyError:
            if default is _MISSING:
                raise NotInRegistry(tag) from None
            return default

    def maybe_get(self, tag: Hashable, default: Any = None) -> Any:
        """Return the value for *tag*, or *default* if missing."""
        return self._values.get(tag, default)

    def join(self, other: Mapping[Hashable, Any]) -> Registry:
        """Return a new registry with *other* layered on top of this one."""
        if not other:
            return self
        return Registry({**self._values, **other})

    # -- Mapping protocol --

    def __getitem__(self, tag: Hashable) -> Any:
        return self.get(tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._values

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Registry({dict(self._values)!r})"


_EMPTY = Registry()
