"""Route pattern parsing and matching.

Patterns are ``/``-separated segments. A segment starting with ``:`` is a
named token that binds exactly one non-empty path segment; every other
segment is a literal compared case-sensitively::

    match("person/:id/status", "person/10/status")  ->  {"id": "10"}
    match("person/:id/status", "person/10")          ->  None
"""

from perch.errors import ConfigurationError
from perch.routing.route import PathSegment

type Tokens = dict[str, str]


def parse_pattern(path: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments.

    Examples::

        ""              -> ()
        "hello"         -> (PathSegment("hello"),)
        "get/:name"     -> (PathSegment("get"), PathSegment(":name", is_token=True, name="name"))

    Raises ``ConfigurationError`` for empty or duplicate token names and
    for ``{name}`` / ``<name>`` placeholders from other frameworks.
    """
    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in split_path(path):
        if (part.startswith("{") and part.endswith("}")) or (
            part.startswith("<") and part.endswith(">")
        ):
            msg = (
                f"Route pattern {path!r} uses a {part!r} placeholder. "
                f"Perch tokens are written ':name', e.g. ':{part[1:-1]}'."
            )
            raise ConfigurationError(msg)
        if part.startswith(":"):
            name = part[1:]
            if not name:
                msg = f"Route pattern {path!r} has a token without a name."
                raise ConfigurationError(msg)
            if name in seen:
                msg = f"Route pattern {path!r} binds token {name!r} more than once."
                raise ConfigurationError(msg)
            seen.add(name)
            segments.append(PathSegment(value=part, is_token=True, name=name))
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


def split_path(path: str) -> tuple[str, ...]:
    """Split a path into segments, ignoring leading and trailing slashes.

    Interior empty segments are kept (``"a//b"`` has three segments) so
    they can never satisfy a token.
    """
    stripped = path.strip("/")
    if not stripped:
        return ()
    return tuple(stripped.split("/"))


def match(
    pattern: str | tuple[PathSegment, ...],
    path: str | tuple[str, ...],
) -> Tokens | None:
    """Match a whole path against a pattern.

    Returns the bound tokens, or ``None`` when the segment counts differ
    or a literal does not match. Never raises for any path.
    """
    segments = _segments(pattern)
    if segments is None:
        return None
    parts = split_path(path) if isinstance(path, str) else path
    if len(parts) != len(segments):
        return None
    return _bind(segments, parts)


def match_prefix(
    pattern: str | tuple[PathSegment, ...],
    path: str | tuple[str, ...],
) -> tuple[Tokens, tuple[str, ...]] | None:
    """Match the leading segments of a path against a pattern.

    Returns ``(tokens, remaining)`` where *remaining* is the unconsumed
    suffix, or ``None`` when the path is shorter than the pattern or a
    segment does not match.
    """
    segments = _segments(pattern)
    if segments is None:
        return None
    parts = split_path(path) if isinstance(path, str) else path
    if len(parts) < len(segments):
        return None
    tokens = _bind(segments, parts[: len(segments)])
    if tokens is None:
        return None
    return tokens, parts[len(segments) :]


def _segments(pattern: str | tuple[PathSegment, ...]) -> tuple[PathSegment, ...] | None:
    if isinstance(pattern, str):
        try:
            return parse_pattern(pattern)
        except ConfigurationError:
            # An unparseable pattern matches nothing
            return None
    return pattern


def _bind(segments: tuple[PathSegment, ...], parts: tuple[str, ...]) -> Tokens | None:
    tokens: Tokens = {}
    for seg, part in zip(segments, parts, strict=True):
        if seg.is_token:
            if not part:
                return None
            tokens[seg.name or ""] = part
        elif seg.value != part:
            return None
    return tokens
