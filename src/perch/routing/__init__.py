"""Routing — ordered handler chains with token-binding path patterns.

Entries are registered during setup through a ``Chain`` and walked in
registration order for every request. First match wins.
"""

from perch.routing.chain import Chain, build_chain
from perch.routing.pattern import match, match_prefix, parse_pattern, split_path
from perch.routing.route import FileSystemRoute, PathSegment, PrefixGroup, Route

__all__ = [
    "Chain",
    "FileSystemRoute",
    "PathSegment",
    "PrefixGroup",
    "Route",
    "build_chain",
    "match",
    "match_prefix",
    "parse_pattern",
    "split_path",
]
