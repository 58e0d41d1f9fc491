"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Chain handler: receives the request Context, returns an outcome (or None
# after calling ctx.next() / ctx.render()). May be sync or async.
Handler: TypeAlias = Callable[..., Any]

# Chain configuration function: receives a Chain and registers entries on it
Configure: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
