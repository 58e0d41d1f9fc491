"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Middleware wraps the whole handler chain, in registration order: the
first middleware added is the outermost.
"""

from perch.middleware.protocol import Middleware, Next

__all__ = [
    "Middleware",
    "Next",
]
