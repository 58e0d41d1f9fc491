"""Perch — handler-chain routing for ASGI.

Routes are declared by configuration functions that receive a ``Chain``.
Handlers receive a ``Context``, and either return an outcome or forward
the request with ``ctx.next()``.

Basic usage::

    from perch import App, Chain, Registry

    def handlers(chain: Chain) -> None:
        chain.get("hello", lambda ctx: "Hello World!")

        @chain.prefix("person/:id")
        def person(group: Chain) -> None:
            group.all(lambda ctx: ctx.next(Registry.single("person", load(ctx.path_tokens["id"]))))
            group.get("status", lambda ctx: f"status: {ctx.get('person').status}")

    app = App.from_handlers(handlers)
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "Chain",
    "ConfigurationError",
    "Context",
    "File",
    "FileNotFound",
    "HTTPError",
    "HandlerFailure",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NoRouteMatch",
    "NotFound",
    "NotInRegistry",
    "PerchError",
    "Registry",
    "Request",
    "Response",
    "Template",
    "TemplateNotFound",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Chain":
        from perch.routing.chain import Chain

        return Chain

    if name == "Context":
        from perch.context import Context

        return Context

    if name == "Registry":
        from perch.registry import Registry

        return Registry

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name in ("Template", "File"):
        from perch.templating import returns as _returns

        return getattr(_returns, name)

    if name in ("Middleware", "Next"):
        from perch.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in (
        "ConfigurationError",
        "FileNotFound",
        "HTTPError",
        "HandlerFailure",
        "MethodNotAllowed",
        "NoRouteMatch",
        "NotFound",
        "NotInRegistry",
        "PerchError",
        "TemplateNotFound",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
