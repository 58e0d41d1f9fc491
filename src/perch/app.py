"""The perch application.

An ``App`` collects chain configuration functions, base registry values,
middleware, error handlers and template extensions. On the first ASGI
call (or lifespan startup) it compiles them into a read-only runtime:
the entry tree, the kida environment and the static file system.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from kida import Environment

from perch._internal.asgi import Receive, Scope, Send
from perch._internal.invoke import invoke
from perch._internal.types import Configure, ErrorHandler, Handler
from perch.config import AppConfig
from perch.files import FileSystem
from perch.middleware.protocol import Middleware
from perch.registry import Registry
from perch.routing.chain import build_chain
from perch.server.dispatch import Dispatcher
from perch.server.handler import handle_request
from perch.templating.integration import TemplateRenderer, create_environment

logger = logging.getLogger("perch.server")


@dataclass(slots=True)
class _Setup:
    """Everything registered before the app starts serving."""

    configure: list[Configure] = field(default_factory=list)
    registry: Registry = field(default_factory=Registry.empty)
    middleware: list[Middleware] = field(default_factory=list)
    error_handlers: dict[int | type, ErrorHandler] = field(default_factory=dict)
    filters: dict[str, Callable[..., Any]] = field(default_factory=dict)
    globals: dict[str, Any] = field(default_factory=dict)
    startup: list[Callable[..., Any]] = field(default_factory=list)
    shutdown: list[Callable[..., Any]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class _Runtime:
    """Compiled, shared-by-every-request state."""

    dispatcher: Dispatcher
    middleware: tuple[Middleware, ...]
    error_handlers: Mapping[int | type, ErrorHandler]
    templates: TemplateRenderer
    files: FileSystem | None


class App:
    """A handler-chain ASGI application.

    Usage::

        app = App()

        @app.handlers
        def routes(chain: Chain) -> None:
            chain.get("hello", lambda ctx: "Hello World!")
            chain.get("bye", lambda ctx: "Good bye cruel World!")

    Registration methods raise ``RuntimeError`` once the app is running.
    Compilation happens at most once even when several threads deliver
    the first request together.
    """

    __slots__ = ("_kida_env", "_lock", "_runtime", "_setup", "config")

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        handlers: Configure | None = None,
        registry: Registry | Mapping[Any, Any] | None = None,
        kida_env: Environment | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self._setup = _Setup()
        self._runtime: _Runtime | None = None
        self._lock = threading.Lock()
        self._kida_env = kida_env
        if handlers is not None:
            self.handlers(handlers)
        if registry is not None:
            self.registry(registry)

    @classmethod
    def from_handler(cls, handler: Handler, config: AppConfig | None = None) -> App:
        """An app answering every request with one handler."""
        return cls(config, handlers=lambda chain: chain.all(handler))

    @classmethod
    def from_handlers(cls, configure: Configure, config: AppConfig | None = None) -> App:
        return cls(config, handlers=configure)

    # -- Registration --

    def handlers(self, configure: Configure) -> Configure:
        """Add a chain configuration function. Usable as a decorator.

        Functions run in the order added, all against the same root chain.
        """
        self._setup_state().configure.append(configure)
        return configure

    def registry(self, registry: Registry | Mapping[Any, Any]) -> None:
        """Merge base values that every handler can ``ctx.get()``."""
        setup = self._setup_state()
        setup.registry = setup.registry.join(registry)

    def error(
        self, code_or_exception: int | type[Exception]
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Decorator: handle a status code or an exception type (and its subclasses)."""

        def register(func: ErrorHandler) -> ErrorHandler:
            self._setup_state().error_handlers[code_or_exception] = func
            return func

        return register

    def add_middleware(self, middleware: Middleware) -> None:
        """Wrap the chain. The first middleware added is the outermost."""
        self._setup_state().middleware.append(middleware)

    def template_filter(
        self, name: str | None = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        def register(func: Callable[..., Any]) -> Callable[..., Any]:
            self._setup_state().filters[name or func.__name__] = func
            return func

        return register

    def template_global(self, name: str, value: Any) -> None:
        self._setup_state().globals[name] = value

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator: run *func* (sync or async) at lifespan startup."""
        self._setup_state().startup.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Decorator: run *func* (sync or async) at lifespan shutdown."""
        self._setup_state().shutdown.append(func)
        return func

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        runtime = self._ensure_frozen()
        await handle_request(
            scope,
            receive,
            send,
            dispatcher=runtime.dispatcher,
            middleware=runtime.middleware,
            error_handlers=runtime.error_handlers,
            templates=runtime.templates,
            files=runtime.files,
            cache_control=self.config.cache_control,
            max_content_length=self.config.max_content_length,
            debug=self.config.debug,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        """Compile on startup and run the hooks, reporting failures to the server."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    await self._run_hooks(self._setup.startup)
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                try:
                    await self._run_hooks(self._setup.shutdown)
                except Exception as exc:
                    logger.exception("Shutdown hook failed")
                    await send({"type": "lifespan.shutdown.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _run_hooks(self, hooks: list[Callable[..., Any]]) -> None:
        for hook in hooks:
            await invoke(hook)

    # -- Compilation --

    def _ensure_frozen(self) -> _Runtime:
        runtime = self._runtime
        if runtime is not None:
            return runtime
        with self._lock:
            if self._runtime is None:
                self._runtime = self._compile()
            return self._runtime

    def _compile(self) -> _Runtime:
        """Build the runtime from the setup state. Caller holds ``_lock``."""
        setup = self._setup
        static_dir = self.config.static_dir
        entries = build_chain(*setup.configure, static_dir=static_dir)

        if self._kida_env is None:
            env = create_environment(self.config, setup.filters, setup.globals)
        else:
            env = self._kida_env
            if setup.filters:
                env.update_filters(setup.filters)
            for name, value in setup.globals.items():
                env.add_global(name, value)

        return _Runtime(
            dispatcher=Dispatcher(
                entries,
                setup.registry,
                default_locale=self.config.default_locale,
                cache_control=self.config.cache_control,
            ),
            middleware=tuple(setup.middleware),
            error_handlers=dict(setup.error_handlers),
            templates=TemplateRenderer(env),
            files=FileSystem(static_dir) if static_dir is not None else None,
        )

    def _setup_state(self) -> _Setup:
        if self._runtime is not None:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register handlers, middleware, and filters before the first request."
            )
            raise RuntimeError(msg)
        return self._setup
