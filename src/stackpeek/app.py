"""The application object.

Setup phase: routes, middleware, error handlers and hooks are collected.
Serving phase: the first request, lifespan event, ``run()`` or route
listing compiles everything into a router and locks registration.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from stackpeek._internal.invoke import invoke
from stackpeek._internal.types import ErrorHandler, Handler, Receive, Scope, Send
from stackpeek.cache import Cache, create_cache
from stackpeek.config import AppConfig
from stackpeek.data.database import Database
from stackpeek.middleware.protocol import Middleware
from stackpeek.routing.route import Route
from stackpeek.routing.router import Router
from stackpeek.server.handler import handle_request

logger = logging.getLogger("stackpeek.server")


@dataclass(slots=True)
class _Registration:
    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None
    middleware: tuple[Middleware, ...] = ()

    def to_route(self) -> Route:
        return Route(
            path=self.path,
            handler=self.handler,
            methods=frozenset(m.upper() for m in (self.methods or ["GET"])),
            name=self.name,
            middleware=self.middleware,
        )


class App:
    """An ASGI application with a database and cache attached.

    Usage::

        app = App(AppConfig(env="local"), db="sqlite:///app.db")

        @app.route("/")
        def index():
            return "Hello"

    ``db`` is a ``Database``, a URL, or omitted to use
    ``config.database_url``. ``cache`` defaults to the backend named by
    ``config.cache_driver``.

    Compilation happens once, under a lock, even when several worker
    threads deliver their first request at the same moment.
    """

    __slots__ = (
        "_cache",
        "_compile_lock",
        "_db",
        "_error_handlers",
        "_middleware",
        "_registered_middleware",
        "_registrations",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
        cache: Cache | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._registrations: list[_Registration] = []
        self._registered_middleware: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._compile_lock = threading.Lock()

        url_or_db = self.config.database_url if db is None else db
        self._db: Database | None = (
            Database(url_or_db) if isinstance(url_or_db, str) else url_or_db
        )
        self._cache: Cache = cache if cache is not None else create_cache(self.config.cache_driver)

        # Set by _compile(); a router means registration is closed
        self._router: Router | None = None
        self._middleware: tuple[Middleware, ...] = ()

    # -- Registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
        middleware: list[Middleware] | tuple[Middleware, ...] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of ``add_route``.

        ``path`` accepts ``{param}`` and ``{param:type}`` segments.
        ``methods`` defaults to ``["GET"]``. ``middleware`` runs for this
        route only, inside the app-level middleware.
        """

        def register(func: Handler) -> Handler:
            self.add_route(path, func, methods=methods, name=name, middleware=middleware)
            return func

        return register

    def add_route(
        self,
        path: str,
        handler: Handler,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
        middleware: list[Middleware] | tuple[Middleware, ...] | None = None,
    ) -> None:
        self._check_open()
        self._registrations.append(
            _Registration(path, handler, methods, name, tuple(middleware or ()))
        )

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Decorator registering a handler for a status code or exception type."""

        def register(func: ErrorHandler) -> ErrorHandler:
            self._check_open()
            self._error_handlers[code_or_exception] = func
            return func

        return register

    def add_middleware(self, middleware: Middleware) -> None:
        """Append *middleware*; the first added runs outermost."""
        self._check_open()
        self._registered_middleware.append(middleware)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run *func* at startup, after the database connects."""
        self._check_open()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Run *func* at shutdown, before the database disconnects."""
        self._check_open()
        self._shutdown_hooks.append(func)
        return func

    # -- Attached services --

    @property
    def db(self) -> Database:
        """The configured database. ``RuntimeError`` when there is none."""
        if self._db is None:
            msg = "No database configured. Pass db= to App() or set AppConfig.database_url"
            raise RuntimeError(msg)
        return self._db

    @property
    def has_db(self) -> bool:
        return self._db is not None

    @property
    def cache(self) -> Cache:
        return self._cache

    @property
    def routes(self) -> list[Route]:
        """Routes in registration order. Compiles the app."""
        return self._compiled().routes

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        """App-level middleware, outermost first. Compiles the app."""
        self._compiled()
        return self._middleware

    # -- Lifecycle --

    async def startup(self) -> None:
        self._compiled()
        if self._db is not None:
            await self._db.connect()
        for hook in self._startup_hooks:
            await invoke(hook)

    async def shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)
        if self._db is not None:
            await self._db.disconnect()

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve with uvicorn (``pip install stackpeek[server]``)."""
        self._compiled()
        try:
            import uvicorn
        except ImportError:
            msg = "App.run() requires 'uvicorn'. Install it with: pip install stackpeek[server]"
            raise RuntimeError(msg) from None

        bind_host = host or self.config.host
        bind_port = port or self.config.port
        logger.info("Serving %s on http://%s:%d", self.config.name, bind_host, bind_port)
        uvicorn.run(
            self,
            host=bind_host,
            port=bind_port,
            log_level="debug" if self.config.debug else "info",
            timeout_keep_alive=int(self.config.request_timeout),
        )

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        await handle_request(
            scope,
            receive,
            send,
            router=self._compiled(),
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            match message["type"]:
                case "lifespan.startup":
                    try:
                        await self.startup()
                    except Exception as exc:
                        logger.exception("Startup failed")
                        await send({"type": "lifespan.startup.failed", "message": str(exc)})
                        return
                    await send({"type": "lifespan.startup.complete"})
                case "lifespan.shutdown":
                    await self.shutdown()
                    await send({"type": "lifespan.shutdown.complete"})
                    return

    # -- Compilation --

    def _compiled(self) -> Router:
        router = self._router
        if router is not None:
            return router
        with self._compile_lock:
            if self._router is None:
                self._compile()
            assert self._router is not None
            return self._router

    def _compile(self) -> None:
        """Build the router. Caller holds ``_compile_lock``."""
        router = Router()
        for registration in self._registrations:
            router.add(registration.to_route())
        router.compile()
        self._middleware = tuple(self._registered_middleware)
        self._router = router
        logger.debug(
            "App %r compiled: %d routes, %d middleware",
            self.config.name,
            len(self._registrations),
            len(self._middleware),
        )

    def _check_open(self) -> None:
        if self._router is not None:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and middleware before calling app.run()."
            )
            raise RuntimeError(msg)
