"""Wren application class.

Bundles a router, the root dependency scope, and configuration into one
ASGI callable. The ASGI lifespan owns the background task scheduler:
startup opens it and binds it into the root scope, shutdown drains it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.cache.memory import MemoryCache
from wren.cache.protocol import Cache
from wren.config import AppConfig
from wren.dependencies import Dependencies
from wren.middleware.protocol import Middleware
from wren.routing.router import Router
from wren.server.handler import handle_request
from wren.tasks.scheduler import BackgroundTaskScheduler

logger = logging.getLogger("wren.server")


class App:
    """The wren application.

    Usage::

        app = App()

        @app.router.get("/hello/{name}")
        async def hello(request, sink, scope, next):
            await sink.send_json({"hello": request.path_params["name"]})

        app.run()

    ``App`` is also a ``DependencyProvider``: ``app.dependencies`` is the
    root scope every request scope descends from. A ``MemoryCache`` sized
    by ``config.cache_capacity`` is bound there as ``Cache`` unless one is
    already registered.
    """

    __slots__ = (
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
        "dependencies",
        "router",
        "scheduler",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        router: Router | None = None,
        dependencies: Dependencies | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.router: Router = router or Router()
        self.dependencies: Dependencies = dependencies or Dependencies()
        self.scheduler: BackgroundTaskScheduler | None = None
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []

        if Cache not in self.dependencies:
            self.dependencies.register(
                MemoryCache(self.config.cache_capacity), as_type=Cache
            )

    def __repr__(self) -> str:
        return f"<App {self.router!r}>"

    # -- Setup --

    def use(self, *middleware: Middleware) -> None:
        """Append middleware to the router chain."""
        self.router.use(*middleware)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the background task scheduler is available.
        """
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run before background tasks are drained.
        """
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the development server (requires ``wren[server]``)."""
        from wren.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            router=self.router,
            dependencies=self.dependencies,
            allow_url_fallback=self.config.allow_url_fallback,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol around the scheduler's lifetime."""
        message = await receive()
        if message["type"] != "lifespan.startup":
            return

        try:
            async with BackgroundTaskScheduler(
                poll_interval=self.config.background_task_poll_interval
            ) as scheduler:
                self.scheduler = scheduler
                self.dependencies.register(scheduler)
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

                while True:
                    message = await receive()
                    if message["type"] == "lifespan.shutdown":
                        break

                for hook in self._shutdown_hooks:
                    await invoke(hook)
                logger.info("Shutting down, waiting for background tasks")
                await scheduler.wait_and_shutdown()
        finally:
            self.scheduler = None

        await send({"type": "lifespan.shutdown.complete"})
