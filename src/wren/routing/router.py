"""Router — an ordered middleware chain with explicit dispatch.

Middleware run strictly in registration order. Each one either answers
through the sink or calls its continuation to defer to the next; the
first full route match wins. If every middleware defers, the router
answers 404.

Dispatch walks an index into an immutable tuple of middleware instead of
building nested closures. A request moves through three states::

    PENDING -> DISPATCHING(i) -> TERMINATED

Every continuation is bound to the index it was issued for, so calling a
stale continuation, calling one twice, or calling one after a response
has gone out is detected and ignored (and logged) instead of running
middleware a second time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any, overload

from wren._internal.invoke import invoke
from wren.dependencies import Dependencies
from wren.http import response as responses
from wren.http.method import HttpMethod
from wren.http.request import Request
from wren.middleware.protocol import Middleware, Next
from wren.routing.route import RouteMiddleware
from wren.server.errors import response_for_error
from wren.server.sink import ResponseSink

NOT_HANDLED_MESSAGE = "No middleware handled the request"


class DispatchState(Enum):
    PENDING = "pending"
    DISPATCHING = "dispatching"
    TERMINATED = "terminated"


class _Dispatch:
    """Per-request dispatch state. Lives exactly as long as ``handle()``."""

    __slots__ = ("index", "logger", "request", "scope", "sink", "stack", "state")

    def __init__(
        self,
        stack: tuple[Middleware, ...],
        request: Request,
        sink: ResponseSink,
        scope: Dependencies,
        logger: logging.Logger,
    ) -> None:
        self.stack = stack
        self.request = request
        self.sink = sink
        self.scope = scope
        self.logger = logger
        self.index = -1
        self.state = DispatchState.PENDING

    async def advance(self, expected_index: int, request: Request) -> None:
        """Run the middleware after *expected_index*, or the 404 terminal."""
        if self.state is DispatchState.TERMINATED:
            self.logger.error(
                "Continuation called after the chain terminated (%s %s)",
                request.method.value,
                request.path,
            )
            return
        if self.index != expected_index:
            self.logger.error(
                "Stale continuation for middleware %d called while at %d; ignored",
                expected_index,
                self.index,
            )
            return
        if self.sink.sent:
            self.logger.error(
                "Continuation called after a response was sent (%s %s); chain stopped",
                request.method.value,
                request.path,
            )
            self.state = DispatchState.TERMINATED
            return

        self.index = expected_index + 1
        if self.index >= len(self.stack):
            self.state = DispatchState.TERMINATED
            await self.sink.not_found(NOT_HANDLED_MESSAGE)
            return

        self.state = DispatchState.DISPATCHING
        middleware = self.stack[self.index]
        continuation = _Continuation(self, self.index, request)
        try:
            await invoke(middleware, request, self.sink, self.scope, continuation)
        except Exception as exc:
            self.state = DispatchState.TERMINATED
            if self.sink.sent:
                self.logger.exception(
                    "Middleware %r failed after a response was sent", middleware
                )
                return
            await self.sink.send(response_for_error(exc, request, logger=self.logger))


class _Continuation:
    """The ``Next`` handed to the middleware at ``index``."""

    __slots__ = ("_dispatch", "_index", "_request")

    def __init__(self, dispatch: _Dispatch, index: int, request: Request) -> None:
        self._dispatch = dispatch
        self._index = index
        self._request = request

    async def __call__(self, request: Request | None = None) -> None:
        await self._dispatch.advance(self._index, request if request is not None else self._request)

    def with_request(self, request: Request) -> _Continuation:
        return _Continuation(self._dispatch, self._index, request)


class Router:
    """An ordered list of middleware plus route-registration helpers.

    Usage::

        router = Router()
        router.use(CORSMiddleware(CORSConfig(allow_origin="*")))

        @router.get("/users/{id}")
        async def show_user(request, sink, scope, next):
            await sink.send_json({"id": request.path_params["id"]})

        await router.handle(request, sink, dependencies)

    Registration is expected to finish before the first request. Routes
    compile their template on registration, so a malformed pattern raises
    ``MalformedPattern`` right there.
    """

    __slots__ = ("_logger", "_middleware")

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._middleware: tuple[Middleware, ...] = ()
        self._logger = logger or logging.getLogger("wren.router")

    def __repr__(self) -> str:
        return f"<Router {len(self._middleware)} middleware>"

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        """The registered middleware, in execution order."""
        return self._middleware

    def use(self, *middleware: Middleware) -> None:
        """Append one or more middleware to the chain."""
        self._middleware = (*self._middleware, *middleware)

    # -- Route helpers --

    @overload
    def route(
        self, method: HttpMethod, path: str, middleware: None = None
    ) -> Callable[[Middleware], Middleware]: ...

    @overload
    def route(self, method: HttpMethod, path: str, middleware: Middleware) -> Middleware: ...

    def route(
        self,
        method: HttpMethod,
        path: str,
        middleware: Middleware | None = None,
    ) -> Middleware | Callable[[Middleware], Middleware]:
        """Register *middleware* for *method* requests whose path matches *path*.

        Works directly (``router.route(HttpMethod.GET, "/x", mw)``) or as a
        decorator (``@router.route(HttpMethod.GET, "/x")``).
        """

        def register(func: Middleware) -> Middleware:
            self.use(RouteMiddleware(method, path, func, logger=self._logger))
            return func

        if middleware is None:
            return register
        return register(middleware)

    def get(self, path: str = "", middleware: Middleware | None = None) -> Any:
        """Register a ``GET`` route. See ``route()``."""
        return self.route(HttpMethod.GET, path, middleware)

    def post(self, path: str = "", middleware: Middleware | None = None) -> Any:
        """Register a ``POST`` route. See ``route()``."""
        return self.route(HttpMethod.POST, path, middleware)

    def put(self, path: str = "", middleware: Middleware | None = None) -> Any:
        """Register a ``PUT`` route. See ``route()``."""
        return self.route(HttpMethod.PUT, path, middleware)

    def delete(self, path: str = "", middleware: Middleware | None = None) -> Any:
        """Register a ``DELETE`` route. See ``route()``."""
        return self.route(HttpMethod.DELETE, path, middleware)

    def head(self, path: str = "", middleware: Middleware | None = None) -> Any:
        """Register a ``HEAD`` route. See ``route()``."""
        return self.route(HttpMethod.HEAD, path, middleware)

    def options(self, path: str = "", middleware: Middleware | None = None) -> Any:
        """Register an ``OPTIONS`` route. See ``route()``."""
        return self.route(HttpMethod.OPTIONS, path, middleware)

    # -- Dispatch --

    async def handle(
        self,
        request: Request,
        sink: ResponseSink,
        dependencies: Dependencies,
    ) -> None:
        """Run *request* through the chain; exactly one response reaches *sink*.

        A fresh child scope of *dependencies* is created for this request
        and dropped when this returns. Failures raised by middleware are
        turned into error responses here; nothing escapes to the transport.
        """
        scope = dependencies.child()
        dispatch = _Dispatch(self._middleware, request, sink, scope, self._logger)

        await dispatch.advance(-1, request)
        dispatch.state = DispatchState.TERMINATED

        if not sink.sent:
            self._logger.error(
                "Middleware chain ended without a response (%s %s)",
                request.method.value,
                request.path,
            )
            await sink.send(responses.error_response("Middleware chain ended without a response"))
