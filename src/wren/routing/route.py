"""Route middleware: a method and template gate around another middleware."""

from __future__ import annotations

import logging
from urllib.parse import unquote

from wren._internal.invoke import invoke
from wren.dependencies import Dependencies
from wren.http.method import HttpMethod
from wren.http.request import Request
from wren.middleware.protocol import Middleware, Next
from wren.routing.pattern import RouteTemplate, compile_pattern
from wren.server.sink import ResponseSink


def percent_decode(path: str) -> str:
    """Decode ``%XX`` escapes in a URL path (``+`` is left alone)."""
    return unquote(path, errors="strict")


class RouteMiddleware:
    """Runs *middleware* only for requests with a matching method and path.

    The template is compiled once, here, so a malformed pattern fails at
    registration time. On a match the wrapped middleware receives a copy
    of the request carrying the captured path parameters; on any mismatch
    the chain simply moves on.

    Usage::

        router.use(RouteMiddleware(HttpMethod.GET, "/users/{id}", show_user))
    """

    __slots__ = ("_logger", "method", "middleware", "template")

    def __init__(
        self,
        method: HttpMethod,
        pattern: str,
        middleware: Middleware,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.method = method
        self.template: RouteTemplate = compile_pattern(pattern)
        self.middleware = middleware
        self._logger = logger or logging.getLogger("wren.router")

    def __repr__(self) -> str:
        return f"RouteMiddleware({self.method.value} {self.template.pattern!r})"

    async def __call__(
        self,
        request: Request,
        sink: ResponseSink,
        scope: Dependencies,
        next: Next,
    ) -> None:
        try:
            decoded_path = percent_decode(request.path)
        except UnicodeDecodeError:
            self._logger.debug("Undecodable path %r, skipping %r", request.path, self)
            await next()
            return

        self._logger.debug(
            "Comparing %s %s to %s %s",
            request.method.value,
            decoded_path,
            self.method.value,
            self.template.pattern,
        )

        if request.method is not self.method:
            await next()
            return

        params = self.template.match(decoded_path)
        if params is None:
            await next()
            return

        routed = request.with_path_params(params)
        await invoke(self.middleware, routed, sink, scope, next.with_request(routed))
