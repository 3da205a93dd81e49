"""Middleware protocol and Next continuation protocol.

A middleware is any callable matching::

    async def my_mw(request: Request, sink: ResponseSink,
                    scope: Dependencies, next: Next) -> None: ...

No base class required. The framework checks the shape, not the lineage.

A middleware either answers through ``sink``, or calls ``await next()``
to let the following middleware handle the request, or both reads and
registers values in ``scope`` before deferring. Plain ``def`` middleware
works too; the router awaits whatever it returns.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wren.dependencies import Dependencies
    from wren.http.request import Request
    from wren.server.sink import ResponseSink


class Next(Protocol):
    """The continuation handed to every middleware.

    ``await next()`` defers to the following middleware with the current
    request; ``await next(request)`` defers with a replacement request.
    """

    async def __call__(self, request: Request | None = None) -> None: ...

    def with_request(self, request: Request) -> Next:
        """A continuation whose default request is *request*."""
        ...


class Middleware(Protocol):
    """Protocol for wren middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def hello(request, sink, scope, next):
            await sink.send_json({"hello": "world"})

        # Class middleware
        class RequireJSON:
            async def __call__(self, request, sink, scope, next):
                if request.content_type != "application/json":
                    await sink.bad_request("Expected JSON")
                    return
                await next()
    """

    def __call__(
        self,
        request: Request,
        sink: ResponseSink,
        scope: Dependencies,
        next: Next,
    ) -> Awaitable[None] | None: ...
