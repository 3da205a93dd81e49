"""Built-in middleware: CORS.

Sets the CORS response headers on the sink for every request and answers
``OPTIONS`` preflight requests itself with an empty 204.
"""

from __future__ import annotations

from dataclasses import dataclass

from wren.dependencies import Dependencies
from wren.http.method import HttpMethod
from wren.http.request import Request
from wren.middleware.protocol import Next
from wren.server.sink import ResponseSink


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS middleware configuration.

    Override what you need::

        CORSConfig(
            allow_origin="https://example.com",
            allow_methods=("GET", "POST", "OPTIONS"),
        )
    """

    allow_origin: str = "*"
    allow_methods: tuple[str, ...] = ("GET", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Accept", "Content-Type")


class CORSMiddleware:
    """CORS middleware.

    Handles:
    - Preflight ``OPTIONS`` requests (answers 204 with ``Allow``)
    - Every other request (headers set, then deferred to ``next``)

    Usage::

        router.use(CORSMiddleware(CORSConfig(allow_origin="https://example.com")))
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    async def __call__(
        self,
        request: Request,
        sink: ResponseSink,
        scope: Dependencies,
        next: Next,
    ) -> None:
        cfg = self.config
        methods = ", ".join(cfg.allow_methods)
        sink.set_header("Access-Control-Allow-Origin", cfg.allow_origin)
        sink.set_header("Access-Control-Allow-Headers", ", ".join(cfg.allow_headers))
        sink.set_header("Access-Control-Allow-Methods", methods)

        if request.method is HttpMethod.OPTIONS:
            sink.set_header("Allow", methods)
            await sink.empty()
            return

        await next()


def cors(allow_origin: str) -> CORSMiddleware:
    """Shorthand for ``CORSMiddleware(CORSConfig(allow_origin=...))``."""
    return CORSMiddleware(CORSConfig(allow_origin=allow_origin))
