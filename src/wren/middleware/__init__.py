"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, sink: ResponseSink, scope: Dependencies, next: Next) -> None

Built-in middleware:
    AuthenticationMiddleware -- Registers the request's User in the request scope
    CORSMiddleware -- Cross-Origin Resource Sharing headers and preflight
"""

from wren.middleware.auth import AuthenticationMiddleware, User, UserProvider
from wren.middleware.builtin import CORSConfig, CORSMiddleware, cors
from wren.middleware.protocol import Middleware, Next

__all__ = [
    "AuthenticationMiddleware",
    "CORSConfig",
    "CORSMiddleware",
    "Middleware",
    "Next",
    "User",
    "UserProvider",
    "cors",
]
