"""Authentication middleware.

Resolves a ``UserProvider`` from the request scope and asks it for the
user behind the request. A found user is registered in the per-request
scope under the ``User`` protocol, so downstream middleware can
``scope.resolve(User)``. Token verification itself lives in the provider,
outside wren.

Usage::

    dependencies.register(JWTUserProvider(...), as_type=UserProvider)
    router.use(AuthenticationMiddleware())

    @router.get("/me")
    async def me(request, sink, scope, next):
        user = scope.resolve(User)
        if user is None:
            await sink.not_authorized()
            return
        await sink.send_json({"id": user.user_id})
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from wren._internal.invoke import invoke
from wren.dependencies import Dependencies
from wren.http.request import Request
from wren.middleware.protocol import Next
from wren.server.sink import ResponseSink


@runtime_checkable
class User(Protocol):
    """Minimal user protocol. Bring your own user model."""

    @property
    def user_id(self) -> str: ...


@runtime_checkable
class UserProvider(Protocol):
    """Extracts the authenticated user from a request, if there is one.

    ``extract`` may be sync or async. Returning ``None`` means anonymous.
    """

    def extract(self, request: Request) -> User | None: ...


class AuthenticationMiddleware:
    """Registers the request's ``User`` in the request scope.

    - No ``UserProvider`` bound: logs an error and defers (nobody is
      ever authenticated).
    - Provider raises: answers 500 and stops the chain.
    - Otherwise: registers the user (if any) and defers.
    """

    __slots__ = ("_logger",)

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("wren.auth")

    async def __call__(
        self,
        request: Request,
        sink: ResponseSink,
        scope: Dependencies,
        next: Next,
    ) -> None:
        provider = scope.resolve(UserProvider)
        if provider is None:
            self._logger.error(
                "Could not resolve UserProvider. Authentication will never be successful"
            )
            await next()
            return

        self._logger.debug("Using UserProvider %r", provider)

        try:
            user = await invoke(provider.extract, request)
        except Exception:
            self._logger.exception("Unexpected error while authenticating the user")
            await sink.internal_server_error()
            return

        if user is not None:
            self._logger.debug("Registering user in request scope: %r", user)
            scope.register(user, as_type=User)
        else:
            self._logger.debug("User not determined")

        await next()
