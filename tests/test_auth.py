"""Tests for wren.middleware.auth — user extraction into the request scope."""

import logging
from dataclasses import dataclass

import pytest

from wren.dependencies import Dependencies
from wren.http.request import Request
from wren.middleware.auth import AuthenticationMiddleware, User, UserProvider
from wren.routing.router import Router
from wren.testing import RecordingResponseSink


@dataclass(frozen=True)
class _User:
    user_id: str


class _HeaderProvider:
    """Treats the ``X-User`` header as the authenticated user id."""

    def extract(self, request: Request) -> User | None:
        user_id = request.headers.get("x-user")
        return _User(user_id) if user_id else None


class _AsyncProvider:
    async def extract(self, request: Request) -> User | None:
        return _User("async")


class _BrokenProvider:
    def extract(self, request: Request) -> User | None:
        raise RuntimeError("token service down")


def _router() -> Router:
    router = Router()
    router.use(AuthenticationMiddleware())

    @router.get("/me")
    async def me(request, sink, scope, next):
        user = scope.resolve(User)
        if user is None:
            await sink.not_authorized()
            return
        await sink.send_json({"id": user.user_id})

    return router


async def _get(root: Dependencies, headers: dict[str, str] | None = None) -> RecordingResponseSink:
    request = Request.build("GET", "http://localhost/me", headers=list((headers or {}).items()))
    sink = RecordingResponseSink()
    await _router().handle(request, sink, root)
    return sink


class TestAuthenticationMiddleware:
    async def test_user_registered_in_request_scope(self) -> None:
        root = Dependencies()
        root.register(_HeaderProvider(), as_type=UserProvider)

        sink = await _get(root, {"X-User": "u-1"})

        assert sink.json() == {"id": "u-1"}
        assert root.resolve(User) is None

    async def test_anonymous(self) -> None:
        root = Dependencies()
        root.register(_HeaderProvider(), as_type=UserProvider)

        sink = await _get(root)

        assert sink.status == 403
        assert sink.json() == {"data": "Not authorized", "status": 403}

    async def test_async_provider(self) -> None:
        root = Dependencies()
        root.register(_AsyncProvider(), as_type=UserProvider)

        sink = await _get(root)

        assert sink.json() == {"id": "async"}

    async def test_missing_provider_defers(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="wren.auth"):
            sink = await _get(Dependencies(), {"X-User": "u-1"})

        assert sink.status == 403
        assert any("Could not resolve UserProvider" in r.message for r in caplog.records)

    async def test_provider_failure_is_500(self) -> None:
        root = Dependencies()
        root.register(_BrokenProvider(), as_type=UserProvider)

        sink = await _get(root, {"X-User": "u-1"})

        assert sink.status == 500
        assert sink.json() == {"data": "Internal Server Error", "status": 500}
