"""Tests for wren.routing.route — the method and template gate."""

from wren.dependencies import Dependencies
from wren.http.method import HttpMethod
from wren.http.request import Request
from wren.routing.route import RouteMiddleware, percent_decode
from wren.testing import RecordingResponseSink


class _RecordingNext:
    """Stands in for the router's continuation."""

    def __init__(self) -> None:
        self.calls: list[Request | None] = []
        self.bound: Request | None = None

    async def __call__(self, request: Request | None = None) -> None:
        self.calls.append(request)

    def with_request(self, request: Request) -> "_RecordingNext":
        self.bound = request
        return self


def _request(method: str, path: str) -> Request:
    return Request.build(method, f"http://localhost{path}")


async def _run(route: RouteMiddleware, request: Request) -> tuple[RecordingResponseSink, _RecordingNext]:
    sink = RecordingResponseSink()
    nxt = _RecordingNext()
    await route(request, sink, Dependencies(), nxt)
    return sink, nxt


class TestPercentDecode:
    def test_decodes_escapes(self) -> None:
        assert percent_decode("/a%2Fb%20c") == "/a/b c"

    def test_plus_is_kept(self) -> None:
        assert percent_decode("/a+b") == "/a+b"


class TestRouteMiddleware:
    async def test_match_invokes_wrapped_with_params(self) -> None:
        seen: list[Request] = []

        async def handler(request, sink, scope, next):
            seen.append(request)
            await sink.send_json("hit")

        route = RouteMiddleware(HttpMethod.GET, "/users/{id}", handler)
        sink, nxt = await _run(route, _request("GET", "/users/5"))

        assert sink.json() == "hit"
        assert nxt.calls == []
        assert dict(seen[0].path_params) == {"id": "5"}
        assert nxt.bound is seen[0]

    async def test_wrong_method_defers(self) -> None:
        async def handler(request, sink, scope, next):
            raise AssertionError("must not run")

        route = RouteMiddleware(HttpMethod.POST, "/users/{id}", handler)
        sink, nxt = await _run(route, _request("GET", "/users/5"))

        assert nxt.calls == [None]
        assert not sink.sent

    async def test_wrong_path_defers(self) -> None:
        async def handler(request, sink, scope, next):
            raise AssertionError("must not run")

        route = RouteMiddleware(HttpMethod.GET, "/users/{id}", handler)
        _, nxt = await _run(route, _request("GET", "/teams/5"))

        assert nxt.calls == [None]

    async def test_undecodable_path_defers(self) -> None:
        async def handler(request, sink, scope, next):
            raise AssertionError("must not run")

        route = RouteMiddleware(HttpMethod.GET, "/{anything}", handler)
        _, nxt = await _run(route, _request("GET", "/%ff%fe"))

        assert nxt.calls == [None]

    async def test_original_request_untouched(self) -> None:
        async def handler(request, sink, scope, next):
            await sink.send_json("ok")

        request = _request("GET", "/users/5")
        route = RouteMiddleware(HttpMethod.GET, "/users/{id}", handler)
        await _run(route, request)

        assert dict(request.path_params) == {}

    def test_repr(self) -> None:
        route = RouteMiddleware(HttpMethod.GET, "/x", lambda *a: None)
        assert repr(route) == "RouteMiddleware(GET '/x')"
