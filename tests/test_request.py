"""Tests for wren.http.request — immutable Request and URL determination."""

from dataclasses import FrozenInstanceError, dataclass

import pytest

from wren.errors import CouldNotDeserializeRequest, InvalidRequestURL, UnknownMethod
from wren.http.method import HttpMethod
from wren.http.request import Request, parse_request_url


@dataclass
class _Item:
    name: str
    count: int = 1


class TestParseRequestURL:
    def test_absolute_target(self) -> None:
        url = parse_request_url("https://api.example.com/items?page=2")
        assert url.scheme == "https"
        assert url.netloc == "api.example.com"
        assert url.path == "/items"
        assert url.query == "page=2"

    def test_origin_form_rejected_without_fallback(self) -> None:
        with pytest.raises(InvalidRequestURL):
            parse_request_url("/items", host="example.com")

    def test_origin_form_with_fallback(self) -> None:
        url = parse_request_url("/items?x=1", host="example.com", allow_fallback=True)
        assert url.geturl() == "http://example.com/items?x=1"

    def test_fallback_needs_host(self) -> None:
        with pytest.raises(InvalidRequestURL):
            parse_request_url("/items", allow_fallback=True)

    def test_fallback_rejects_bad_host(self) -> None:
        with pytest.raises(InvalidRequestURL):
            parse_request_url("/items", host="evil.com/x", allow_fallback=True)

    @pytest.mark.parametrize("target", ["", "http://example.com/a b", "/tab\there"])
    def test_garbage_rejected(self, target: str) -> None:
        with pytest.raises(InvalidRequestURL):
            parse_request_url(target, host="example.com", allow_fallback=True)


class TestHttpMethod:
    def test_parse_case_insensitive(self) -> None:
        assert HttpMethod.parse("get") is HttpMethod.GET
        assert HttpMethod.parse("OPTIONS") is HttpMethod.OPTIONS

    def test_unknown_method(self) -> None:
        with pytest.raises(UnknownMethod) as exc_info:
            HttpMethod.parse("PATCH")
        assert exc_info.value.method == "PATCH"

    def test_str(self) -> None:
        assert str(HttpMethod.DELETE) == "DELETE"


class TestRequest:
    def test_build(self) -> None:
        request = Request.build(
            "post",
            "http://localhost/items/1?expand=true",
            headers=[("Content-Type", "application/json")],
            body='{"a": 1}',
        )
        assert request.method is HttpMethod.POST
        assert request.path == "/items/1"
        assert request.query_item("expand") == "true"
        assert request.content_type == "application/json"
        assert request.body == b'{"a": 1}'

    def test_empty_path_is_root(self) -> None:
        assert Request.build("GET", "http://localhost").path == "/"

    def test_path_stays_encoded(self) -> None:
        assert Request.build("GET", "http://localhost/a%20b").path == "/a%20b"

    def test_build_rejects_unknown_method(self) -> None:
        with pytest.raises(UnknownMethod):
            Request.build("BREW", "http://localhost/")

    def test_frozen(self) -> None:
        request = Request.build("GET", "http://localhost/")
        with pytest.raises(FrozenInstanceError):
            request.body = b"x"  # type: ignore[misc]

    def test_with_path_params_copies(self) -> None:
        request = Request.build("GET", "http://localhost/users/1")
        routed = request.with_path_params({"id": "1"})
        assert dict(routed.path_params) == {"id": "1"}
        assert dict(request.path_params) == {}
        assert routed.url == request.url

    def test_path_params_are_read_only(self) -> None:
        routed = Request.build("GET", "http://localhost/").with_path_params({"id": "1"})
        with pytest.raises(TypeError):
            routed.path_params["id"] = "2"  # type: ignore[index]

    def test_headers_are_read_only(self) -> None:
        request = Request.build("GET", "http://localhost/", headers=[("X-Role", "user")])
        with pytest.raises(TypeError):
            request.headers.set("X-Role", "admin")
        with pytest.raises(TypeError):
            request.headers.append("X-Role", "admin")
        assert request.headers.get("x-role") == "user"

    def test_header_copy_is_independent(self) -> None:
        request = Request.build("GET", "http://localhost/", headers=[("X-Role", "user")])
        headers = request.headers.copy()
        headers.set("X-Role", "admin")
        assert request.headers.get("x-role") == "user"

    def test_text(self) -> None:
        assert Request.build("GET", "http://localhost/").text() == ""
        assert Request.build("POST", "http://localhost/", body="héllo").text() == "héllo"


class TestJsonBody:
    def test_json(self) -> None:
        request = Request.build("POST", "http://localhost/", body=b'{"name": "x"}')
        assert request.json() == {"name": "x"}

    def test_missing_body(self) -> None:
        with pytest.raises(CouldNotDeserializeRequest):
            Request.build("POST", "http://localhost/").json()

    def test_invalid_json(self) -> None:
        with pytest.raises(CouldNotDeserializeRequest):
            Request.build("POST", "http://localhost/", body=b"not json").json()

    def test_json_as(self) -> None:
        request = Request.build("POST", "http://localhost/", body=b'{"name": "x", "count": 3}')
        assert request.json_as(_Item) == _Item(name="x", count=3)

    def test_json_as_rejects_non_object(self) -> None:
        request = Request.build("POST", "http://localhost/", body=b"[1, 2]")
        with pytest.raises(CouldNotDeserializeRequest):
            request.json_as(_Item)

    def test_json_as_rejects_unknown_fields(self) -> None:
        request = Request.build("POST", "http://localhost/", body=b'{"nope": 1}')
        with pytest.raises(CouldNotDeserializeRequest):
            request.json_as(_Item)
