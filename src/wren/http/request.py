"""Immutable HTTP request.

Frozen metadata plus an optional, fully-read body. Transports build one
``Request`` per inbound message; the route middleware that matches it
derives a copy carrying the path parameters.
"""

from __future__ import annotations

import json as json_module
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any
from urllib.parse import SplitResult, urlsplit

from wren.errors import CouldNotDeserializeRequest, InvalidRequestURL
from wren.http.headers import HeaderList, HeaderPair
from wren.http.method import HttpMethod
from wren.http.query import QueryParams

logger = logging.getLogger("wren.server")

_EMPTY_PARAMS: Mapping[str, str] = MappingProxyType({})


def parse_request_url(
    target: str,
    *,
    host: str | None = None,
    allow_fallback: bool = False,
    log: logging.Logger | None = None,
) -> SplitResult:
    """Turn a request target into a parsed absolute URL.

    Absolute targets (``https://host/path?q``) are used as-is. An
    origin-form target (``/path?q``) is only accepted when the caller opts
    into the fallback with ``allow_fallback=True`` and supplies *host*; the
    URL is then guessed as ``http://{host}{target}``.

    Raises ``InvalidRequestURL`` when no URL can be determined.
    """
    if not target or any(ch.isspace() or ord(ch) < 0x20 for ch in target):
        raise InvalidRequestURL(target)

    try:
        parts = urlsplit(target)
    except ValueError:
        raise InvalidRequestURL(target) from None

    if parts.scheme and parts.netloc:
        return parts

    if allow_fallback and host and target.startswith("/") and not any(
        ch.isspace() or ch in "/?#" for ch in host
    ):
        guess = f"http://{host}{target}"
        (log or logger).warning("Using fallback URL detection for %r", target)
        try:
            return urlsplit(guess)
        except ValueError:
            pass

    (log or logger).error("Could not determine URL from %r (host=%r)", target, host)
    raise InvalidRequestURL(target)


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``headers`` is read-only. ``path_params`` is empty until a route
    middleware matches the request and hands a copy with the captured
    variables down the chain.
    """

    method: HttpMethod
    headers: HeaderList
    url: SplitResult
    body: bytes | None = None
    path_params: Mapping[str, str] = _EMPTY_PARAMS
    query: QueryParams = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", self.headers.frozen())
        object.__setattr__(self, "query", QueryParams(self.url.query))

    # -- Computed properties --

    @property
    def path(self) -> str:
        """The URL path, still percent-encoded."""
        return self.url.path or "/"

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    def query_item(self, name: str) -> str | None:
        """The first query parameter named *name*, if any."""
        return self.query.get(name)

    # -- Body access --

    def text(self) -> str:
        """The body decoded as UTF-8 (empty string when absent)."""
        if self.body is None:
            return ""
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Parse the body as JSON.

        Raises ``CouldNotDeserializeRequest`` if the body is absent or is
        not valid JSON; the router turns that into a 400.
        """
        if self.body is None:
            raise CouldNotDeserializeRequest("Request has no body")
        try:
            return json_module.loads(self.body)
        except (ValueError, UnicodeDecodeError) as exc:
            raise CouldNotDeserializeRequest(f"Could not deserialize request: {exc}") from exc

    def json_as[T](self, cls: type[T]) -> T:
        """Parse the body as a JSON object and build *cls* from its keys."""
        data = self.json()
        if not isinstance(data, dict):
            raise CouldNotDeserializeRequest(f"Expected a JSON object for {cls.__name__}")
        try:
            return cls(**data)
        except TypeError as exc:
            raise CouldNotDeserializeRequest(f"Could not deserialize request: {exc}") from exc

    # -- Derivation --

    def with_path_params(self, params: Mapping[str, str]) -> Request:
        """A copy of this request carrying *params* as its path parameters."""
        return replace(self, path_params=MappingProxyType(dict(params)))

    # -- Factory --

    @classmethod
    def build(
        cls,
        method: str | HttpMethod,
        target: str,
        *,
        headers: Iterable[tuple[str, str] | HeaderPair] = (),
        body: bytes | str | None = None,
        host: str | None = None,
        allow_fallback: bool = False,
    ) -> Request:
        """Create a Request from raw transport values.

        Raises ``UnknownMethod`` or ``InvalidRequestURL`` when the method or
        target cannot be understood.
        """
        if not isinstance(method, HttpMethod):
            method = HttpMethod.parse(method)
        if isinstance(body, str):
            body = body.encode("utf-8")
        url = parse_request_url(target, host=host, allow_fallback=allow_fallback)
        return cls(method=method, headers=HeaderList(headers), url=url, body=body)
