"""ASGI handler — translates ASGI scope/messages to wren types.

Reads the full request body, builds an immutable ``Request``, and runs
it through the router with a ``StreamingResponseSink`` bound to the ASGI
``send`` callable.
"""

import logging
from urllib.parse import quote

from wren._internal.asgi import Receive, Scope, Send
from wren.dependencies import Dependencies
from wren.errors import InvalidRequest
from wren.http.request import Request
from wren.routing.router import Router
from wren.server.sender import StreamingResponseSink

logger = logging.getLogger("wren.server")


async def read_body(receive: Receive) -> bytes | None:
    """Drain ``http.request`` messages. ``None`` when there was no body."""
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        body = message.get("body", b"")
        if body:
            chunks.append(body)
        if not message.get("more_body", False):
            break
    if not chunks:
        return None
    return b"".join(chunks)


def request_from_scope(
    scope: Scope,
    body: bytes | None,
    *,
    allow_url_fallback: bool = False,
) -> Request:
    """Create a Request from an ASGI HTTP scope.

    The URL is built from the scope's scheme and the ``Host`` header (or
    the server address). Without either, the origin-form target is only
    accepted when *allow_url_fallback* is set.
    """
    raw_path = scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else quote(scope.get("path", "/"))
    query = scope.get("query_string", b"").decode("latin-1")
    target = f"{path}?{query}" if query else path

    headers = [
        (name.decode("latin-1"), value.decode("latin-1"))
        for name, value in scope.get("headers", ())
    ]

    host = next((value for name, value in headers if name.lower() == "host"), None)
    if host is None and scope.get("server"):
        server_host, server_port = scope["server"][0], scope["server"][1]
        host = f"{server_host}:{server_port}" if server_port is not None else server_host

    if host:
        scheme = scope.get("scheme", "http")
        return Request.build(scope["method"], f"{scheme}://{host}{target}", headers=headers, body=body)

    return Request.build(
        scope["method"],
        target,
        headers=headers,
        body=body,
        host="localhost",
        allow_fallback=allow_url_fallback,
    )


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    dependencies: Dependencies,
    allow_url_fallback: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    sink = StreamingResponseSink(send, logger=logger)
    body = await read_body(receive)

    try:
        request = request_from_scope(scope, body, allow_url_fallback=allow_url_fallback)
    except InvalidRequest as exc:
        await sink.abort(exc)
        return

    logger.info("Processing %s %s", request.method.value, request.url.geturl())

    try:
        await router.handle(request, sink, dependencies)
    except Exception as exc:
        logger.exception("Unhandled error while handling %s %s", request.method.value, request.path)
        if not sink.closed:
            await sink.abort(exc)
        return

    if not sink.closed:
        await sink.abort(RuntimeError("Response stream was left open"))
