"""Single-shot transport for serverless invocations.

One event in, one result out. The event follows the API Gateway HTTP API
(v2) payload shape; the result is the matching response dict::

    handler = InvocationHandler(router, dependencies)
    result = await handler.handle(event)
    # {"statusCode": 200, "headers": {...}, "body": "...", "isBase64Encoded": False}

Serialization happens in memory and the result is delivered through a
``Completion``: callers observe either a value or an error, never both
and never neither.
"""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping
from typing import Any

from wren._internal.completion import Completion
from wren.dependencies import DependencyProvider
from wren.http.request import Request
from wren.routing.router import Router
from wren.server.sink import ResponseSink

_logger = logging.getLogger("wren.server")

# The invocation carries no host; requests get a fixed placeholder one
INVOCATION_URL_PREFIX = "https://lambda-unknown"

type InvocationResult = dict[str, Any]


class SingleShotResponseSink(ResponseSink):
    """``ResponseSink`` that settles a ``Completion`` exactly once."""

    def __init__(
        self,
        completion: Completion[InvocationResult] | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self.completion: Completion[InvocationResult] = completion or Completion()

    async def _deliver(self, status: int, body: bytes) -> None:
        headers: dict[str, str] = {}
        for name, value in self.headers.items():
            headers[name] = value
        self.completion.succeed(
            {
                "statusCode": status,
                "headers": headers,
                "body": body.decode("utf-8"),
                "isBase64Encoded": False,
            }
        )

    async def _fail(self, error: Exception) -> None:
        self.completion.fail(error)


def request_from_event(event: Mapping[str, Any]) -> Request:
    """Build a ``Request`` from an API Gateway v2 event.

    Raises ``UnknownMethod``, ``InvalidRequestURL`` or ``KeyError`` when the
    event cannot be understood.
    """
    method = event["requestContext"]["http"]["method"]
    raw_path = event.get("rawPath") or "/"
    raw_query = event.get("rawQueryString") or ""
    target = f"{INVOCATION_URL_PREFIX}{raw_path}"
    if raw_query:
        target = f"{target}?{raw_query}"

    body: bytes | None = None
    raw_body = event.get("body")
    if raw_body is not None:
        if event.get("isBase64Encoded"):
            body = base64.b64decode(raw_body)
        else:
            body = raw_body.encode("utf-8")

    headers = [(name, value) for name, value in (event.get("headers") or {}).items()]
    return Request.build(method, target, headers=headers, body=body)


class InvocationHandler:
    """Runs one serverless invocation through a ``Router``.

    The root scope is taken from *provider* once, at construction.
    """

    __slots__ = ("_logger", "dependencies", "router")

    def __init__(
        self,
        router: Router,
        provider: DependencyProvider,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.router = router
        self.dependencies = provider.dependencies
        self._logger = logger or _logger

    async def handle(self, event: Mapping[str, Any]) -> InvocationResult:
        """Dispatch *event* and return the response dict.

        A malformed event fails the completion, so the error is raised
        here to the caller instead of taking the process down.
        """
        sink = SingleShotResponseSink(logger=self._logger)
        try:
            request = request_from_event(event)
        except Exception as exc:
            self._logger.error("Could not build request from invocation: %s", exc)
            sink.completion.fail(exc)
            return await sink.completion.wait()

        try:
            await self.router.handle(request, sink, self.dependencies)
        except Exception as exc:
            self._logger.exception("Router failed while handling invocation")
            if not sink.completion.done:
                sink.completion.fail(exc)

        if not sink.completion.done:
            sink.completion.fail(RuntimeError("Router finished without a response"))

        return await sink.completion.wait()
