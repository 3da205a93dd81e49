"""Response sinks — the one place a middleware chain emits its response.

``ResponseSink`` owns the rules every transport shares: headers are
collected with ``set_header``, the payload is serialized to JSON once, and
at most one terminal response leaves each sink. Concrete sinks only decide
how the encoded response reaches the wire (``_deliver``) and what happens
when serialization fails (``_fail``).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from wren.errors import ResponseAlreadySent
from wren.http import response as responses
from wren.http.headers import HeaderList
from wren.http.response import ApiResponse, encode_json


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ResponseSink(ABC):
    """Transport-independent response writer.

    Subclasses implement ``_deliver`` and ``_fail``. Everything a
    middleware calls is defined here::

        sink.set_header("Cache-Control", "no-store")
        await sink.send_json({"id": 7}, status=201)
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.headers = HeaderList()
        self._sent = False
        self._logger = logger or logging.getLogger("wren.server")

    @property
    def sent(self) -> bool:
        """True once a terminal response has been handed to this sink."""
        return self._sent

    def set_header(self, name: str, value: str) -> None:
        """Set a response header, replacing any previous value."""
        self.headers.set(name, value)

    async def send_json(self, payload: Any = None, status: int = 200) -> None:
        """Serialize *payload* as JSON and send it with *status*.

        Raises ``ResponseAlreadySent`` if this sink already sent (or tried
        to send) a response. A payload that cannot be serialized goes down
        the transport's failure path instead of raising.
        """
        if self._sent:
            self._logger.critical("Attempted to send a second response (status %d)", status)
            raise ResponseAlreadySent()
        self._sent = True

        body = b""
        if body_allowed(status):
            try:
                body = encode_json(payload)
            except (TypeError, ValueError) as exc:
                self._logger.error("Failed to serialize response: %s", exc)
                await self._fail(exc)
                return
            self.headers.set("Content-Type", "application/json")
            self.headers.set("Content-Length", str(len(body)))
        await self._deliver(status, body)

    # -- Convenience responses (all expressed through send_json) --

    async def send(self, response: ApiResponse) -> None:
        """Send an ``ApiResponse`` envelope."""
        await self.send_json(response.body, response.status)

    async def not_found(self, message: str | None = None) -> None:
        await self.send(responses.not_found(message))

    async def bad_request(self, message: str = "Invalid request") -> None:
        await self.send(responses.bad_request(message))

    async def internal_server_error(self) -> None:
        await self.send(responses.internal_server_error())

    async def not_authorized(self) -> None:
        await self.send(responses.not_authorized())

    async def empty(self) -> None:
        """204 with no body."""
        await self.send(responses.no_content())

    async def accepted(self) -> None:
        """202 with no body."""
        await self.send(responses.accepted())

    # -- Transport hooks --

    @abstractmethod
    async def _deliver(self, status: int, body: bytes) -> None:
        """Write the status, ``self.headers`` and *body* to the transport."""

    @abstractmethod
    async def _fail(self, error: Exception) -> None:
        """Handle a response that could not be serialized."""
