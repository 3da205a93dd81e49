"""Streaming response sink — writes to an ASGI ``send`` callable.

The connection-oriented transport: the status line and headers go out as
one ``http.response.start`` message, the body follows in chunks, and the
final empty ``http.response.body`` message closes the response. If the
payload or a header cannot be encoded a 500 header is still written
before the stream is closed, so the connection is never left half-open.
"""

import logging

from wren._internal.asgi import Send
from wren.server.sink import ResponseSink

CHUNK_SIZE = 64 * 1024

RawHeaders = list[tuple[bytes, bytes]]


class StreamingResponseSink(ResponseSink):
    """``ResponseSink`` over ASGI ``send()``.

    Usage::

        sink = StreamingResponseSink(send)
        await router.handle(request, sink, dependencies)
    """

    def __init__(
        self,
        send: Send,
        *,
        chunk_size: int = CHUNK_SIZE,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(logger=logger)
        self._send = send
        self._chunk_size = chunk_size
        self._header_written = False
        self._closed = False

    @property
    def closed(self) -> bool:
        """True once the final body message has been sent."""
        return self._closed

    async def _deliver(self, status: int, body: bytes) -> None:
        try:
            raw_headers = self._encode_headers()
        except UnicodeEncodeError as exc:
            self._logger.error("Response header is not latin-1 encodable: %s", exc)
            await self.abort(exc)
            return

        await self._write_header(status, raw_headers)
        for start in range(0, len(body), self._chunk_size):
            await self._send(
                {
                    "type": "http.response.body",
                    "body": body[start : start + self._chunk_size],
                    "more_body": True,
                }
            )
        await self._close()

    async def _fail(self, error: Exception) -> None:
        await self.abort(error)

    async def abort(self, error: BaseException) -> None:
        """Finish the response after a failure.

        Writes a 500 header if none went out yet, then closes the stream.
        Also used by transports when a request could not even be built.
        """
        self._logger.error("Aborting response: %s", error)
        self._sent = True
        if not self._header_written:
            self.headers.remove("Content-Type")
            self.headers.set("Content-Length", "0")
            try:
                raw_headers = self._encode_headers()
            except UnicodeEncodeError:
                raw_headers = [(b"content-length", b"0")]
            await self._write_header(500, raw_headers)
        await self._close()

    def _encode_headers(self) -> RawHeaders:
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self.headers.items()
        ]

    async def _write_header(self, status: int, raw_headers: RawHeaders) -> None:
        if self._header_written:
            return
        self._header_written = True
        await self._send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": raw_headers,
            }
        )

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._send(
            {
                "type": "http.response.body",
                "body": b"",
                "more_body": False,
            }
        )
