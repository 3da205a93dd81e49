"""HTTP methods understood by wren."""

from __future__ import annotations

from enum import Enum

from wren.errors import UnknownMethod


class HttpMethod(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value: str) -> HttpMethod:
        """Parse a method name, case-insensitively.

        Raises ``UnknownMethod`` for anything outside the six supported
        methods. Transports must not guess a replacement.
        """
        try:
            return cls(value.upper())
        except ValueError:
            raise UnknownMethod(value) from None

    def __str__(self) -> str:
        return self.value
