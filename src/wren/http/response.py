"""Response envelope and JSON encoding.

Every JSON response wren produces is wrapped in the same envelope::

    {"data": <payload or null>, "status": <int>}

The helpers below build the canned responses the router and the sink
convenience methods send.
"""

from __future__ import annotations

import dataclasses
import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """A status plus an optional payload, sent as the JSON envelope.

    ``enveloped=False`` sends ``data`` as the body verbatim, and a ``None``
    body (e.g. 204) means nothing is serialized at all.
    """

    data: Any = None
    status: int = 200
    enveloped: bool = True

    @property
    def body(self) -> Any:
        """The JSON-serializable body for this response."""
        if not self.enveloped:
            return self.data
        return {"data": self.data, "status": self.status}


@dataclass(frozen=True, slots=True)
class Message:
    """Payload shape for responses that only carry a message."""

    message: str


def ok(data: Any = None) -> ApiResponse:
    return ApiResponse(data, 200)


def accepted() -> ApiResponse:
    return ApiResponse(None, 202, enveloped=False)


def no_content() -> ApiResponse:
    return ApiResponse(None, 204, enveloped=False)


def bad_request(message: str = "Invalid request") -> ApiResponse:
    return ApiResponse(message, 400)


def not_authorized() -> ApiResponse:
    return ApiResponse("Not authorized", 403)


def not_found(message: str | None = None) -> ApiResponse:
    """404 envelope. ``data`` is ``{"message": ...}`` when a message is given."""
    return ApiResponse(Message(message) if message is not None else None, 404)


def internal_server_error() -> ApiResponse:
    return ApiResponse("Internal Server Error", 500)


def error_response(error: BaseException | str, status: int = 500) -> ApiResponse:
    """Envelope carrying a stringified description of *error*."""
    return ApiResponse(Message(str(error)), status)


def _default(value: Any) -> Any:
    """``json.dumps`` hook for the value types wren handlers commonly return."""
    if isinstance(value, ApiResponse):
        return value.body
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def encode_json(payload: Any) -> bytes:
    """Serialize *payload* to compact UTF-8 JSON.

    Raises ``TypeError`` or ``ValueError`` for values that cannot be
    encoded; sinks turn that into their transport's failure path.
    """
    text = json_module.dumps(
        payload,
        default=_default,
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
    )
    return text.encode("utf-8")
