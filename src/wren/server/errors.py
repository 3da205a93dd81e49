"""Error mapping for failures raised inside the middleware chain.

Turns an exception caught by the router into the ``ApiResponse`` the
client receives:

- ``CouldNotDeserializeRequest`` -> 400
- ``HTTPError`` -> its own status
- anything else -> 500 carrying ``str(exc)``
"""

import logging

from wren.errors import CouldNotDeserializeRequest, HTTPError
from wren.http.request import Request
from wren.http.response import ApiResponse, error_response

logger = logging.getLogger("wren.server")


def response_for_error(
    exc: Exception,
    request: Request,
    *,
    logger: logging.Logger = logger,
) -> ApiResponse:
    """Map *exc* to an error envelope, logging at a level that fits it."""
    if isinstance(exc, CouldNotDeserializeRequest):
        logger.info("400 %s %s: %s", request.method.value, request.path, exc)
        return error_response(exc, status=400)

    if isinstance(exc, HTTPError):
        logger.debug("%d %s %s: %s", exc.status, request.method.value, request.path, exc.detail)
        return error_response(exc.detail or f"Error {exc.status}", status=exc.status)

    logger.error(
        "500 %s %s: %s", request.method.value, request.path, exc, exc_info=exc
    )
    return error_response(exc)
