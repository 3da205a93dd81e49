"""Wren exception hierarchy.

Shared across Router, sinks, dependency scopes, and the task scheduler so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when the application is wired incorrectly.

    Surfaces at registration time, before any request is served.
    """


# -- Route templates --


class MalformedPattern(ConfigurationError):
    """A route template could not be compiled.

    Raised by ``compile_pattern()`` and therefore by ``router.get()`` and
    friends. Not meant to be caught per request: it should abort startup.
    """


class CloseUnopened(MalformedPattern):
    """A ``}`` appeared without a matching ``{``."""

    def __init__(self) -> None:
        super().__init__("Closing '}' without an opening '{'")


class DoubleOpen(MalformedPattern):
    """A ``{`` appeared inside a variable that was not yet closed."""

    def __init__(self) -> None:
        super().__init__("Variable opened twice with '{'")


class UnterminatedVariable(MalformedPattern):
    """The pattern ended while a variable was still open."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Variable {name!r} is never closed")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnterminatedVariable):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((UnterminatedVariable, self.name))


# -- Per-request failures --


@dataclass(frozen=True, slots=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware. The router catches it and answers with an
    error envelope carrying ``status``.
    """

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — the requested resource does not exist."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class CouldNotDeserializeRequest(WrenError):
    """The request body was missing or was not valid JSON.

    The router answers these with a 400.
    """

    def __init__(self, detail: str = "Could not deserialize request") -> None:
        super().__init__(detail)


class InvalidRequest(WrenError):
    """A transport could not build a ``Request`` from what it received."""


class UnknownMethod(InvalidRequest):
    """The inbound HTTP method is not one wren understands."""

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Unknown method {method!r}")


class InvalidRequestURL(InvalidRequest):
    """The inbound request target could not be turned into a URL."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Could not determine URL from {target!r}")


# -- Responses --


class ResponseAlreadySent(WrenError):
    """A sink was asked to send a second terminal response.

    This is a programming error, never a recoverable condition.
    """

    def __init__(self) -> None:
        super().__init__("Can't send response twice")


# -- Dependencies --


class MissingDependency(WrenError, LookupError):
    """``resolve_required()`` found no binding for the requested type."""

    def __init__(self, annotation: object) -> None:
        self.annotation = annotation
        name = getattr(annotation, "__qualname__", repr(annotation))
        super().__init__(f"Could not resolve required instance {name}")


# -- Background tasks --


class InvalidStateForNewTasks(WrenError):
    """The scheduler no longer accepts tasks (shutdown was requested)."""

    def __init__(self) -> None:
        super().__init__("Lifecycle state does not support adding new tasks.")
