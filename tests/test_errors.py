"""Tests for wren.errors — exception hierarchy and error messages."""

from wren.errors import (
    CloseUnopened,
    ConfigurationError,
    CouldNotDeserializeRequest,
    HTTPError,
    InvalidRequest,
    InvalidRequestURL,
    InvalidStateForNewTasks,
    MalformedPattern,
    MissingDependency,
    NotFound,
    ResponseAlreadySent,
    UnknownMethod,
    UnterminatedVariable,
    WrenError,
)


class TestHierarchy:
    def test_pattern_errors_are_configuration_errors(self) -> None:
        assert issubclass(MalformedPattern, ConfigurationError)
        assert issubclass(CloseUnopened, MalformedPattern)
        assert issubclass(ConfigurationError, WrenError)

    def test_request_errors(self) -> None:
        assert issubclass(UnknownMethod, InvalidRequest)
        assert issubclass(InvalidRequestURL, InvalidRequest)

    def test_not_found_is_http_error(self) -> None:
        assert issubclass(NotFound, HTTPError)
        assert issubclass(HTTPError, WrenError)


class TestMessages:
    def test_http_error_str(self) -> None:
        assert str(HTTPError(status=409, detail="conflict")) == "409: conflict"
        assert str(HTTPError(status=418)) == "418"

    def test_not_found(self) -> None:
        exc = NotFound()
        assert exc.status == 404
        assert exc.detail == "Not Found"

    def test_fixed_messages(self) -> None:
        assert str(ResponseAlreadySent()) == "Can't send response twice"
        assert str(InvalidStateForNewTasks()) == "Lifecycle state does not support adding new tasks."

    def test_unterminated_variable_equality(self) -> None:
        assert UnterminatedVariable("a") == UnterminatedVariable("a")
        assert UnterminatedVariable("a") != UnterminatedVariable("b")
        assert "'a'" in str(UnterminatedVariable("a"))

    def test_deserialize_default_message(self) -> None:
        assert str(CouldNotDeserializeRequest()) == "Could not deserialize request"

    def test_missing_dependency_names_type(self) -> None:
        class Widget:
            pass

        assert "Widget" in str(MissingDependency(Widget))
