"""One-shot completion slot.

A ``Completion`` is settled exactly once, with either a value or an
exception. Awaiting ``wait()`` yields the value or raises the exception;
settling twice raises ``RuntimeError``. Built on ``anyio.Event`` so it
works under any anyio backend.
"""

from typing import Generic, TypeVar

import anyio

T = TypeVar("T")


class Completion(Generic[T]):
    """A value-or-error slot that is filled exactly once.

    Usage::

        slot: Completion[dict] = Completion()
        slot.succeed({"statusCode": 200})
        result = await slot.wait()
    """

    __slots__ = ("_error", "_event", "_value")

    def __init__(self) -> None:
        self._event = anyio.Event()
        self._value: T | None = None
        self._error: BaseException | None = None

    @property
    def done(self) -> bool:
        """True once a value or an error has been delivered."""
        return self._event.is_set()

    def succeed(self, value: T) -> None:
        """Deliver the value. Raises ``RuntimeError`` if already settled."""
        self._check_unsettled()
        self._value = value
        self._event.set()

    def fail(self, error: BaseException) -> None:
        """Deliver an error. Raises ``RuntimeError`` if already settled."""
        self._check_unsettled()
        self._error = error
        self._event.set()

    async def wait(self) -> T:
        """Wait until settled; return the value or raise the error."""
        await self._event.wait()
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def _check_unsettled(self) -> None:
        if self._event.is_set():
            msg = "Completion has already been settled"
            raise RuntimeError(msg)
