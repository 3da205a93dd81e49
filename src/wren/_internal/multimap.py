"""MultiValueMapping protocol — shared interface for HeaderList and QueryParams.

A structural protocol so middleware and utilities can accept any
multi-valued lookup without coupling to the concrete type.
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueMapping(Protocol):
    """A string lookup where keys can have multiple values.

    ``get`` returns the first value for a key.
    ``get_list`` returns all values for a key.
    """

    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...
