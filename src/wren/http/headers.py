"""Ordered, case-insensitive HTTP header list.

Implements the ``MultiValueMapping`` protocol. Unlike a mapping, the list
keeps every (name, value) pair in arrival order; lookups return the first
match and ``set`` replaces every prior entry for the name.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class HeaderPair:
    """A single header. The value is trimmed of surrounding whitespace."""

    name: str
    value: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value.strip())


class HeaderList:
    """Ordered multimap of HTTP headers with case-insensitive names.

    ``get`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. multiple ``Set-Cookie``).
    ``set`` removes all prior entries for the name before appending.
    """

    __slots__ = ("_pairs",)

    def __init__(self, pairs: Iterable[tuple[str, str] | HeaderPair] = ()) -> None:
        self._pairs: list[HeaderPair] = []
        for pair in pairs:
            if isinstance(pair, HeaderPair):
                self._pairs.append(pair)
            else:
                name, value = pair
                self._pairs.append(HeaderPair(name, value))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(pair.name.lower() == key_lower for pair in self._pairs)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for pair in self._pairs:
            key = pair.name.lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderList):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        items = ", ".join(f"{p.name!r}: {p.value!r}" for p in self._pairs)
        return f"HeaderList([{items}])"

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the first value for *key*, or *default* if missing."""
        key_lower = key.lower()
        for pair in self._pairs:
            if pair.name.lower() == key_lower:
                return pair.value
        return default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*, in arrival order."""
        key_lower = key.lower()
        return [pair.value for pair in self._pairs if pair.name.lower() == key_lower]

    def append(self, name: str, value: str) -> None:
        """Add a header without touching existing entries."""
        self._pairs.append(HeaderPair(name, value))

    def set(self, name: str, value: str | None) -> None:
        """Replace every entry for *name* with a single one.

        Passing ``None`` only removes the existing entries.
        """
        self.remove(name)
        if value is not None:
            self._pairs.append(HeaderPair(name, value))

    def remove(self, name: str) -> None:
        """Drop every entry for *name*."""
        key_lower = name.lower()
        self._pairs = [pair for pair in self._pairs if pair.name.lower() != key_lower]

    def items(self) -> list[tuple[str, str]]:
        """All (name, value) pairs in order, names as given."""
        return [(pair.name, pair.value) for pair in self._pairs]

    def copy(self) -> HeaderList:
        """An independent list with the same pairs."""
        return HeaderList(self._pairs)

    def frozen(self) -> FrozenHeaderList:
        """A read-only snapshot of this list."""
        return FrozenHeaderList(self._pairs)


class FrozenHeaderList(HeaderList):
    """A ``HeaderList`` that rejects mutation. ``copy()`` is mutable again."""

    __slots__ = ()

    def append(self, name: str, value: str) -> None:
        raise TypeError("Header list is read-only")

    def set(self, name: str, value: str | None) -> None:
        raise TypeError("Header list is read-only")

    def remove(self, name: str) -> None:
        raise TypeError("Header list is read-only")

    def frozen(self) -> FrozenHeaderList:
        return self
