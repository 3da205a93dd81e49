"""In-process cache with an explicit eviction policy.

Entries are kept in least-recently-used order in a bounded map. When a
``put`` would exceed ``capacity``, the least recently used entry is
evicted. Entries may also carry an absolute expiry timestamp; an expired
entry is a miss and is dropped when it is looked up.

Namespaces share the same storage and the same capacity. A namespaced
view only prefixes its keys (``root.users.42``)::

    cache = MemoryCache(capacity=100)
    users = cache.namespaced("users")
    await users.put(b"...", "42", expires_in=60_000)
    await users.get("42")
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass

DEFAULT_CAPACITY = 10


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


@dataclass(frozen=True, slots=True)
class _Entry:
    data: bytes
    expires_at: int | None


class _Store:
    """The bounded LRU map shared by a cache and all its namespaced views."""

    __slots__ = ("capacity", "entries", "lock")

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            msg = f"Cache capacity must be at least 1, got {capacity}"
            raise ValueError(msg)
        self.capacity = capacity
        self.entries: OrderedDict[str, _Entry] = OrderedDict()
        self.lock = threading.Lock()


class MemoryCache:
    """Bounded LRU byte cache with millisecond expiry.

    Args:
        capacity: Maximum number of entries across all namespaces.
        clock: Returns the current time in milliseconds. Defaults to a
            monotonic clock; tests pass their own.
    """

    __slots__ = ("_clock", "_logger", "_namespace", "_store")

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        *,
        clock: Callable[[], int] = _now_ms,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = _Store(capacity)
        self._clock = clock
        self._namespace = "root"
        self._logger = logger or logging.getLogger("wren.cache")

    def __repr__(self) -> str:
        return f"<MemoryCache {self._namespace!r} {len(self)}/{self.capacity}>"

    def __len__(self) -> int:
        return len(self._store.entries)

    @property
    def capacity(self) -> int:
        return self._store.capacity

    def namespaced(self, namespace: str) -> MemoryCache:
        """A view on the same storage whose keys live under *namespace*."""
        view = object.__new__(MemoryCache)
        view._store = self._store
        view._clock = self._clock
        view._logger = self._logger
        view._namespace = f"{self._namespace}.{namespace}"
        return view

    async def get(self, key: str) -> bytes | None:
        real_key = self._make_key(key)
        store = self._store
        with store.lock:
            entry = store.entries.get(real_key)
            if entry is None:
                return None
            if entry.expires_at is not None and entry.expires_at <= self._clock():
                self._logger.debug("Found expired result for key %s", real_key)
                del store.entries[real_key]
                return None
            store.entries.move_to_end(real_key)
        self._logger.debug("Found result for key %s", real_key)
        return entry.data

    async def put(self, value: bytes, key: str, expires_in: int | None = None) -> None:
        real_key = self._make_key(key)
        expires_at = self._clock() + expires_in if expires_in is not None else None
        store = self._store
        with store.lock:
            store.entries[real_key] = _Entry(value, expires_at)
            store.entries.move_to_end(real_key)
            while len(store.entries) > store.capacity:
                evicted, _ = store.entries.popitem(last=False)
                self._logger.debug("Evicted least recently used key %s", evicted)

    async def clear(self, key: str) -> None:
        real_key = self._make_key(key)
        with self._store.lock:
            self._store.entries.pop(real_key, None)

    def _make_key(self, key: str) -> str:
        return f"{self._namespace}.{key}"
