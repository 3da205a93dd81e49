"""Cache protocol shared by every cache implementation."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Cache(Protocol):
    """An async byte cache with optional per-entry expiry.

    ``expires_in`` is in milliseconds; ``None`` means the entry only leaves
    the cache through ``clear`` or eviction.
    """

    def namespaced(self, namespace: str) -> Cache: ...

    async def get(self, key: str) -> bytes | None: ...

    async def put(self, value: bytes, key: str, expires_in: int | None = None) -> None: ...

    async def clear(self, key: str) -> None: ...
