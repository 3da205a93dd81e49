"""Cache implementation that stores nothing."""

from __future__ import annotations


class NoopCache:
    """Every ``get`` misses. Useful to switch caching off without code changes."""

    __slots__ = ()

    def namespaced(self, namespace: str) -> NoopCache:  # noqa: ARG002
        return self

    async def get(self, key: str) -> bytes | None:  # noqa: ARG002
        return None

    async def put(self, value: bytes, key: str, expires_in: int | None = None) -> None:  # noqa: ARG002
        return None

    async def clear(self, key: str) -> None:  # noqa: ARG002
        return None
