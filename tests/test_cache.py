"""Tests for wren.cache — LRU memory cache, namespaces, expiry, no-op cache."""

import pytest

from wren.cache import Cache, MemoryCache, NoopCache


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1_000

    def __call__(self) -> int:
        return self.now


class TestMemoryCache:
    async def test_put_get(self) -> None:
        cache = MemoryCache()
        await cache.put(b"value", "key")
        assert await cache.get("key") == b"value"

    async def test_miss(self) -> None:
        assert await MemoryCache().get("missing") is None

    async def test_clear(self) -> None:
        cache = MemoryCache()
        await cache.put(b"value", "key")
        await cache.clear("key")
        assert await cache.get("key") is None
        await cache.clear("never-there")

    async def test_default_capacity(self) -> None:
        assert MemoryCache().capacity == 10

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            MemoryCache(capacity=0)

    async def test_evicts_least_recently_used(self) -> None:
        cache = MemoryCache(capacity=2)
        await cache.put(b"a", "a")
        await cache.put(b"b", "b")
        await cache.get("a")
        await cache.put(b"c", "c")

        assert await cache.get("b") is None
        assert await cache.get("a") == b"a"
        assert await cache.get("c") == b"c"
        assert len(cache) == 2

    async def test_overwrite_refreshes_recency(self) -> None:
        cache = MemoryCache(capacity=2)
        await cache.put(b"a", "a")
        await cache.put(b"b", "b")
        await cache.put(b"a2", "a")
        await cache.put(b"c", "c")

        assert await cache.get("a") == b"a2"
        assert await cache.get("b") is None

    async def test_expiry(self) -> None:
        clock = _FakeClock()
        cache = MemoryCache(clock=clock)
        await cache.put(b"v", "k", expires_in=500)

        clock.now += 499
        assert await cache.get("k") == b"v"
        clock.now += 1
        assert await cache.get("k") is None
        assert len(cache) == 0

    async def test_no_expiry_by_default(self) -> None:
        clock = _FakeClock()
        cache = MemoryCache(clock=clock)
        await cache.put(b"v", "k")
        clock.now += 10**9
        assert await cache.get("k") == b"v"


class TestNamespaces:
    async def test_namespaces_are_isolated(self) -> None:
        cache = MemoryCache()
        users = cache.namespaced("users")
        await users.put(b"u", "1")
        await cache.put(b"r", "1")

        assert await users.get("1") == b"u"
        assert await cache.get("1") == b"r"

    async def test_namespaced_key_layout(self) -> None:
        cache = MemoryCache()
        await cache.namespaced("users").put(b"u", "1")
        assert await cache.get("users.1") == b"u"

    async def test_nested_namespaces(self) -> None:
        cache = MemoryCache()
        await cache.namespaced("a").namespaced("b").put(b"x", "k")
        assert await cache.namespaced("a").get("b.k") == b"x"

    async def test_namespaces_share_capacity(self) -> None:
        cache = MemoryCache(capacity=2)
        await cache.namespaced("one").put(b"1", "k")
        await cache.namespaced("two").put(b"2", "k")
        await cache.namespaced("three").put(b"3", "k")

        assert len(cache) == 2
        assert await cache.namespaced("one").get("k") is None

    def test_repr(self) -> None:
        assert "root.users" in repr(MemoryCache().namespaced("users"))


class TestNoopCache:
    async def test_always_misses(self) -> None:
        cache = NoopCache()
        await cache.put(b"v", "k")
        assert await cache.get("k") is None
        assert cache.namespaced("x") is cache
        await cache.clear("k")


class TestProtocol:
    def test_implementations_satisfy_protocol(self) -> None:
        assert isinstance(MemoryCache(), Cache)
        assert isinstance(NoopCache(), Cache)
