"""Byte caches: an explicit LRU memory cache and a no-op stand-in."""

from wren.cache.memory import MemoryCache
from wren.cache.noop import NoopCache
from wren.cache.protocol import Cache

__all__ = ["Cache", "MemoryCache", "NoopCache"]
