"""Time-bounded in-memory caching."""

from .memory import CacheEntry, MemoryCache

__all__ = ["CacheEntry", "MemoryCache"]
