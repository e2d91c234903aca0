"""Key/value caches selected by driver name.

``AppConfig.cache_driver`` picks the backend::

    memory   per-process dict with TTL expiry (default)
    file     one JSON file per key under a directory
    null     stores nothing; every ``get`` misses

The inspection page round-trips a value through the configured backend
to show whether the cache actually works.
"""

from stackpeek.cache.backends import Cache, FileCache, MemoryCache, NullCache, create_cache

__all__ = ["Cache", "FileCache", "MemoryCache", "NullCache", "create_cache"]
