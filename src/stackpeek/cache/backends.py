"""Cache backends: memory, file and null."""

import hashlib
import json
import tempfile
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from cachetools import TLRUCache

from stackpeek.errors import CacheError, ConfigurationError


class Cache(Protocol):
    """Minimal cache interface: put with a TTL, get, forget."""

    driver: str

    def put(self, key: str, value: Any, ttl: float) -> None: ...

    def get(self, key: str, default: Any = None) -> Any: ...

    def forget(self, key: str) -> None: ...


class MemoryCache:
    """Per-process cache on a ``cachetools.TLRUCache``.

    Each entry expires after its own TTL. When ``max_items`` is reached
    the least recently used live entry is evicted. cachetools caches are
    not thread-safe, so every access holds a lock.
    """

    driver = "memory"

    def __init__(
        self,
        max_items: int = 512,
        *,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._data: TLRUCache[str, tuple[float, Any]] = TLRUCache(
            maxsize=int(max_items), ttu=_expires_at, timer=timer
        )
        self._lock = threading.Lock()

    def put(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._data[key] = (float(ttl), value)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            entry = self._data.get(key)
        return default if entry is None else entry[1]

    def forget(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            self._data.expire()
            return len(self._data)


def _expires_at(key: str, entry: tuple[float, Any], now: float) -> float:
    return now + entry[0]


class FileCache:
    """One JSON document per key, named by the key's SHA-1."""

    driver = "file"

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    def _path(self, key: str) -> Path:
        return self._dir / (hashlib.sha1(key.encode("utf-8")).hexdigest() + ".json")

    def put(self, key: str, value: Any, ttl: float) -> None:
        payload = {"expires": time.time() + float(ttl), "value": value}
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            self._path(key).write_text(json.dumps(payload), encoding="utf-8")
        except (OSError, TypeError) as exc:
            msg = f"Cannot write cache entry {key!r} under {self._dir}: {exc}"
            raise CacheError(msg) from exc

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return default
        except (OSError, ValueError) as exc:
            msg = f"Cannot read cache entry {key!r} under {self._dir}: {exc}"
            raise CacheError(msg) from exc
        if time.time() >= payload.get("expires", 0):
            path.unlink(missing_ok=True)
            return default
        return payload.get("value", default)

    def forget(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class NullCache:
    """Accepts writes and forgets them immediately."""

    driver = "null"

    def put(self, key: str, value: Any, ttl: float) -> None:
        return None

    def get(self, key: str, default: Any = None) -> Any:
        return default

    def forget(self, key: str) -> None:
        return None


def create_cache(driver: str, *, directory: str | Path | None = None) -> Cache:
    """Build the backend named by *driver*.

    ``file`` stores under *directory*, defaulting to a ``stackpeek-cache``
    folder in the system temp directory.
    """
    if driver == "memory":
        return MemoryCache()
    if driver == "file":
        return FileCache(directory or Path(tempfile.gettempdir()) / "stackpeek-cache")
    if driver == "null":
        return NullCache()
    msg = f"Unknown cache driver {driver!r}. Supported: memory, file, null"
    raise ConfigurationError(msg)
