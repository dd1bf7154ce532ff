"""
Process-local result cache.

Entries expire after a fixed lifetime (cachetools.TTLCache); keys are tuples
so distinct parameter sets never collide. A lock guards the underlying cache,
which is not thread-safe; concurrent writers simply overwrite each other.
"""

from cachetools import TTLCache
from threading import Lock
from typing import Any, Callable, Hashable, Tuple
import logging
import time

from realestate.config import settings

logger = logging.getLogger(__name__)

_MISSING = object()

# Cache namespaces
PROPERTY = "property"
OWNER = "owner"
IMAGE = "image"
TRACE = "trace"
USER = "user"


def entity_key(namespace: str, entity_id: Any) -> Tuple[str, str, str]:
    """Cache key for a single entity looked up by id."""
    return (namespace, "id", str(entity_id))


def alternate_key(namespace: str, field: str, value: Any) -> Tuple[str, str, str]:
    """Cache key for a single entity looked up by another unique field."""
    return (namespace, field, str(value))


def list_key(namespace: str, filter_key: Hashable, page: int, limit: int) -> Tuple:
    """Cache key for one page of a filtered list."""
    return (namespace, "list", filter_key, page, limit)


class ResultCache:
    """Thread-safe TTL cache for query results."""

    def __init__(
        self,
        ttl_seconds: float,
        maxsize: int = 1024,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        self._lock = Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        with self._lock:
            value = self._cache.get(key, _MISSING)
        if value is _MISSING:
            logger.debug(f"Cache miss: {key}")
            return default
        logger.debug(f"Cache hit: {key}")
        return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def invalidate(self, *keys: Hashable) -> None:
        with self._lock:
            for key in keys:
                self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)


result_cache = ResultCache(settings.cache_ttl_seconds, settings.cache_max_entries)


def get_result_cache() -> ResultCache:
    """Dependency returning the process-wide cache."""
    return result_cache