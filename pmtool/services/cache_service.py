# File: pmtool/services/cache_service.py

"""
Caching service for PMTool.

Query results (project lists and single projects) are cached in process
memory with a time-to-live and least-recently-used eviction. Keys are
namespaced so a whole family of entries can be invalidated by prefix.

Values should be plain data (dicts / lists), never ORM instances, since the
cache outlives the session that loaded them.
"""

from typing import Dict, Any, Optional, Callable, TypeVar
import logging
import threading
import time

from pmtool.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheEntry:
    """Represents a cached item with metadata."""

    def __init__(self, key: str, value: Any, ttl: Optional[int] = None):
        """
        Initialize cache entry.

        Args:
            key: Cache key
            value: Cached value
            ttl: Time to live in seconds (None for no expiration)
        """
        self.key = key
        self.value = value
        self.created_at = time.time()
        self.expires_at = self.created_at + ttl if ttl is not None else None
        self.access_count = 0
        self.last_accessed = self.created_at

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.time() > self.expires_at

    def touch(self) -> None:
        """Update last accessed time and access count."""
        self.last_accessed = time.time()
        self.access_count += 1


class MemoryCache:
    """Thread-safe in-memory cache with TTL and LRU eviction."""

    def __init__(self, max_size: int = 1000):
        """
        Initialize memory cache.

        Args:
            max_size: Maximum number of items in cache
        """
        self.cache: Dict[str, CacheEntry] = {}
        self.max_size = max_size
        self._lock = threading.RLock()
        self.stats = {
            "hits": 0,
            "misses": 0,
            "sets": 0,
            "evictions": 0,
            "expirations": 0,
            "invalidations": 0,
        }

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found or expired
        """
        with self._lock:
            entry = self.cache.get(key)

            if entry is None:
                self.stats["misses"] += 1
                return None

            if entry.is_expired:
                self.stats["expirations"] += 1
                self.stats["misses"] += 1
                del self.cache[key]
                return None

            entry.touch()
            self.stats["hits"] += 1
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        with self._lock:
            if len(self.cache) >= self.max_size and key not in self.cache:
                self._evict_lru_item()

            self.cache[key] = CacheEntry(key, value, ttl)
            self.stats["sets"] += 1
            return True

    def delete(self, key: str) -> bool:
        """
        Delete key from cache.

        Returns:
            True if key was in cache and deleted
        """
        with self._lock:
            if key in self.cache:
                del self.cache[key]
                self.stats["invalidations"] += 1
                return True
            return False

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix. Returns the number removed."""
        with self._lock:
            keys_to_delete = [key for key in self.cache if key.startswith(prefix)]
            for key in keys_to_delete:
                del self.cache[key]
            self.stats["invalidations"] += len(keys_to_delete)
            return len(keys_to_delete)

    def exists(self, key: str) -> bool:
        with self._lock:
            entry = self.cache.get(key)
            if entry is None:
                return False
            if entry.is_expired:
                del self.cache[key]
                self.stats["expirations"] += 1
                return False
            return True

    def clear(self) -> bool:
        with self._lock:
            self.cache.clear()
            return True

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary of cache statistics
        """
        with self._lock:
            total_requests = self.stats["hits"] + self.stats["misses"]
            hit_rate = self.stats["hits"] / total_requests if total_requests > 0 else 0

            return {
                "backend": "memory",
                "size": len(self.cache),
                "max_size": self.max_size,
                "hit_rate": hit_rate,
                "stats": dict(self.stats),
                "expired_keys": sum(1 for entry in self.cache.values() if entry.is_expired),
            }

    def _evict_lru_item(self) -> bool:
        """
        Evict least recently used item.

        Returns:
            True if an item was evicted
        """
        if not self.cache:
            return False

        lru_key = min(self.cache.items(), key=lambda x: x[1].last_accessed)[0]
        del self.cache[lru_key]
        self.stats["evictions"] += 1
        return True

class CacheService:
    """
    Namespaced cache facade used by the services.

    A TTL of 0 disables caching: nothing is stored and every read misses.
    """

    def __init__(
        self,
        namespace: str = "pmtool",
        default_ttl: Optional[int] = None,
        max_size: Optional[int] = None,
    ):
        self.namespace = namespace
        self.default_ttl = settings.CACHE_TTL_SECONDS if default_ttl is None else default_ttl
        self.backend = MemoryCache(
            max_size=settings.CACHE_MAX_SIZE if max_size is None else max_size
        )
        logger.info(f"Cache service initialized with memory backend (ttl={self.default_ttl}s)")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get value from cache.

        Args:
            key: Cache key
            default: Default value if key not found

        Returns:
            Cached value or default
        """
        value = self.backend.get(self._format_key(key))
        return default if value is None else value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (None for default)

        Returns:
            True if set successfully
        """
        if ttl is None:
            ttl = self.default_ttl
        if ttl <= 0:
            return False
        return self.backend.set(self._format_key(key), value, ttl)

    def invalidate(self, key: str) -> bool:
        """
        Invalidate a cache key.

        Returns:
            True if key was in cache and invalidated
        """
        return self.backend.delete(self._format_key(key))

    def invalidate_pattern(self, pattern: str) -> int:
        """
        Invalidate all keys starting with the given prefix.

        Returns:
            Number of keys invalidated
        """
        return self.backend.delete_prefix(self._format_key(pattern))

    def get_or_set(
        self, key: str, getter_func: Callable[[], T], ttl: Optional[int] = None
    ) -> T:
        """
        Get value from cache or compute and store it if not present.

        Args:
            key: Cache key
            getter_func: Function to call to get value if not in cache
            ttl: Time to live in seconds (None for default)

        Returns:
            Cached value or newly computed value
        """
        value = self.get(key)
        if value is not None:
            return value

        value = getter_func()
        if value is not None:
            self.set(key, value, ttl)
        return value

    def exists(self, key: str) -> bool:
        return self.backend.exists(self._format_key(key))

    def get_stats(self) -> Dict[str, Any]:
        return self.backend.get_stats()

    def clear(self) -> bool:
        """Clear all cached items."""
        return self.backend.clear()

    def _format_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"
