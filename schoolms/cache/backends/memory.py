import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from schoolms.cache.backends.base import (
    BaseCacheBackend,
    CacheEntry,
    leading_tag,
    validate_ttl,
)
from schoolms.common.exceptions import CacheBackendError
from schoolms.logging.setup import get_logger

logger = get_logger(__name__)


class MemoryBackend(BaseCacheBackend):
    """
    In-memory cache backend.
    Useful cho development và single-server deployments.

    Capacity is a budget of size units (each entry costs ``size_units``, 1 by
    default). When the budget is exceeded, expired entries go first and then the
    least recently used ones.

    Every key is indexed under its entity-type tag (see ``leading_tag``) plus any
    explicit tags given to ``set``, so prefix and tag removal are lookups over the
    index instead of scans of the whole store.
    """

    backend_type = "memory"

    def __init__(
        self,
        max_size: int = 1024,
        default_ttl: float = 600,
        cleanup_interval: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Khởi tạo memory cache backend.

        Args:
            max_size: Size budget, in size units
            default_ttl: TTL used when ``set`` is called without one
            cleanup_interval: Seconds between background purges of expired
                entries; no background thread when None
            clock: Time source returning seconds
        """
        if max_size <= 0:
            raise CacheBackendError("max_size must be positive", backend="memory")

        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._tag_index: Dict[str, Set[str]] = {}
        self._max_size = max_size
        self._used = 0
        self._default_ttl = default_ttl
        self._clock = clock
        self._lock = threading.RLock()
        self._evictions = 0
        self._expirations = 0

        self._stop_event = threading.Event()
        self._cleanup_thread: Optional[threading.Thread] = None
        if cleanup_interval:
            self._start_cleanup_task(cleanup_interval)

    def _start_cleanup_task(self, interval: float) -> None:
        """Start periodic cleanup thread to remove expired items."""

        def cleanup():
            while not self._stop_event.wait(interval):
                removed = self.purge_expired()
                if removed:
                    logger.debug(f"Purged {removed} expired cache entries")

        self._cleanup_thread = threading.Thread(
            target=cleanup, name="memory-cache-cleanup", daemon=True
        )
        self._cleanup_thread.start()

    # Internal helpers, caller holds the lock

    def _index(self, entry: CacheEntry) -> None:
        for tag in entry.tags:
            self._tag_index.setdefault(tag, set()).add(entry.key)

    def _remove_key(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False

        self._used -= entry.size_units
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._tag_index[tag]
        return True

    def _purge_expired_locked(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            self._remove_key(key)
        self._expirations += len(expired)
        return len(expired)

    def _make_room(self, units: int, now: float) -> None:
        if self._used + units <= self._max_size:
            return

        self._purge_expired_locked(now)

        while self._entries and self._used + units > self._max_size:
            oldest_key = next(iter(self._entries))
            self._remove_key(oldest_key)
            self._evictions += 1

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._remove_key(key)
            self._expirations += 1
            return None
        return entry

    # Public API

    async def get(self, key: str, default: Any = None) -> Any:
        """
        Get value from cache.

        Args:
            key: Cache key
            default: Default value if key not found or expired

        Returns:
            Cached value or default
        """
        try:
            with self._lock:
                entry = self._live_entry(key)
                if entry is None:
                    return default
                self._entries.move_to_end(key)
                return entry.value
        except Exception as e:
            logger.error(f"Error reading memory cache key '{key}': {str(e)}")
            return default

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[float] = None,
        tags: Optional[Iterable[str]] = None,
        size_units: int = 1,
    ) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds, must be positive
            tags: Extra tags for grouped invalidation
            size_units: Cost of the entry against the size budget

        Returns:
            False when the entry alone exceeds the whole budget, True otherwise
        """
        ttl = self._default_ttl if ttl is None else ttl
        validate_ttl(key, ttl)
        if size_units < 1:
            raise CacheBackendError("size_units must be at least 1", key=key)

        if size_units > self._max_size:
            logger.warning(
                f"Cache entry '{key}' ({size_units} units) exceeds the budget "
                f"of {self._max_size} units, not cached"
            )
            return False

        with self._lock:
            now = self._clock()
            entry = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                expires_at=now + ttl,
                size_units=size_units,
                tags=frozenset(tags or ()) | {leading_tag(key)},
            )

            # Entries are never mutated in place
            self._remove_key(key)
            self._make_room(size_units, now)

            self._entries[key] = entry
            self._used += size_units
            self._index(entry)
            return True

    async def delete(self, key: str) -> bool:
        """
        Delete value from cache.

        Args:
            key: Cache key

        Returns:
            Whether key was deleted
        """
        with self._lock:
            return self._remove_key(key)

    async def remove_by_prefix(self, prefix: str) -> int:
        """
        Remove every indexed key starting with ``prefix``.

        Candidate keys come from the tags that overlap the prefix (the entity tag
        ``student`` covers ``student_4_``; ``student_4_grade_list`` is covered by
        ``student_4_``), then each candidate is matched against the prefix.

        Args:
            prefix: Key prefix, without a trailing wildcard

        Returns:
            Number of keys deleted
        """
        with self._lock:
            candidates: Set[str] = set()
            for tag, keys in self._tag_index.items():
                if tag.startswith(prefix) or prefix.startswith(tag):
                    candidates.update(keys)

            removed = 0
            for key in candidates:
                if key.startswith(prefix) and self._remove_key(key):
                    removed += 1
            return removed

    async def invalidate_by_tags(self, tags: List[str]) -> int:
        """
        Invalidate cache by tags.

        Args:
            tags: List of tags

        Returns:
            Number of keys deleted
        """
        with self._lock:
            keys_to_delete: Set[str] = set()
            for tag in tags or ():
                keys_to_delete.update(self._tag_index.get(tag, ()))

            return sum(1 for key in keys_to_delete if self._remove_key(key))

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    async def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._tag_index.clear()
            self._used = 0
            return count

    def purge_expired(self) -> int:
        """
        Physically drop expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._purge_expired_locked(self._clock())

    async def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "backend": self.backend_type,
                "entries": len(self._entries),
                "size_units": self._used,
                "max_size": self._max_size,
                "tags": len(self._tag_index),
                "evictions": self._evictions,
                "expirations": self._expirations,
            }

    async def close(self) -> None:
        self._stop_event.set()
        if self._cleanup_thread is not None:
            self._cleanup_thread.join(timeout=1)
            self._cleanup_thread = None
