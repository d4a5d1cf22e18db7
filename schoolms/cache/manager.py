import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar, Union

from schoolms.cache.backends.base import BaseCacheBackend
from schoolms.cache.keys import CacheKey
from schoolms.logging.setup import get_logger
from schoolms.monitoring.metrics import CacheMetrics, metrics as default_metrics

logger = get_logger(__name__)

T = TypeVar("T")
KeyLike = Union[CacheKey, str]


def _unpack(key: KeyLike):
    if isinstance(key, CacheKey):
        return key.render(), key.tags
    return key, frozenset()


class CacheManager:
    """
    Quản lý cache trung tâm.

    Wraps one backend with fail-open semantics: a backend fault is logged and
    turned into a miss (reads) or a no-op (writes), never an exception for the
    caller. Exceptions raised by a ``get_or_create`` factory belong to the
    caller and propagate unchanged.
    """

    def __init__(
        self,
        backend: BaseCacheBackend,
        default_ttl: int = 600,
        single_flight: bool = False,
        metrics: Optional[CacheMetrics] = None,
    ):
        """
        Khởi tạo CacheManager.

        Args:
            backend: Cache backend instance
            default_ttl: Thời gian sống mặc định (giây)
            single_flight: Serialize concurrent misses on the same key so only
                one factory call populates it
            metrics: Metric sink, the process-wide one by default
        """
        self.backend = backend
        self.default_ttl = default_ttl
        self.single_flight = single_flight
        self.metrics = metrics or default_metrics

        self.hits = 0
        self.misses = 0
        self.errors = 0

        self._flight_locks: Dict[str, asyncio.Lock] = {}
        self._flight_waiters: Dict[str, int] = {}

    @property
    def cache_type(self) -> str:
        return getattr(self.backend, "backend_type", type(self.backend).__name__)

    def _record_error(self, operation: str, key: str, error: Exception) -> None:
        self.errors += 1
        self.metrics.track_cache_error(operation, self.cache_type)
        logger.error(f"Cache {operation} failed for key '{key}': {str(error)}")

    async def get_or_create(
        self,
        key: KeyLike,
        factory: Callable[[], Awaitable[Optional[T]]],
        ttl: Optional[int] = None,
    ) -> Optional[T]:
        """
        Read-through lookup.

        1. Return the cached value on hit, without calling ``factory``.
        2. On miss, await ``factory()`` exactly once.
        3. Cache a non-None result under ``key`` for ``ttl`` seconds.
        4. Return the factory result whether or not caching it succeeded.

        Concurrent misses on the same key each call the factory unless the
        manager was built with ``single_flight=True``.

        Args:
            key: CacheKey (rendered and indexed under its tags) or raw string
            factory: Zero-argument coroutine function producing the value
            ttl: Thời gian sống (giây), ``default_ttl`` when None

        Returns:
            Cached or freshly produced value
        """
        key_str, tags = _unpack(key)
        ttl = self.default_ttl if ttl is None else ttl

        if not self.single_flight:
            return await self._read_through(key_str, tags, factory, ttl)

        lock = self._flight_locks.get(key_str)
        if lock is None:
            lock = self._flight_locks[key_str] = asyncio.Lock()
        self._flight_waiters[key_str] = self._flight_waiters.get(key_str, 0) + 1
        try:
            async with lock:
                return await self._read_through(key_str, tags, factory, ttl)
        finally:
            self._flight_waiters[key_str] -= 1
            if not self._flight_waiters[key_str]:
                del self._flight_waiters[key_str]
                del self._flight_locks[key_str]

    async def _read_through(
        self,
        key: str,
        tags: Iterable[str],
        factory: Callable[[], Awaitable[Optional[T]]],
        ttl: int,
    ) -> Optional[T]:
        started = time.perf_counter()
        cached = await self._safe_get(key)
        hit = cached is not None
        self.metrics.track_cache_operation(
            "get", self.cache_type, hit, time.perf_counter() - started
        )

        if hit:
            self.hits += 1
            logger.debug(f"Cache hit: {key}")
            return cached

        self.misses += 1
        logger.debug(f"Cache miss: {key}")

        result = await factory()

        if result is not None:
            await self.set(key, result, ttl=ttl, tags=tags)

        return result

    async def _safe_get(self, key: str) -> Any:
        try:
            return await self.backend.get(key)
        except Exception as e:
            self._record_error("get", key, e)
            return None

    async def get(self, key: KeyLike, default: Any = None) -> Any:
        """
        Lấy giá trị từ cache.

        Args:
            key: Cache key
            default: Giá trị mặc định nếu không tìm thấy

        Returns:
            Giá trị từ cache hoặc giá trị mặc định
        """
        key_str, _ = _unpack(key)
        value = await self._safe_get(key_str)
        return default if value is None else value

    async def set(
        self,
        key: KeyLike,
        value: Any,
        ttl: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
        size_units: int = 1,
    ) -> bool:
        """
        Lưu giá trị vào cache.

        Args:
            key: Cache key; a CacheKey contributes its own tags
            value: Giá trị cần lưu
            ttl: Thời gian sống (giây)
            tags: Extra tags
            size_units: Cost against the backend size budget

        Returns:
            True nếu thành công
        """
        key_str, key_tags = _unpack(key)
        all_tags = set(key_tags) | set(tags or ())
        started = time.perf_counter()
        try:
            stored = await self.backend.set(
                key_str,
                value,
                ttl=self.default_ttl if ttl is None else ttl,
                tags=all_tags,
                size_units=size_units,
            )
        except Exception as e:
            self._record_error("set", key_str, e)
            return False

        self.metrics.track_cache_operation(
            "set", self.cache_type, False, time.perf_counter() - started
        )
        return bool(stored)

    async def delete(self, key: KeyLike) -> bool:
        key_str, _ = _unpack(key)
        try:
            return await self.backend.delete(key_str)
        except Exception as e:
            self._record_error("delete", key_str, e)
            return False

    async def exists(self, key: KeyLike) -> bool:
        key_str, _ = _unpack(key)
        try:
            return await self.backend.exists(key_str)
        except Exception as e:
            self._record_error("exists", key_str, e)
            return False

    async def remove_by_prefix(self, prefix: str) -> int:
        """
        Xóa tất cả keys bắt đầu bằng prefix.

        Returns:
            Số lượng keys đã xóa, 0 on backend failure
        """
        try:
            return await self.backend.remove_by_prefix(prefix)
        except Exception as e:
            self._record_error("remove_by_prefix", f"{prefix}*", e)
            return 0

    async def invalidate_by_tags(self, tags: List[str]) -> int:
        try:
            return await self.backend.invalidate_by_tags(tags)
        except Exception as e:
            self._record_error("invalidate_by_tags", ",".join(tags), e)
            return 0

    async def clear(self) -> int:
        try:
            count = await self.backend.clear()
        except Exception as e:
            self._record_error("clear", "*", e)
            return 0
        logger.info(f"Cleared {count} cache entries")
        return count

    async def stats(self) -> Dict[str, Any]:
        lookups = self.hits + self.misses
        try:
            backend_stats = await self.backend.stats()
        except Exception as e:
            self._record_error("stats", "-", e)
            backend_stats = {"backend": self.cache_type, "error": str(e)}

        return {
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "hit_ratio": round(self.hits / lookups, 4) if lookups else 0.0,
            "single_flight": self.single_flight,
            "backend": backend_stats,
        }
