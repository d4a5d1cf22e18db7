from typing import Any, Dict, Iterable, List, Optional

import redis.asyncio as redis

from schoolms.cache.backends.base import BaseCacheBackend, validate_ttl
from schoolms.cache.serializers import deserialize_value, serialize_value
from schoolms.logging.setup import get_logger

logger = get_logger(__name__)

_GLOB_SPECIAL = "\\*?[]"
_DELETE_BATCH = 500


def _escape_glob(value: str) -> str:
    return "".join(f"\\{ch}" if ch in _GLOB_SPECIAL else ch for ch in value)


def _text(value: Any) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisBackend(BaseCacheBackend):
    """
    Redis cache backend cho cache phân tán.

    Values are stored under ``{key_prefix}{key}`` with a native expiry. Tags are
    Redis sets kept outside the value namespace so a prefix scan never returns
    them; each tagged key also records its own tags under
    ``{key_prefix}-key-tags:{key}`` so every removal path can take the key out
    of its tag sets. Prefix removal uses ``SCAN MATCH`` and is best-effort while
    other clients write concurrently.
    """

    backend_type = "redis"

    # Tag sets larger than this drop members whose values already expired
    tag_prune_threshold = 1000

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        redis_host: str = "localhost",
        redis_port: int = 6379,
        redis_password: Optional[str] = None,
        redis_db: int = 0,
        key_prefix: str = "schoolms:",
        default_ttl: float = 600,
    ):
        """
        Khởi tạo Redis cache backend.

        Args:
            redis_client: Existing client; one is built from host/port otherwise
            redis_host: Redis host
            redis_port: Redis port
            redis_password: Redis password
            redis_db: Redis database
            key_prefix: Namespace for every value key
            default_ttl: TTL used when ``set`` is called without one
        """
        self.client = redis_client
        if self.client is None:
            self.client = redis.Redis(
                host=redis_host,
                port=redis_port,
                password=redis_password,
                db=redis_db,
            )

        namespace = key_prefix.rstrip(":")
        self.key_prefix = key_prefix
        self.tag_prefix = f"{namespace}-tags:"
        self.key_tags_prefix = f"{namespace}-key-tags:"
        self.default_ttl = default_ttl

    def _full_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _tag_key(self, tag: str) -> str:
        return f"{self.tag_prefix}{tag}"

    def _key_tags_key(self, key: str) -> str:
        return f"{self.key_tags_prefix}{key}"

    async def _untag(self, keys: Iterable[str]) -> None:
        """Take keys out of every tag set they were filed under."""
        for key in keys:
            reverse_key = self._key_tags_key(key)
            tags = await self.client.smembers(reverse_key)
            for tag in tags:
                await self.client.srem(self._tag_key(_text(tag)), key)
            if tags:
                await self.client.delete(reverse_key)

    async def _prune_tag(self, tag_key: str) -> int:
        """Drop members whose values are gone (expired without an explicit removal)."""
        pruned = 0
        for member in await self.client.smembers(tag_key):
            key = _text(member)
            if not await self.client.exists(self._full_key(key)):
                await self._untag([key])
                pruned += 1
        return pruned

    async def get(self, key: str, default: Any = None) -> Any:
        try:
            payload = await self.client.get(self._full_key(key))
            if payload is None:
                return default
            return deserialize_value(payload)
        except Exception as e:
            logger.error(f"Error getting redis cache key '{key}': {str(e)}")
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

        ``size_units`` is accepted for interface parity; Redis enforces its own
        ``maxmemory`` policy.
        """
        ttl = self.default_ttl if ttl is None else ttl
        validate_ttl(key, ttl)

        payload = serialize_value(value)
        seconds = max(1, int(round(ttl)))

        # Entries are never mutated in place, the old value's tags go first
        await self._untag([key])
        await self.client.set(self._full_key(key), payload, ex=seconds)

        tags = set(tags or ())
        if not tags:
            return True

        reverse_key = self._key_tags_key(key)
        await self.client.sadd(reverse_key, *tags)
        await self.client.expire(reverse_key, seconds)

        for tag in tags:
            tag_key = self._tag_key(tag)
            await self.client.sadd(tag_key, key)
            # A tag set lives as long as its longest-lived member
            if await self.client.ttl(tag_key) < seconds:
                await self.client.expire(tag_key, seconds)
            if await self.client.scard(tag_key) > self.tag_prune_threshold:
                pruned = await self._prune_tag(tag_key)
                logger.debug(f"Pruned {pruned} expired members from tag '{tag}'")
        return True

    async def delete(self, key: str) -> bool:
        await self._untag([key])
        return bool(await self.client.delete(self._full_key(key)))

    async def remove_by_prefix(self, prefix: str) -> int:
        """
        Remove keys matching ``prefix`` via ``SCAN``.

        Args:
            prefix: Key prefix, without a trailing wildcard

        Returns:
            Number of keys deleted
        """
        match = f"{_escape_glob(self._full_key(prefix))}*"
        removed = 0
        batch: List[str] = []

        async for full_key in self.client.scan_iter(match=match, count=_DELETE_BATCH):
            batch.append(_text(full_key))
            if len(batch) >= _DELETE_BATCH:
                removed += await self._delete_batch(batch)
                batch = []

        if batch:
            removed += await self._delete_batch(batch)
        return removed

    async def _delete_batch(self, full_keys: List[str]) -> int:
        await self._untag(k[len(self.key_prefix) :] for k in full_keys)
        return await self.client.delete(*full_keys)

    async def invalidate_by_tags(self, tags: List[str]) -> int:
        removed = 0
        for tag in tags or ():
            tag_key = self._tag_key(tag)
            keys = [_text(m) for m in await self.client.smembers(tag_key)]
            if keys:
                await self._untag(keys)
                removed += await self.client.delete(*(self._full_key(k) for k in keys))
            await self.client.delete(tag_key)
        return removed

    async def exists(self, key: str) -> bool:
        return bool(await self.client.exists(self._full_key(key)))

    async def clear(self) -> int:
        removed = await self.remove_by_prefix("")
        for prefix in (self.tag_prefix, self.key_tags_prefix):
            async for index_key in self.client.scan_iter(
                match=f"{_escape_glob(prefix)}*", count=_DELETE_BATCH
            ):
                await self.client.delete(index_key)
        return removed

    async def stats(self) -> Dict[str, Any]:
        return {
            "backend": self.backend_type,
            "key_prefix": self.key_prefix,
            "db_keys": await self.client.dbsize(),
        }

    async def close(self) -> None:
        await self.client.aclose()
