"""
Hệ thống cache - cache-aside layer đặt trước các domain service.

Module này bao gồm:
- Backends: Memory (LRU + TTL, tag index) và Redis
- Keys: Key builder và invalidation patterns
- Policy: TTL theo (entity, operation)
- Manager: ``CacheManager.get_or_create`` với fail-open semantics
- Strategies: Event-based invalidation coordinator
- Decorators: ``cached_read`` / ``invalidates`` cho decorated services
"""

from schoolms.cache.backends import BaseCacheBackend, CacheEntry, MemoryBackend
from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.factory import CacheBackendType, create_cache_backend
from schoolms.cache.keys import (
    CacheKey,
    entity_key,
    list_key,
    scoped_key,
    scoped_list_key,
    static_key,
    view_key,
)
from schoolms.cache.manager import CacheManager
from schoolms.cache.policy import TTLPolicy
from schoolms.cache.rules import register_school_rules
from schoolms.cache.strategies import InvalidationCoordinator, Mutation, MutationContext

__all__ = [
    "BaseCacheBackend",
    "CacheEntry",
    "MemoryBackend",
    "CachingService",
    "cached_read",
    "invalidates",
    "CacheBackendType",
    "create_cache_backend",
    "CacheKey",
    "entity_key",
    "list_key",
    "scoped_key",
    "scoped_list_key",
    "static_key",
    "view_key",
    "CacheManager",
    "TTLPolicy",
    "register_school_rules",
    "InvalidationCoordinator",
    "Mutation",
    "MutationContext",
]
