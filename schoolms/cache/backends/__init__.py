from schoolms.cache.backends.base import BaseCacheBackend, CacheEntry
from schoolms.cache.backends.memory import MemoryBackend

__all__ = ["BaseCacheBackend", "CacheEntry", "MemoryBackend"]
