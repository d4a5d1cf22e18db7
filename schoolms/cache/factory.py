from enum import Enum
from typing import Callable, Optional

from schoolms.cache.backends.base import BaseCacheBackend
from schoolms.common.exceptions import ConfigurationError
from schoolms.core.config import Settings, get_settings
from schoolms.logging.setup import get_logger

logger = get_logger(__name__)


class CacheBackendType(str, Enum):
    """Các loại backend cache."""

    MEMORY = "memory"
    REDIS = "redis"


def create_cache_backend(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], float]] = None,
    **kwargs,
) -> BaseCacheBackend:
    """
    Tạo cache backend dựa trên cấu hình.

    The backend is long-lived: the composition root creates it once and injects
    it wherever caching is needed.

    Args:
        settings: Application settings, the cached process settings by default
        clock: Time source for the memory backend (tests inject a fake clock)
        **kwargs: Backend-specific overrides, e.g. ``redis_client``

    Returns:
        Cache backend object

    Raises:
        ConfigurationError: Unknown ``CACHE_BACKEND``
    """
    settings = settings or get_settings()

    try:
        backend_type = CacheBackendType(settings.CACHE_BACKEND)
    except ValueError:
        raise ConfigurationError(
            f"Unknown cache backend '{settings.CACHE_BACKEND}'",
            config_key="CACHE_BACKEND",
        )

    if backend_type == CacheBackendType.REDIS:
        from schoolms.cache.backends.redis import RedisBackend

        backend = RedisBackend(
            redis_client=kwargs.get("redis_client"),
            redis_host=settings.REDIS_HOST,
            redis_port=settings.REDIS_PORT,
            redis_password=settings.REDIS_PASSWORD,
            redis_db=settings.REDIS_DB,
            key_prefix=settings.CACHE_KEY_PREFIX,
            default_ttl=settings.CACHE_DEFAULT_TTL,
        )
    else:
        from schoolms.cache.backends.memory import MemoryBackend

        options = dict(
            max_size=kwargs.get("max_size", settings.MEMORY_CACHE_MAX_SIZE),
            default_ttl=settings.CACHE_DEFAULT_TTL,
            cleanup_interval=kwargs.get(
                "cleanup_interval", settings.MEMORY_CACHE_CLEANUP_INTERVAL
            ),
        )
        if clock is not None:
            options["clock"] = clock
        backend = MemoryBackend(**options)

    logger.info(f"Cache backend '{backend_type.value}' initialized")
    return backend
