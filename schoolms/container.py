"""
Composition root của cache layer.

Builds the single long-lived backend, the manager, the invalidation
coordinator and the TTL policy, and wraps domain services with their cache
decorators. Nothing here is a module-level singleton; the application owns one
``CacheContainer`` for its lifetime.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from schoolms.cache.backends.base import BaseCacheBackend
from schoolms.cache.factory import create_cache_backend
from schoolms.cache.manager import CacheManager
from schoolms.cache.policy import TTLPolicy
from schoolms.cache.rules import register_school_rules
from schoolms.cache.strategies.event_based import InvalidationCoordinator
from schoolms.common.exceptions import ConfigurationError
from schoolms.core.config import Settings, get_settings
from schoolms.logging.setup import get_logger
from schoolms.monitoring.metrics import CacheMetrics
from schoolms.services.caching import CACHING_SERVICES

logger = get_logger(__name__)


@dataclass
class CacheContainer:
    settings: Settings
    backend: BaseCacheBackend
    manager: CacheManager
    coordinator: InvalidationCoordinator
    ttl_policy: TTLPolicy

    async def close(self) -> None:
        await self.backend.close()


def build_container(
    settings: Optional[Settings] = None,
    backend: Optional[BaseCacheBackend] = None,
    metrics: Optional[CacheMetrics] = None,
) -> CacheContainer:
    """
    Tạo toàn bộ cache components từ settings.

    Args:
        settings: Application settings, the cached process settings by default
        backend: Pre-built backend (tests inject a memory backend with a fake clock)
        metrics: Metric sink, a fresh one honouring ``METRICS_ENABLED`` by default

    Returns:
        CacheContainer
    """
    settings = settings or get_settings()
    metrics = metrics or CacheMetrics(enabled=settings.METRICS_ENABLED)
    backend = backend or create_cache_backend(settings)

    manager = CacheManager(
        backend,
        default_ttl=settings.CACHE_DEFAULT_TTL,
        single_flight=settings.CACHE_SINGLE_FLIGHT,
        metrics=metrics,
    )
    coordinator = register_school_rules(InvalidationCoordinator(backend, metrics=metrics))

    return CacheContainer(
        settings=settings,
        backend=backend,
        manager=manager,
        coordinator=coordinator,
        ttl_policy=TTLPolicy.from_settings(settings),
    )


def decorate_services(
    container: CacheContainer, services: Mapping[str, Any]
) -> Dict[str, Any]:
    """
    Wrap inner services with their cache decorators.

    Args:
        container: Cache components
        services: Inner services by registry name (``student``, ``teacher``, ...)

    Returns:
        Decorated services by the same names, or the inner services unchanged
        when ``CACHE_ENABLED`` is off

    Raises:
        ConfigurationError: A name has no cache decorator
    """
    unknown = sorted(set(services) - set(CACHING_SERVICES))
    if unknown:
        raise ConfigurationError(
            f"No cache decorator for services: {', '.join(unknown)}",
            config_key="services",
        )

    if not container.settings.CACHE_ENABLED:
        logger.info("Caching disabled, services are used undecorated")
        return dict(services)

    decorated = {
        name: CACHING_SERVICES[name](
            inner,
            container.manager,
            container.coordinator,
            container.ttl_policy,
        )
        for name, inner in services.items()
    }

    missing = container.coordinator.unmapped(decorated.values())
    if missing:
        logger.warning(f"Write paths without invalidation rules: {', '.join(missing)}")
    return decorated
