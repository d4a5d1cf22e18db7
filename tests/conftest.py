from unittest.mock import AsyncMock

import pytest

from schoolms.cache.backends.memory import MemoryBackend
from schoolms.cache.manager import CacheManager
from schoolms.cache.policy import TTLPolicy
from schoolms.cache.rules import register_school_rules
from schoolms.cache.strategies.event_based import InvalidationCoordinator
from schoolms.container import build_container
from schoolms.core.config import Settings
from schoolms.monitoring.metrics import CacheMetrics


class FakeClock:
    """Manually advanced time source for TTL tests."""

    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def metrics() -> CacheMetrics:
    return CacheMetrics(enabled=False)


@pytest.fixture
def backend(clock):
    return MemoryBackend(max_size=100, default_ttl=600, clock=clock)


@pytest.fixture
def manager(backend, metrics):
    return CacheManager(backend, default_ttl=600, metrics=metrics)


@pytest.fixture
def coordinator(backend, metrics):
    return register_school_rules(InvalidationCoordinator(backend, metrics=metrics))


@pytest.fixture
def ttl_policy():
    return TTLPolicy(default_ttl=600)


@pytest.fixture
def settings():
    return Settings(
        CACHE_BACKEND="memory",
        MEMORY_CACHE_CLEANUP_INTERVAL=0,
        METRICS_ENABLED=False,
        _env_file=None,
    )


@pytest.fixture
def container(settings, backend, metrics):
    return build_container(settings, backend=backend, metrics=metrics)


@pytest.fixture
def make_inner():
    """Build a call-counting inner service implementing a service Protocol."""

    def factory(protocol):
        return AsyncMock(spec=protocol)

    return factory
