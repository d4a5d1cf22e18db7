import pytest
from prometheus_client import REGISTRY

from schoolms.cache.manager import CacheManager
from schoolms.monitoring.metrics import CacheMetrics


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.mark.asyncio
async def test_manager_reports_hits_and_misses(backend):
    manager = CacheManager(backend, metrics=CacheMetrics(enabled=True))
    hits = sample("cache_hit_total", cache_type="memory")
    misses = sample("cache_miss_total", cache_type="memory")

    async def load():
        return {"id": 1}

    await manager.get_or_create("student_1", load, ttl=60)
    await manager.get_or_create("student_1", load, ttl=60)

    assert sample("cache_miss_total", cache_type="memory") == misses + 1
    assert sample("cache_hit_total", cache_type="memory") == hits + 1


def test_invalidations_are_counted():
    before = sample("cache_invalidation_total", entity_type="grade", mutation="updated")

    CacheMetrics(enabled=True).track_invalidation("grade", "updated")

    assert sample(
        "cache_invalidation_total", entity_type="grade", mutation="updated"
    ) == before + 1


def test_disabled_metrics_record_nothing():
    before = sample("cache_error_total", cache_type="memory", operation="get")

    CacheMetrics(enabled=False).track_cache_error("get", "memory")

    assert sample("cache_error_total", cache_type="memory", operation="get") == before
