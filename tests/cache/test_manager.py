import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from schoolms.cache.backends.base import BaseCacheBackend
from schoolms.cache.keys import entity_key, list_key
from schoolms.cache.manager import CacheManager
from schoolms.common.exceptions import CacheBackendError, ResourceNotFound

pytestmark = pytest.mark.asyncio


def counting_factory(value="value"):
    calls = []

    async def factory():
        calls.append(1)
        return value

    return factory, calls


async def until(condition, attempts: int = 50):
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class TestReadThrough:
    async def test_second_read_is_a_hit(self, manager):
        factory, calls = counting_factory()

        first = await manager.get_or_create("student_5", factory, ttl=60)
        second = await manager.get_or_create("student_5", factory, ttl=60)

        assert first == second == "value"
        assert len(calls) == 1
        assert (manager.hits, manager.misses) == (1, 1)

    async def test_cache_key_tags_reach_backend(self, manager, backend):
        factory, _ = counting_factory()
        key = list_key("student")

        await manager.get_or_create(key, factory, ttl=60)

        assert await manager.invalidate_by_tags(["student_list"]) == 1
        assert not await backend.exists(key.render())

    async def test_none_is_not_cached(self, manager, backend):
        factory, calls = counting_factory(None)

        assert await manager.get_or_create("student_5", factory) is None
        assert await manager.get_or_create("student_5", factory) is None

        assert len(calls) == 2
        assert not await backend.exists("student_5")

    async def test_factory_error_propagates_and_caches_nothing(self, manager, backend):
        async def factory():
            raise ResourceNotFound(resource_type="student", resource_id=5)

        with pytest.raises(ResourceNotFound):
            await manager.get_or_create("student_5", factory)

        assert not await backend.exists("student_5")

    async def test_entry_expires(self, manager, clock):
        factory, calls = counting_factory()

        await manager.get_or_create(entity_key("student", 5), factory, ttl=10)
        clock.advance(11)
        await manager.get_or_create(entity_key("student", 5), factory, ttl=10)

        assert len(calls) == 2

    async def test_invalid_ttl_still_returns_value(self, manager, backend):
        factory, _ = counting_factory()

        assert await manager.get_or_create("student_5", factory, ttl=0) == "value"
        assert not await backend.exists("student_5")
        assert manager.errors == 1


class TestFailOpen:
    @pytest.fixture
    def broken_backend(self):
        backend = AsyncMock(spec=BaseCacheBackend)
        backend.backend_type = "broken"
        backend.get.side_effect = CacheBackendError("connection refused")
        backend.set.side_effect = CacheBackendError("connection refused")
        backend.delete.side_effect = CacheBackendError("connection refused")
        backend.remove_by_prefix.side_effect = CacheBackendError("connection refused")
        backend.invalidate_by_tags.side_effect = CacheBackendError("connection refused")
        return backend

    async def test_backend_failures_do_not_change_results(self, broken_backend, metrics):
        manager = CacheManager(broken_backend, metrics=metrics)
        factory, calls = counting_factory({"id": 5})

        with patch("schoolms.cache.manager.logger") as mock_logger:
            result = await manager.get_or_create("student_5", factory, ttl=60)

        assert result == {"id": 5}
        assert len(calls) == 1
        assert manager.errors == 2
        assert mock_logger.error.call_count == 2

    async def test_get_failure_only(self, backend, metrics):
        manager = CacheManager(backend, metrics=metrics)
        factory, _ = counting_factory()

        with patch.object(backend, "get", side_effect=CacheBackendError("boom")):
            assert await manager.get_or_create("student_5", factory) == "value"

        assert await backend.get("student_5") == "value"

    async def test_write_side_operations_swallow_errors(self, broken_backend, metrics):
        manager = CacheManager(broken_backend, metrics=metrics)

        assert await manager.set("k", 1) is False
        assert await manager.delete("k") is False
        assert await manager.remove_by_prefix("student_") == 0
        assert await manager.invalidate_by_tags(["student_list"]) == 0
        assert manager.errors == 4


class TestConcurrency:
    async def test_concurrent_misses_both_call_factory(self, manager):
        gate = asyncio.Event()
        calls = []

        async def factory():
            calls.append(1)
            await gate.wait()
            return "value"

        first = asyncio.create_task(manager.get_or_create("student_5", factory))
        second = asyncio.create_task(manager.get_or_create("student_5", factory))
        await until(lambda: len(calls) == 2)
        gate.set()

        assert await asyncio.gather(first, second) == ["value", "value"]
        assert len(calls) == 2

    async def test_single_flight_calls_factory_once(self, backend, metrics):
        manager = CacheManager(backend, single_flight=True, metrics=metrics)
        gate = asyncio.Event()
        calls = []

        async def factory():
            calls.append(1)
            await gate.wait()
            return "value"

        first = asyncio.create_task(manager.get_or_create("student_5", factory))
        second = asyncio.create_task(manager.get_or_create("student_5", factory))
        await until(lambda: len(calls) == 1)
        await asyncio.sleep(0)
        gate.set()

        assert await asyncio.gather(first, second) == ["value", "value"]
        assert len(calls) == 1
        assert manager._flight_locks == {}

    async def test_cancelled_factory_leaves_no_entry(self, manager, backend):
        started = asyncio.Event()

        async def factory():
            started.set()
            await asyncio.Event().wait()

        task = asyncio.create_task(manager.get_or_create("student_5", factory))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert not await backend.exists("student_5")


async def test_stats(manager):
    factory, _ = counting_factory()
    await manager.get_or_create("a", factory)
    await manager.get_or_create("a", factory)

    stats = await manager.stats()

    assert stats["hit_ratio"] == 0.5
    assert stats["backend"]["entries"] == 1
    assert stats["single_flight"] is False
