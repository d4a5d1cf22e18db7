from unittest.mock import MagicMock

import pytest

from schoolms.cache.backends.memory import MemoryBackend
from schoolms.cache.backends.redis import RedisBackend
from schoolms.cache.factory import create_cache_backend
from schoolms.common.exceptions import ConfigurationError
from schoolms.container import build_container, decorate_services
from schoolms.services import contracts
from schoolms.services.caching import CACHING_SERVICES
from schoolms.services.caching.student import CachingStudentService


def test_factory_builds_memory_backend(settings):
    backend = create_cache_backend(settings)

    assert isinstance(backend, MemoryBackend)


def test_factory_builds_redis_backend(settings):
    redis_settings = settings.model_copy(
        update={"CACHE_BACKEND": "redis", "CACHE_KEY_PREFIX": "test:"}
    )
    client = MagicMock()

    backend = create_cache_backend(redis_settings, redis_client=client)

    assert isinstance(backend, RedisBackend)
    assert backend.client is client
    assert backend.key_prefix == "test:"


def test_factory_rejects_unknown_backend(settings):
    broken = settings.model_copy(update={"CACHE_BACKEND": "memcached"})

    with pytest.raises(ConfigurationError) as exc_info:
        create_cache_backend(broken)

    assert exc_info.value.config_key == "CACHE_BACKEND"


def test_build_container_from_settings(settings):
    container = build_container(settings)

    assert isinstance(container.backend, MemoryBackend)
    assert container.manager.backend is container.backend
    assert container.coordinator.backend is container.backend
    assert container.coordinator.is_mapped("student", "updated")


def test_decorate_services(container, make_inner):
    inner = make_inner(contracts.StudentServiceProtocol)

    services = decorate_services(container, {"student": inner})

    assert isinstance(services["student"], CachingStudentService)
    assert services["student"].inner is inner
    assert services["student"].cache is container.manager
    assert isinstance(services["student"], contracts.StudentServiceProtocol)


def test_decorate_services_when_cache_disabled(settings, backend, metrics, make_inner):
    disabled = settings.model_copy(update={"CACHE_ENABLED": False})
    container = build_container(disabled, backend=backend, metrics=metrics)
    inner = make_inner(contracts.StudentServiceProtocol)

    services = decorate_services(container, {"student": inner})

    assert services["student"] is inner


def test_decorate_services_rejects_unknown_name(container):
    with pytest.raises(ConfigurationError):
        decorate_services(container, {"library": object()})


def test_every_service_is_registered():
    assert sorted(CACHING_SERVICES) == [
        "assignment",
        "attendance",
        "class",
        "course",
        "department",
        "enrollment",
        "grade",
        "student",
        "submission",
        "teacher",
        "user",
    ]


@pytest.mark.asyncio
async def test_close_stops_cleanup_thread(settings):
    container = build_container(
        settings.model_copy(update={"MEMORY_CACHE_CLEANUP_INTERVAL": 30})
    )
    assert container.backend._cleanup_thread.is_alive()
    await container.backend.set("student_1", {"id": 1})

    await container.close()

    assert container.backend._cleanup_thread is None
