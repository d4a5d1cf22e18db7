import fakeredis
import pytest

from schoolms.cache.backends.redis import RedisBackend
from schoolms.cache.keys import scoped_list_key
from schoolms.common.exceptions import CacheBackendError
from schoolms.schemas.people import StudentDto


@pytest.fixture
def redis_client():
    """Fake Redis server, isolated per test."""
    return fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer())


@pytest.fixture
def redis_backend(redis_client):
    return RedisBackend(redis_client=redis_client, key_prefix="test:", default_ttl=600)


class TestRedisBackend:
    async def test_round_trip(self, redis_backend, redis_client):
        student = StudentDto(id=5, first_name="An", last_name="Le")

        await redis_backend.set("student_5", student, ttl=90)

        assert await redis_backend.get("student_5") == student
        assert 0 < await redis_client.ttl("test:student_5") <= 90
        assert await redis_backend.exists("student_5")

    async def test_missing_and_corrupt_values_read_as_default(
        self, redis_backend, redis_client
    ):
        await redis_client.set("test:student_6", b"?garbage")

        assert await redis_backend.get("student_5", default="none") == "none"
        assert await redis_backend.get("student_6") is None

    async def test_rejects_non_positive_ttl(self, redis_backend):
        with pytest.raises(CacheBackendError):
            await redis_backend.set("student_5", 1, ttl=0)

    async def test_tags_index_keys(self, redis_backend, redis_client):
        key = scoped_list_key("class", 3, "student")

        await redis_backend.set(key.render(), [1, 2], ttl=300, tags=key.tags)

        assert await redis_client.smembers("test-tags:class_3") == {key.render().encode()}
        assert 0 < await redis_client.ttl("test-tags:class_3") <= 300
        assert await redis_backend.invalidate_by_tags(["class_3"]) == 1
        assert not await redis_backend.exists(key.render())

    async def test_tag_lifetime_follows_longest_member(self, redis_backend, redis_client):
        await redis_backend.set("student_1", 1, ttl=900, tags=["group"])
        await redis_backend.set("student_2", 1, ttl=60, tags=["group"])

        assert await redis_client.ttl("test-tags:group") > 60

    async def test_untagged_keys_create_no_index(self, redis_backend, redis_client):
        await redis_backend.set("student_5", 1, ttl=60)

        assert await redis_client.keys("test-*") == []

    async def test_remove_by_prefix(self, redis_backend):
        for key in ("student_5", "student_5_grade_list_a", "student_5_grade_list_b", "student_50"):
            await redis_backend.set(key, 1, ttl=60)

        assert await redis_backend.remove_by_prefix("student_5_") == 2
        assert await redis_backend.exists("student_5")
        assert await redis_backend.exists("student_50")

    async def test_clear_drops_values_and_tags(self, redis_backend, redis_client):
        await redis_backend.set("student_5", 1, ttl=60, tags=["student_list"])
        await redis_backend.set("teacher_1", 1, ttl=60)

        assert await redis_backend.clear() == 2
        assert await redis_client.dbsize() == 0

    async def test_stats_and_close(self, redis_backend):
        await redis_backend.set("student_5", 1, ttl=60)

        stats = await redis_backend.stats()
        await redis_backend.close()

        assert stats["backend"] == "redis"
        assert stats["db_keys"] == 1


class TestRedisTagIndexShrinks:
    async def test_delete_removes_key_from_its_tags(self, redis_backend, redis_client):
        for i in range(200):
            key = scoped_list_key("class", 3, "student", None, i)
            await redis_backend.set(key.render(), [i], ttl=300, tags=key.tags)
            await redis_backend.delete(key.render())

        assert await redis_client.scard("test-tags:class_3") == 0
        assert await redis_client.scard("test-tags:class_student_list") == 0
        assert await redis_client.dbsize() == 0

    async def test_remove_by_prefix_removes_keys_from_tags(
        self, redis_backend, redis_client
    ):
        for i in range(20):
            key = scoped_list_key("student", 4, "grade", None, i)
            await redis_backend.set(key.render(), [i], ttl=300, tags=key.tags)

        assert await redis_backend.remove_by_prefix("student_4_") == 20
        assert await redis_client.scard("test-tags:student_4") == 0
        assert await redis_client.dbsize() == 0

    async def test_tag_invalidation_clears_other_tags(self, redis_backend, redis_client):
        key = scoped_list_key("student", 1, "assignment")
        await redis_backend.set(key.render(), [1], ttl=300, tags=key.tags)

        assert await redis_backend.invalidate_by_tags(["student_assignment_list"]) == 1
        assert await redis_client.scard("test-tags:student_1") == 0
        assert await redis_client.dbsize() == 0

    async def test_overwrite_moves_key_between_tags(self, redis_backend, redis_client):
        await redis_backend.set("student_5", 1, ttl=60, tags=["old"])
        await redis_backend.set("student_5", 2, ttl=60, tags=["new"])

        assert await redis_client.scard("test-tags:old") == 0
        assert await redis_client.smembers("test-tags:new") == {b"student_5"}

    async def test_large_tag_sets_drop_expired_members(self, redis_backend, redis_client):
        redis_backend.tag_prune_threshold = 5
        for i in range(5):
            await redis_backend.set(f"student_{i}", i, ttl=60, tags=["student_list"])
        # Values expire on their own, outside the backend
        for i in range(5):
            await redis_client.delete(f"test:student_{i}")

        await redis_backend.set("student_9", 9, ttl=60, tags=["student_list"])

        assert await redis_client.smembers("test-tags:student_list") == {b"student_9"}
