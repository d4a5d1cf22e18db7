from datetime import date
from unittest.mock import patch

import pytest

from schoolms.cache.keys import scoped_list_key
from schoolms.cache.rules import register_school_rules
from schoolms.cache.strategies.event_based import (
    InvalidationCoordinator,
    Mutation,
    MutationContext,
    base_rule,
)
from schoolms.common.exceptions import CacheBackendError
from schoolms.schemas.academics import EnrollmentDto, EnrollmentUpdate
from schoolms.schemas.assessment import AttendanceMark, BulkAttendanceCreate
from schoolms.services.caching import CACHING_SERVICES


class TestMutationContext:
    def test_event_name(self):
        assert MutationContext("grade", Mutation.UPDATED).event == "grade.updated"

    def test_related_collects_old_and_new_values(self):
        ctx = MutationContext(
            "enrollment",
            Mutation.UPDATED,
            entity_id=1,
            params={"enrollment_id": 1, "payload": EnrollmentUpdate(class_id=7)},
            snapshot=EnrollmentDto(id=1, student_id=4, course_id=9, class_id=3),
        )

        assert ctx.related("class_id") == [3, 7]
        assert ctx.related("student_id") == [4]
        assert ctx.first("course_id") == 9

    def test_related_searches_bulk_payloads(self):
        payload = BulkAttendanceCreate(
            class_id=3,
            date=date(2024, 3, 1),
            attendances=[AttendanceMark(student_id=1), AttendanceMark(student_id=2)],
        )
        ctx = MutationContext("attendance", Mutation.BULK_CREATED, params={"payload": payload})

        assert ctx.related("student_id") == [1, 2]
        assert ctx.related("date") == [date(2024, 3, 1)]

    def test_related_reads_plain_parameters(self):
        ctx = MutationContext(
            "course", Mutation.ASSIGNED, params={"course_id": 2, "teacher_id": 8}
        )

        assert ctx.related("teacher_id") == [8]

    def test_base_rule(self):
        assert base_rule(MutationContext("student", Mutation.UPDATED, entity_id=5)) == [
            "student_5",
            "student_detail_5",
            "student_list_*",
        ]
        assert base_rule(MutationContext("student", Mutation.CREATED)) == [
            "student_list_*"
        ]


class TestInvalidationCoordinator:
    async def test_removes_exact_prefix_and_tag_patterns(self, backend, metrics):
        coordinator = InvalidationCoordinator(backend, metrics=metrics)
        coordinator.register_rule(
            "thing", [Mutation.UPDATED], lambda ctx: ["thing_1", "thing_list_*", "tag:x"]
        )
        await backend.set("thing_1", 1, ttl=60)
        await backend.set("thing_list__1_10__False", 1, ttl=60)
        await backend.set("other_1", 1, ttl=60, tags=["x"])
        await backend.set("other_2", 1, ttl=60)

        removed = await coordinator.on_mutation("thing", Mutation.UPDATED, entity_id=1)

        assert removed == 3
        assert await backend.exists("other_2")

    async def test_one_failing_pattern_does_not_block_others(self, backend, metrics):
        coordinator = InvalidationCoordinator(backend, metrics=metrics)
        coordinator.register_rule("thing", [Mutation.DELETED], lambda ctx: ["a", "bad", "c"])
        for key in ("a", "bad", "c"):
            await backend.set(key, 1, ttl=60)

        real_delete = backend.delete

        async def flaky_delete(key):
            if key == "bad":
                raise CacheBackendError("write timeout", key=key)
            return await real_delete(key)

        with patch.object(backend, "delete", side_effect=flaky_delete), patch(
            "schoolms.cache.strategies.event_based.logger"
        ) as mock_logger:
            removed = await coordinator.on_mutation("thing", Mutation.DELETED)

        assert removed == 2
        assert not await backend.exists("a")
        assert not await backend.exists("c")
        mock_logger.error.assert_called_once()

    async def test_unmapped_event_falls_back_to_base_rule(self, backend, metrics):
        coordinator = InvalidationCoordinator(backend, metrics=metrics)
        await backend.set("widget_1", 1, ttl=60)
        await backend.set("widget_list__1_10__False", 1, ttl=60)

        with patch("schoolms.cache.strategies.event_based.logger") as mock_logger:
            removed = await coordinator.on_mutation("widget", "renamed", entity_id=1)

        assert removed == 2
        mock_logger.warning.assert_called_once()
        assert "widget.renamed" in mock_logger.warning.call_args[0][0]

    async def test_rule_decorator(self, backend, metrics):
        coordinator = InvalidationCoordinator(backend, metrics=metrics)

        @coordinator.rule("thing", Mutation.CREATED, Mutation.DELETED)
        def thing_rule(ctx):
            return ["thing_index"]

        assert coordinator.is_mapped("thing", Mutation.CREATED)
        assert coordinator.events == ["thing.created", "thing.deleted"]

    def test_every_declared_write_has_a_rule(self, coordinator):
        assert coordinator.unmapped(CACHING_SERVICES.values()) == []

    def test_unmapped_reports_missing_rules(self, backend, metrics):
        coordinator = InvalidationCoordinator(backend, metrics=metrics)

        missing = coordinator.unmapped([CACHING_SERVICES["department"]])

        assert "department.assigned" in missing
        assert "department.created" in missing


class TestSchoolRules:
    def test_student_update_patterns(self, coordinator):
        patterns = coordinator.patterns_for(
            MutationContext("student", Mutation.UPDATED, entity_id=5)
        )

        assert patterns == [
            "student_5",
            "student_detail_5",
            "student_list_*",
            "student_dashboard_5",
            "student_stats_5",
            "student_5_*",
        ]

    def test_student_create_does_not_touch_scoped_keys(self, coordinator):
        patterns = coordinator.patterns_for(
            MutationContext("student", Mutation.CREATED, entity_id=9)
        )

        assert "student_9_*" not in patterns
        assert "student_list_*" in patterns

    async def test_bulk_enrollment_reaches_every_student(self, coordinator, backend):
        for student_id in (1, 2):
            key = scoped_list_key("student", student_id, "class")
            await backend.set(key.render(), "page", ttl=60, tags=key.tags)
        other = scoped_list_key("student", 3, "class")
        await backend.set(other.render(), "page", ttl=60, tags=other.tags)

        await coordinator.on_mutation(
            "class",
            Mutation.BULK_ENROLLED,
            entity_id=3,
            params={"class_id": 3, "student_ids": [1, 2]},
        )

        assert not await backend.exists(scoped_list_key("student", 1, "class").render())
        assert not await backend.exists(scoped_list_key("student", 2, "class").render())
        assert await backend.exists(other.render())

    def test_role_rule(self, coordinator):
        patterns = coordinator.patterns_for(
            MutationContext("role", Mutation.DELETED, entity_id="admin", params={"role_name": "admin"})
        )

        assert patterns == ["role_list", "role_admin_*", "user_list_*", "user_statistics"]

    def test_register_returns_coordinator(self, backend, metrics):
        coordinator = InvalidationCoordinator(backend, metrics=metrics)

        assert register_school_rules(coordinator) is coordinator
        assert "submission.graded" in coordinator.events
