from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_list_key, view_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.academics import (
    BulkClassEnrollmentRequest,
    ClassCreate,
    ClassEnrollmentRequest,
    ClassUpdate,
)
from schoolms.schemas.common import SearchRequest
from schoolms.schemas.people import TeacherCreate, TeacherUpdate


async def _stored_class(service: CachingService, args):
    return await service.inner.get_class_by_id(args["class_id"])


async def _stored_teacher(service: CachingService, args):
    return await service.inner.get_teacher_by_id(args["teacher_id"])


class CachingTeacherService(CachingService):
    """
    Cache decorator cho TeacherService.

    The teacher service also manages the classes a teacher runs. Those reads
    and writes use the class keys and class events, so a class changed here
    and one changed through the class service invalidate the same entries.
    """

    entity_type = "teacher"

    @cached_read("detail", key=lambda teacher_id: entity_key("teacher", teacher_id))
    async def get_teacher_by_id(self, teacher_id: int):
        return await self.inner.get_teacher_by_id(teacher_id)

    @cached_read(
        "detail", key=lambda teacher_id: view_key("teacher", "detail", teacher_id)
    )
    async def get_teacher_detail(self, teacher_id: int):
        return await self.inner.get_teacher_detail(teacher_id)

    @cached_read("stats", key=lambda teacher_id: view_key("teacher", "stats", teacher_id))
    async def get_teacher_stats(self, teacher_id: int):
        return await self.inner.get_teacher_stats(teacher_id)

    @cached_read("list", key=lambda request: list_key("teacher", request))
    async def get_all_teachers(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_teachers(request)

    @cached_read(
        "course_list",
        key=lambda teacher_id, request: scoped_list_key(
            "teacher", teacher_id, "course", request
        ),
    )
    async def get_teacher_courses(
        self, teacher_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_teacher_courses(teacher_id, request)

    @cached_read(
        "class_list",
        key=lambda teacher_id, request: scoped_list_key(
            "teacher", teacher_id, "class", request
        ),
    )
    async def get_teacher_classes(
        self, teacher_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_teacher_classes(teacher_id, request)

    # Class data served through the teacher service

    @cached_read(
        "student_list",
        entity="class",
        key=lambda class_id, request: scoped_list_key(
            "class", class_id, "student", request
        ),
    )
    async def get_class_students(
        self, class_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_class_students(class_id, request)

    @cached_read(
        "attendance_list",
        entity="class",
        key=lambda class_id, request: scoped_list_key(
            "class", class_id, "attendance", request
        ),
    )
    async def get_class_attendance_history(
        self, class_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_class_attendance_history(class_id, request)

    @cached_read(
        "assignment_list",
        entity="class",
        key=lambda class_id, request: scoped_list_key(
            "class", class_id, "assignment", request
        ),
    )
    async def get_class_assignments(
        self, class_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_class_assignments(class_id, request)

    @cached_read("detail", entity="class", key=lambda class_id: entity_key("class", class_id))
    async def get_class_by_id(self, class_id: int):
        return await self.inner.get_class_by_id(class_id)

    # Writes

    @invalidates(Mutation.CREATED)
    async def create_teacher(self, payload: TeacherCreate):
        return await self.inner.create_teacher(payload)

    @invalidates(Mutation.UPDATED, entity_id="teacher_id", snapshot=_stored_teacher)
    async def update_teacher(self, teacher_id: int, payload: TeacherUpdate):
        return await self.inner.update_teacher(teacher_id, payload)

    @invalidates(Mutation.DELETED, entity_id="teacher_id", snapshot=_stored_teacher)
    async def delete_teacher(self, teacher_id: int):
        return await self.inner.delete_teacher(teacher_id)

    @invalidates(Mutation.CREATED, entity="class")
    async def create_class(self, payload: ClassCreate):
        return await self.inner.create_class(payload)

    @invalidates(
        Mutation.UPDATED, entity="class", entity_id="class_id", snapshot=_stored_class
    )
    async def update_class(self, class_id: int, payload: ClassUpdate):
        return await self.inner.update_class(class_id, payload)

    @invalidates(
        Mutation.STATUS_CHANGED,
        entity="class",
        entity_id="class_id",
        snapshot=_stored_class,
    )
    async def deactivate_class(self, class_id: int):
        return await self.inner.deactivate_class(class_id)

    @invalidates(
        Mutation.ENROLLED,
        entity="class",
        entity_id=lambda args, result: args["payload"].class_id,
    )
    async def enroll_student_in_class(self, payload: ClassEnrollmentRequest):
        return await self.inner.enroll_student_in_class(payload)

    @invalidates(Mutation.UNENROLLED, entity="class", entity_id="class_id")
    async def remove_student_from_class(self, class_id: int, student_id: int):
        return await self.inner.remove_student_from_class(class_id, student_id)

    @invalidates(
        Mutation.BULK_ENROLLED,
        entity="class",
        entity_id=lambda args, result: args["payload"].class_id,
    )
    async def bulk_enroll_students(self, payload: BulkClassEnrollmentRequest):
        return await self.inner.bulk_enroll_students(payload)
