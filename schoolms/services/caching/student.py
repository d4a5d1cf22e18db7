from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_list_key, view_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.common import SearchRequest
from schoolms.schemas.people import StudentCreate, StudentPhoto, StudentUpdate


class CachingStudentService(CachingService):
    """
    Cache decorator cho StudentService.

    Student keys are the hub most other entities invalidate: grade, attendance,
    enrollment and submission writes all reach ``student_dashboard_{id}`` and
    the ``student_{id}_*`` lists.
    """

    entity_type = "student"

    @cached_read("detail", key=lambda student_id: entity_key("student", student_id))
    async def get_student_by_id(self, student_id: int):
        return await self.inner.get_student_by_id(student_id)

    @cached_read(
        "detail", key=lambda student_id: view_key("student", "detail", student_id)
    )
    async def get_student_detail(self, student_id: int):
        return await self.inner.get_student_detail(student_id)

    @cached_read(
        "dashboard", key=lambda student_id: view_key("student", "dashboard", student_id)
    )
    async def get_student_dashboard(self, student_id: int):
        return await self.inner.get_student_dashboard(student_id)

    @cached_read("stats", key=lambda student_id: view_key("student", "stats", student_id))
    async def get_student_stats(self, student_id: int):
        return await self.inner.get_student_stats(student_id)

    @cached_read("list", key=lambda request: list_key("student", request))
    async def get_paged_students(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_paged_students(request)

    @cached_read(
        "enrollment_list",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "enrollment", request
        ),
    )
    async def get_student_enrollments(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_student_enrollments(student_id, request)

    @cached_read(
        "grade_list",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "grade", request
        ),
    )
    async def get_student_grades(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_student_grades(student_id, request)

    @cached_read(
        "class_list",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "class", request
        ),
    )
    async def get_student_classes(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_student_classes(student_id, request)

    @cached_read(
        "attendance_list",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "attendance", request
        ),
    )
    async def get_student_attendance(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_student_attendance(student_id, request)

    @cached_read(
        "assignment_list",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "assignment", request
        ),
    )
    async def get_student_assignments(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_student_assignments(student_id, request)

    @cached_read(
        "notification_list",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "notification", request
        ),
    )
    async def get_student_notifications(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_student_notifications(student_id, request)

    @invalidates(Mutation.CREATED)
    async def create_student(self, payload: StudentCreate):
        return await self.inner.create_student(payload)

    @invalidates(Mutation.UPDATED, entity_id="student_id")
    async def update_student(self, student_id: int, payload: StudentUpdate):
        return await self.inner.update_student(student_id, payload)

    @invalidates(Mutation.DELETED, entity_id="student_id")
    async def delete_student(self, student_id: int):
        return await self.inner.delete_student(student_id)

    @invalidates(
        Mutation.PHOTO_CHANGED, entity_id=lambda args, result: args["payload"].student_id
    )
    async def upload_student_photo(self, payload: StudentPhoto):
        return await self.inner.upload_student_photo(payload)
