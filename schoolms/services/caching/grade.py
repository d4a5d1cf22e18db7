from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_key, scoped_list_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.assessment import BulkGradeCreate, GradeCreate, GradeUpdate
from schoolms.schemas.common import SearchRequest


async def _stored_grade(service: CachingService, args):
    return await service.inner.get_grade_by_id(args["grade_id"])


class CachingGradeService(CachingService):
    entity_type = "grade"

    @cached_read("detail", key=lambda grade_id: entity_key("grade", grade_id))
    async def get_grade_by_id(self, grade_id: int):
        return await self.inner.get_grade_by_id(grade_id)

    @cached_read("list", key=lambda request: list_key("grade", request))
    async def get_all_grades(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_grades(request)

    @cached_read(
        "by_parent",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "grade", request
        ),
    )
    async def get_grades_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_grades_by_student(student_id, request)

    @cached_read(
        "by_parent",
        key=lambda course_id, request: scoped_list_key(
            "course", course_id, "grade", request
        ),
    )
    async def get_grades_by_course(
        self, course_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_grades_by_course(course_id, request)

    @cached_read(
        "student_course",
        key=lambda student_id, course_id: scoped_key(
            "student", student_id, "course", course_id, "grades"
        ),
    )
    async def get_student_course_grades(self, student_id: int, course_id: int):
        return await self.inner.get_student_course_grades(student_id, course_id)

    @invalidates(Mutation.CREATED)
    async def create_grade(self, payload: GradeCreate):
        return await self.inner.create_grade(payload)

    @invalidates(Mutation.UPDATED, entity_id="grade_id", snapshot=_stored_grade)
    async def update_grade(self, grade_id: int, payload: GradeUpdate):
        return await self.inner.update_grade(grade_id, payload)

    @invalidates(Mutation.DELETED, entity_id="grade_id", snapshot=_stored_grade)
    async def delete_grade(self, grade_id: int):
        return await self.inner.delete_grade(grade_id)

    @invalidates(Mutation.BULK_CREATED)
    async def bulk_create_grades(self, payload: BulkGradeCreate):
        return await self.inner.bulk_create_grades(payload)
