from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_list_key, view_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.academics import CourseCreate, CourseUpdate
from schoolms.schemas.common import SearchRequest


async def _stored_course(service: CachingService, args):
    """The course as stored, so its current teacher is known."""
    return await service.inner.get_course_by_id(args["course_id"])


class CachingCourseService(CachingService):
    entity_type = "course"

    @cached_read("detail", key=lambda course_id: entity_key("course", course_id))
    async def get_course_by_id(self, course_id: int):
        return await self.inner.get_course_by_id(course_id)

    @cached_read("detail", key=lambda course_id: view_key("course", "detail", course_id))
    async def get_course_detail(self, course_id: int):
        return await self.inner.get_course_detail(course_id)

    @cached_read("list", key=lambda request: list_key("course", request))
    async def get_all_courses(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_courses(request)

    @cached_read(
        "enrollment_list",
        key=lambda course_id, request: scoped_list_key(
            "course", course_id, "enrollment", request
        ),
    )
    async def get_course_enrollments(
        self, course_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_course_enrollments(course_id, request)

    @invalidates(Mutation.CREATED)
    async def create_course(self, payload: CourseCreate):
        return await self.inner.create_course(payload)

    @invalidates(Mutation.UPDATED, entity_id="course_id", snapshot=_stored_course)
    async def update_course(self, course_id: int, payload: CourseUpdate):
        return await self.inner.update_course(course_id, payload)

    @invalidates(Mutation.DELETED, entity_id="course_id", snapshot=_stored_course)
    async def delete_course(self, course_id: int):
        return await self.inner.delete_course(course_id)

    @invalidates(Mutation.ASSIGNED, entity_id="course_id", snapshot=_stored_course)
    async def assign_teacher_to_course(self, course_id: int, teacher_id: int):
        return await self.inner.assign_teacher_to_course(course_id, teacher_id)

    @invalidates(Mutation.UNASSIGNED, entity_id="course_id", snapshot=_stored_course)
    async def remove_teacher_from_course(self, course_id: int):
        return await self.inner.remove_teacher_from_course(course_id)
