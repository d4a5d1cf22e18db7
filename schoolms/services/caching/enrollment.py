from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_list_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.academics import EnrollmentCreate, EnrollmentUpdate
from schoolms.schemas.common import SearchRequest


async def _stored_enrollment(service: CachingService, args):
    return await service.inner.get_enrollment_by_id(args["enrollment_id"])


class CachingEnrollmentService(CachingService):
    """
    Cache decorator cho EnrollmentService.

    Enrollment lists are scoped under their parent, so they share keys with
    ``get_student_enrollments``, ``get_course_enrollments`` and
    ``get_class_enrollments`` of the parent services.
    """

    entity_type = "enrollment"

    @cached_read("detail", key=lambda enrollment_id: entity_key("enrollment", enrollment_id))
    async def get_enrollment_by_id(self, enrollment_id: int):
        return await self.inner.get_enrollment_by_id(enrollment_id)

    @cached_read("list", key=lambda request: list_key("enrollment", request))
    async def get_all_enrollments(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_enrollments(request)

    @cached_read(
        "by_parent",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "enrollment", request
        ),
    )
    async def get_enrollments_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_enrollments_by_student(student_id, request)

    @cached_read(
        "by_parent",
        key=lambda course_id, request: scoped_list_key(
            "course", course_id, "enrollment", request
        ),
    )
    async def get_enrollments_by_course(
        self, course_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_enrollments_by_course(course_id, request)

    @cached_read(
        "by_parent",
        key=lambda class_id, request: scoped_list_key(
            "class", class_id, "enrollment", request
        ),
    )
    async def get_enrollments_by_class(
        self, class_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_enrollments_by_class(class_id, request)

    @invalidates(Mutation.CREATED)
    async def create_enrollment(self, payload: EnrollmentCreate):
        return await self.inner.create_enrollment(payload)

    @invalidates(Mutation.UPDATED, entity_id="enrollment_id", snapshot=_stored_enrollment)
    async def update_enrollment(self, enrollment_id: int, payload: EnrollmentUpdate):
        return await self.inner.update_enrollment(enrollment_id, payload)

    @invalidates(Mutation.DELETED, entity_id="enrollment_id", snapshot=_stored_enrollment)
    async def delete_enrollment(self, enrollment_id: int):
        return await self.inner.delete_enrollment(enrollment_id)

    @invalidates(
        Mutation.STATUS_CHANGED, entity_id="enrollment_id", snapshot=_stored_enrollment
    )
    async def update_enrollment_status(self, enrollment_id: int, status: str):
        return await self.inner.update_enrollment_status(enrollment_id, status)
