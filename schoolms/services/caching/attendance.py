from datetime import date
from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_key, scoped_list_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.assessment import (
    AttendanceCreate,
    AttendanceUpdate,
    BulkAttendanceCreate,
)
from schoolms.schemas.common import SearchRequest


async def _stored_attendance(service: CachingService, args):
    return await service.inner.get_attendance_by_id(args["attendance_id"])


class CachingAttendanceService(CachingService):
    """
    Cache decorator cho AttendanceService.

    Attendance is cached per student, per class and per day, plus the derived
    summary and report values. A write touches all of them for the record's
    student, class and date.
    """

    entity_type = "attendance"

    @cached_read("detail", key=lambda attendance_id: entity_key("attendance", attendance_id))
    async def get_attendance_by_id(self, attendance_id: int):
        return await self.inner.get_attendance_by_id(attendance_id)

    @cached_read("list", key=lambda request: list_key("attendance", request))
    async def get_all_attendance(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_attendance(request)

    @cached_read(
        "by_parent",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "attendance", request
        ),
    )
    async def get_attendance_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_attendance_by_student(student_id, request)

    @cached_read(
        "by_parent",
        key=lambda class_id, request: scoped_list_key(
            "class", class_id, "attendance", request
        ),
    )
    async def get_attendance_by_class(
        self, class_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_attendance_by_class(class_id, request)

    @cached_read(
        "by_parent",
        key=lambda attendance_date, request: scoped_list_key(
            "date", attendance_date, "attendance", request
        ),
    )
    async def get_attendance_by_date(
        self, attendance_date: date, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_attendance_by_date(attendance_date, request)

    @cached_read(
        "summary",
        key=lambda student_id, course_id: scoped_key(
            "student", student_id, "attendance_summary", "course", course_id
        ),
    )
    async def get_attendance_summary(self, student_id: int, course_id: int):
        return await self.inner.get_attendance_summary(student_id, course_id)

    @cached_read(
        "report",
        key=lambda class_id, start_date, end_date: scoped_key(
            "class", class_id, "attendance_report", start_date, end_date
        ),
    )
    async def generate_attendance_report(
        self, class_id: int, start_date: date, end_date: date
    ):
        return await self.inner.generate_attendance_report(class_id, start_date, end_date)

    @invalidates(Mutation.CREATED)
    async def create_attendance(self, payload: AttendanceCreate):
        return await self.inner.create_attendance(payload)

    @invalidates(Mutation.UPDATED, entity_id="attendance_id", snapshot=_stored_attendance)
    async def update_attendance(self, attendance_id: int, payload: AttendanceUpdate):
        return await self.inner.update_attendance(attendance_id, payload)

    @invalidates(Mutation.DELETED, entity_id="attendance_id", snapshot=_stored_attendance)
    async def delete_attendance(self, attendance_id: int):
        return await self.inner.delete_attendance(attendance_id)

    @invalidates(Mutation.BULK_CREATED)
    async def bulk_create_attendance(self, payload: BulkAttendanceCreate):
        return await self.inner.bulk_create_attendance(payload)
