from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, scoped_key, scoped_list_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.assessment import SubmissionCreate, SubmissionGrade, SubmissionUpdate
from schoolms.schemas.common import SearchRequest


async def _stored_submission(service: CachingService, args):
    return await service.inner.get_submission_by_id(args["submission_id"])


class CachingSubmissionService(CachingService):
    entity_type = "submission"

    @cached_read("detail", key=lambda submission_id: entity_key("submission", submission_id))
    async def get_submission_by_id(self, submission_id: int):
        return await self.inner.get_submission_by_id(submission_id)

    @cached_read(
        "by_parent",
        key=lambda assignment_id, request: scoped_list_key(
            "assignment", assignment_id, "submission", request
        ),
    )
    async def get_submissions_by_assignment(
        self, assignment_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_submissions_by_assignment(assignment_id, request)

    @cached_read(
        "by_parent",
        key=lambda student_id, request: scoped_list_key(
            "student", student_id, "submission", request
        ),
    )
    async def get_submissions_by_student(
        self, student_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_submissions_by_student(student_id, request)

    @cached_read(
        "stats",
        key=lambda assignment_id: scoped_key("assignment", assignment_id, "submission_stats"),
    )
    async def get_submission_stats(self, assignment_id: int):
        return await self.inner.get_submission_stats(assignment_id)

    @invalidates(Mutation.CREATED)
    async def submit_assignment(self, payload: SubmissionCreate):
        return await self.inner.submit_assignment(payload)

    @invalidates(Mutation.UPDATED, entity_id="submission_id", snapshot=_stored_submission)
    async def update_submission(self, submission_id: int, payload: SubmissionUpdate):
        return await self.inner.update_submission(submission_id, payload)

    @invalidates(Mutation.GRADED, entity_id="submission_id", snapshot=_stored_submission)
    async def grade_submission(self, submission_id: int, payload: SubmissionGrade):
        return await self.inner.grade_submission(submission_id, payload)

    @invalidates(Mutation.DELETED, entity_id="submission_id", snapshot=_stored_submission)
    async def delete_submission(self, submission_id: int):
        return await self.inner.delete_submission(submission_id)
