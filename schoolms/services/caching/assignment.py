from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_list_key, view_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.assessment import AssignmentCreate, AssignmentUpdate
from schoolms.schemas.common import SearchRequest


async def _stored_assignment(service: CachingService, args):
    return await service.inner.get_assignment_by_id(args["assignment_id"])


class CachingAssignmentService(CachingService):
    entity_type = "assignment"

    @cached_read("detail", key=lambda assignment_id: entity_key("assignment", assignment_id))
    async def get_assignment_by_id(self, assignment_id: int):
        return await self.inner.get_assignment_by_id(assignment_id)

    @cached_read(
        "detail", key=lambda assignment_id: view_key("assignment", "detail", assignment_id)
    )
    async def get_assignment_detail(self, assignment_id: int):
        return await self.inner.get_assignment_detail(assignment_id)

    @cached_read("list", key=lambda request: list_key("assignment", request))
    async def get_all_assignments(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_assignments(request)

    @cached_read(
        "by_parent",
        key=lambda class_id, request: scoped_list_key(
            "class", class_id, "assignment", request
        ),
    )
    async def get_assignments_by_class(
        self, class_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_assignments_by_class(class_id, request)

    @cached_read(
        "by_parent",
        key=lambda teacher_id, request: scoped_list_key(
            "teacher", teacher_id, "assignment", request
        ),
    )
    async def get_assignments_by_teacher(
        self, teacher_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_assignments_by_teacher(teacher_id, request)

    @invalidates(Mutation.CREATED)
    async def create_assignment(self, payload: AssignmentCreate):
        return await self.inner.create_assignment(payload)

    @invalidates(Mutation.UPDATED, entity_id="assignment_id", snapshot=_stored_assignment)
    async def update_assignment(self, assignment_id: int, payload: AssignmentUpdate):
        return await self.inner.update_assignment(assignment_id, payload)

    @invalidates(Mutation.DELETED, entity_id="assignment_id", snapshot=_stored_assignment)
    async def delete_assignment(self, assignment_id: int):
        return await self.inner.delete_assignment(assignment_id)
