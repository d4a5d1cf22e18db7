from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.academics import DepartmentCreate, DepartmentUpdate
from schoolms.schemas.common import SearchRequest


async def _stored_department(service: CachingService, args):
    """Previous head of department, whose teacher entry also changes."""
    return await service.inner.get_by_id(args["department_id"])


class CachingDepartmentService(CachingService):
    entity_type = "department"

    @cached_read("detail", key=lambda department_id: entity_key("department", department_id))
    async def get_by_id(self, department_id: int):
        return await self.inner.get_by_id(department_id)

    @cached_read("list", key=lambda request: list_key("department", request))
    async def get_all(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all(request)

    @invalidates(Mutation.CREATED)
    async def create(self, payload: DepartmentCreate):
        return await self.inner.create(payload)

    @invalidates(Mutation.UPDATED, entity_id="department_id")
    async def update(self, department_id: int, payload: DepartmentUpdate):
        return await self.inner.update(department_id, payload)

    @invalidates(Mutation.DELETED, entity_id="department_id")
    async def delete(self, department_id: int):
        return await self.inner.delete(department_id)

    @invalidates(Mutation.ASSIGNED, entity_id="department_id", snapshot=_stored_department)
    async def assign_head_of_department(self, department_id: int, teacher_id: int):
        return await self.inner.assign_head_of_department(department_id, teacher_id)
