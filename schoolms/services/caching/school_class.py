from typing import Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import entity_key, list_key, scoped_list_key, view_key
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.academics import ClassCreate, ClassUpdate
from schoolms.schemas.common import SearchRequest


async def _stored_class(service: CachingService, args):
    return await service.inner.get_class_by_id(args["class_id"])


class CachingClassService(CachingService):
    entity_type = "class"

    @cached_read("detail", key=lambda class_id: entity_key("class", class_id))
    async def get_class_by_id(self, class_id: int):
        return await self.inner.get_class_by_id(class_id)

    @cached_read("detail", key=lambda class_id: view_key("class", "detail", class_id))
    async def get_class_detail(self, class_id: int):
        return await self.inner.get_class_detail(class_id)

    @cached_read("list", key=lambda request: list_key("class", request))
    async def get_all_classes(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_classes(request)

    @cached_read(
        "enrollment_list",
        key=lambda class_id, request: scoped_list_key(
            "class", class_id, "enrollment", request
        ),
    )
    async def get_class_enrollments(
        self, class_id: int, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_class_enrollments(class_id, request)

    @invalidates(Mutation.CREATED)
    async def create_class(self, payload: ClassCreate):
        return await self.inner.create_class(payload)

    @invalidates(Mutation.UPDATED, entity_id="class_id", snapshot=_stored_class)
    async def update_class(self, class_id: int, payload: ClassUpdate):
        return await self.inner.update_class(class_id, payload)

    @invalidates(Mutation.DELETED, entity_id="class_id", snapshot=_stored_class)
    async def delete_class(self, class_id: int):
        return await self.inner.delete_class(class_id)

    @invalidates(Mutation.ASSIGNED, entity_id="class_id", snapshot=_stored_class)
    async def assign_teacher_to_class(self, class_id: int, teacher_id: int):
        return await self.inner.assign_teacher_to_class(class_id, teacher_id)

    @invalidates(Mutation.UNASSIGNED, entity_id="class_id", snapshot=_stored_class)
    async def remove_teacher_from_class(self, class_id: int):
        return await self.inner.remove_teacher_from_class(class_id)
