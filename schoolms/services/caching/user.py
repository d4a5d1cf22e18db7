from typing import List, Optional

from schoolms.cache.decorators import CachingService, cached_read, invalidates
from schoolms.cache.keys import (
    entity_key,
    list_key,
    scoped_key,
    scoped_list_key,
    static_key,
    view_key,
)
from schoolms.cache.strategies.event_based import Mutation
from schoolms.schemas.common import SearchRequest
from schoolms.schemas.people import RoleCreate, RoleUpdate, UserRolesUpdate, UserUpdate


class CachingUserService(CachingService):
    """
    Cache decorator cho UserService (users and roles).

    Role membership is cached per role; any user write drops every role's user
    lists through their family tags, since the roles a user held before the
    write are not known here.
    """

    entity_type = "user"

    @cached_read("detail", key=lambda user_id: entity_key("user", user_id))
    async def get_user_by_id(self, user_id: int):
        return await self.inner.get_user_by_id(user_id)

    @cached_read("profile", key=lambda user_id: view_key("user", "profile", user_id))
    async def get_user_profile(self, user_id: int):
        return await self.inner.get_user_profile(user_id)

    @cached_read("list", key=lambda request: list_key("user", request))
    async def get_all_users(self, request: Optional[SearchRequest] = None):
        return await self.inner.get_all_users(request)

    @cached_read(
        "in_role",
        key=lambda role_name, request: scoped_list_key("role", role_name, "user", request),
    )
    async def get_users_by_role(
        self, role_name: str, request: Optional[SearchRequest] = None
    ):
        return await self.inner.get_users_by_role(role_name, request)

    @cached_read(
        "list", key=lambda query, request: list_key("user", request, "search", query)
    )
    async def search_users(self, query: str, request: Optional[SearchRequest] = None):
        return await self.inner.search_users(query, request)

    @cached_read("roles", key=lambda: static_key("role", "list"))
    async def get_all_roles(self):
        return await self.inner.get_all_roles()

    @cached_read("in_role", key=lambda role_name: scoped_key("role", role_name, "users"))
    async def get_users_in_role(self, role_name: str):
        return await self.inner.get_users_in_role(role_name)

    @cached_read("statistics", key=lambda: static_key("user", "statistics"))
    async def get_user_statistics(self):
        return await self.inner.get_user_statistics()

    # User writes

    @invalidates(Mutation.UPDATED, entity_id="user_id")
    async def update_user(self, user_id: int, payload: UserUpdate):
        return await self.inner.update_user(user_id, payload)

    @invalidates(Mutation.DELETED, entity_id="user_id")
    async def delete_user(self, user_id: int):
        return await self.inner.delete_user(user_id)

    @invalidates(Mutation.STATUS_CHANGED, entity_id="user_id")
    async def activate_user(self, user_id: int):
        return await self.inner.activate_user(user_id)

    @invalidates(Mutation.STATUS_CHANGED, entity_id="user_id")
    async def deactivate_user(self, user_id: int):
        return await self.inner.deactivate_user(user_id)

    @invalidates(Mutation.BULK_DELETED)
    async def bulk_delete_users(self, user_ids: List[int]):
        return await self.inner.bulk_delete_users(user_ids)

    @invalidates(Mutation.ROLES_CHANGED, entity_id="user_id")
    async def update_user_roles(self, user_id: int, payload: UserRolesUpdate):
        return await self.inner.update_user_roles(user_id, payload)

    @invalidates(Mutation.ROLES_CHANGED, entity_id="user_id")
    async def assign_role_to_user(self, user_id: int, role_name: str):
        return await self.inner.assign_role_to_user(user_id, role_name)

    @invalidates(Mutation.ROLES_CHANGED, entity_id="user_id")
    async def remove_role_from_user(self, user_id: int, role_name: str):
        return await self.inner.remove_role_from_user(user_id, role_name)

    # Role writes

    @invalidates(Mutation.CREATED, entity="role")
    async def create_role(self, payload: RoleCreate):
        return await self.inner.create_role(payload)

    @invalidates(Mutation.UPDATED, entity="role", entity_id="role_name")
    async def update_role(self, role_name: str, payload: RoleUpdate):
        return await self.inner.update_role(role_name, payload)

    @invalidates(Mutation.DELETED, entity="role", entity_id="role_name")
    async def delete_role(self, role_name: str):
        return await self.inner.delete_role(role_name)
