from __future__ import annotations

from typing import Any, Dict, Optional

from ..models import CustomField, Group, Project, User
from ..paging import DEFAULT_PAGE_SIZE, Pager
from ._base import DomainClient, drop_none
from .projects import PROJECT_FIELDS

USER_FIELDS = "id,login,fullName,name,email,banned,guest"
GROUP_FIELDS = "id,name,description,usersCount"
CUSTOM_FIELD_FIELDS = "id,name,fieldType(id,presentation)"


class AdminClient(DomainClient):
    domain = "admin"

    async def get_current_user(self) -> User:
        """The user the token belongs to."""
        return await self._get_model(
            User,
            "/api/users/me",
            params={"fields": USER_FIELDS},
            operation="get_current_user",
        )

    def list_users(
        self,
        query: Optional[str] = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[User]:
        params: Dict[str, Any] = {"fields": USER_FIELDS}
        if query and query.strip():
            params["query"] = query.strip()
        return self._paginate(
            User,
            "/api/users",
            params=params,
            page_size=page_size,
            limit=limit,
            operation="list_users",
        )

    def list_groups(
        self,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[Group]:
        return self._paginate(
            Group,
            "/api/groups",
            params={"fields": GROUP_FIELDS},
            page_size=page_size,
            limit=limit,
            operation="list_groups",
        )

    def list_group_members(
        self,
        group_id: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[User]:
        return self._paginate(
            User,
            f"/api/groups/{group_id}/users",
            params={"fields": USER_FIELDS},
            page_size=page_size,
            limit=limit,
            operation="list_group_members",
        )

    async def add_user_to_group(self, group_id: str, user_id: str) -> None:
        await self._post(
            f"/api/groups/{group_id}/users",
            json={"id": user_id},
            operation="add_user_to_group",
        )

    async def remove_user_from_group(self, group_id: str, user_id: str) -> None:
        await self._delete(
            f"/api/groups/{group_id}/users/{user_id}",
            operation="remove_user_from_group",
        )

    def list_custom_fields(
        self,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[CustomField]:
        """Global custom field prototypes, independent of any project."""
        return self._paginate(
            CustomField,
            "/api/admin/customFieldSettings/customFields",
            params={"fields": CUSTOM_FIELD_FIELDS},
            page_size=page_size,
            limit=limit,
            operation="list_custom_fields",
        )

    async def create_project(
        self,
        *,
        name: str,
        short_name: str,
        leader_id: str,
        description: Optional[str] = None,
    ) -> Project:
        if not name.strip() or not short_name.strip():
            raise ValueError("Project name and short name must not be empty.")
        payload = drop_none(
            {
                "name": name,
                "shortName": short_name,
                "leader": {"id": leader_id},
                "description": description,
            }
        )
        return await self._post_model(
            Project,
            "/api/admin/projects",
            json=payload,
            params={"fields": PROJECT_FIELDS},
            operation="create_project",
        )

    async def update_project(
        self,
        project_id: str,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        leader_id: Optional[str] = None,
    ) -> Project:
        payload = drop_none(
            {
                "name": name,
                "description": description,
                "leader": {"id": leader_id} if leader_id else None,
            }
        )
        if not payload:
            raise ValueError("No fields provided to update.")
        return await self._post_model(
            Project,
            f"/api/admin/projects/{project_id}",
            json=payload,
            params={"fields": PROJECT_FIELDS},
            operation="update_project",
        )

    async def archive_project(self, project_id: str, *, archived: bool = True) -> Project:
        return await self._post_model(
            Project,
            f"/api/admin/projects/{project_id}",
            json={"archived": archived},
            params={"fields": PROJECT_FIELDS},
            operation="archive_project",
        )

    async def delete_project(self, project_id: str) -> None:
        await self._delete(
            f"/api/admin/projects/{project_id}", operation="delete_project"
        )
