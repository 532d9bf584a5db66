from __future__ import annotations

from typing import List, Optional

from ..models import BundleValue, Project, ProjectCustomField
from ..paging import DEFAULT_PAGE_SIZE, Pager
from ._base import DomainClient

PROJECT_FIELDS = "id,name,shortName,description,archived,leader(id,login,fullName)"
PROJECT_CUSTOM_FIELD_FIELDS = (
    "id,canBeEmpty,emptyFieldText,isPublic,ordinal,"
    "field(id,name,fieldType(id,presentation))"
)
PROJECT_CUSTOM_FIELD_VALUES_FIELDS = (
    "id,field(id,name),bundle(id,values(id,name,description,archived,ordinal))"
)


def _norm_text(val: Optional[str]) -> str:
    if not isinstance(val, str):
        return ""
    return " ".join(val.split()).strip().casefold()


class ProjectsClient(DomainClient):
    domain = "projects"

    def list_projects(
        self,
        *,
        include_archived: bool = True,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[Project]:
        """
        Lazily list projects visible to the token.
        An empty upstream array yields an empty sequence, not an error.
        """
        params = {"fields": PROJECT_FIELDS}
        if not include_archived:
            params["query"] = "archived: false"
        return self._paginate(
            Project,
            "/api/admin/projects",
            params=params,
            page_size=page_size,
            limit=limit,
            operation="list_projects",
        )

    async def get_project(self, project_id: str) -> Project:
        return await self._get_model(
            Project,
            f"/api/admin/projects/{project_id}",
            params={"fields": PROJECT_FIELDS},
            operation="get_project",
        )

    async def get_project_custom_fields(
        self, project_id: str
    ) -> List[ProjectCustomField]:
        """
        Custom field descriptors attached to a project, in server order.
        A project without custom fields returns [], distinct from a failed fetch.
        """
        return await self._get_list(
            ProjectCustomField,
            f"/api/admin/projects/{project_id}/customFields",
            params={"fields": PROJECT_CUSTOM_FIELD_FIELDS},
            operation="get_project_custom_fields",
        )

    async def get_custom_field_values(
        self, project_id: str, field_name: str
    ) -> List[BundleValue]:
        """
        Allowed values of a bundle-backed custom field (State, Priority, Type...).
        Raises ValueError if the project has no field by that name.
        """
        fields = await self._get_list(
            ProjectCustomField,
            f"/api/admin/projects/{project_id}/customFields",
            params={"fields": PROJECT_CUSTOM_FIELD_VALUES_FIELDS},
            operation="get_custom_field_values",
        )
        wanted = _norm_text(field_name)
        for field in fields:
            if _norm_text(field.name) == wanted:
                return list(field.bundle.values) if field.bundle else []

        available = sorted(f.name for f in fields if f.name)
        raise ValueError(
            f"Custom field '{field_name}' not found in project {project_id}. "
            f"Available: {', '.join(available) or 'none'}"
        )
