from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from ..models import (
    Issue,
    IssueComment,
    IssueCreateInput,
    IssueLink,
    IssueUpdateInput,
)
from ..paging import DEFAULT_PAGE_SIZE, Pager
from ..query import IssueFilter, build_query
from ._base import DomainClient, drop_none

ISSUE_FIELDS = (
    "id,idReadable,summary,description,created,updated,resolved,"
    "project(id,name,shortName),reporter(id,login,fullName),"
    "customFields(id,name,value(id,name,login,fullName,presentation,minutes)),"
    "tags(id,name)"
)
COMMENT_FIELDS = "id,text,created,updated,deleted,author(id,login,fullName)"
LINK_FIELDS = "id,direction,linkType(name,directed),issues(id,idReadable,summary)"

EPIC_TYPE = "Epic"
DEFAULT_LINK_TYPE = "Depend"


def _custom_fields(
    *,
    type: Optional[str] = None,
    priority: Optional[str] = None,
    state: Optional[str] = None,
    assignee: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Map the common issue attributes onto YouTrack's custom field payloads."""
    fields: List[Dict[str, Any]] = []
    if type:
        fields.append(
            {
                "$type": "SingleEnumIssueCustomField",
                "name": "Type",
                "value": {"name": type},
            }
        )
    if priority:
        fields.append(
            {
                "$type": "SingleEnumIssueCustomField",
                "name": "Priority",
                "value": {"name": priority},
            }
        )
    if state:
        fields.append(
            {
                "$type": "StateIssueCustomField",
                "name": "State",
                "value": {"name": state},
            }
        )
    if assignee:
        fields.append(
            {
                "$type": "SingleUserIssueCustomField",
                "name": "Assignee",
                "value": {"login": assignee},
            }
        )
    return fields


def _issue_payload(data: Union[IssueCreateInput, IssueUpdateInput]) -> Dict[str, Any]:
    payload: Dict[str, Any] = drop_none(
        {"summary": data.summary, "description": data.description}
    )
    custom_fields = _custom_fields(
        type=data.type,
        priority=data.priority,
        state=data.state,
        assignee=data.assignee,
    )
    if custom_fields:
        payload["customFields"] = custom_fields
    if data.tags is not None:
        payload["tags"] = [{"name": t} for t in data.tags]
    return payload


class IssuesClient(DomainClient):
    domain = "issues"

    async def create_issue(
        self, data: Union[IssueCreateInput, Dict[str, Any]]
    ) -> Issue:
        """
        Create an issue and return it as the service reports it.
        The id always comes from the JSON body, never from a message text.
        """
        data = IssueCreateInput.model_validate(data)
        return await self._create(data, operation="create_issue")

    async def create_epic(
        self,
        *,
        project_id: str,
        summary: str,
        description: Optional[str] = None,
        priority: Optional[str] = None,
        assignee: Optional[str] = None,
    ) -> Issue:
        data = IssueCreateInput(
            project_id=project_id,
            summary=summary,
            description=description,
            type=EPIC_TYPE,
            priority=priority,
            assignee=assignee,
        )
        return await self._create(data, operation="create_epic")

    async def get_issue(self, issue_id: str, *, fields: Optional[str] = None) -> Issue:
        return await self._get_model(
            Issue,
            f"/api/issues/{issue_id}",
            params={"fields": fields or ISSUE_FIELDS},
            operation="get_issue",
        )

    async def update_issue(
        self, issue_id: str, data: Union[IssueUpdateInput, Dict[str, Any]]
    ) -> Issue:
        payload = _issue_payload(IssueUpdateInput.model_validate(data))
        if not payload:
            raise ValueError("No fields provided to update.")
        return await self._post_model(
            Issue,
            f"/api/issues/{issue_id}",
            json=payload,
            params={"fields": ISSUE_FIELDS},
            operation="update_issue",
        )

    async def delete_issue(self, issue_id: str) -> None:
        await self._delete(f"/api/issues/{issue_id}", operation="delete_issue")

    def query_issues(
        self,
        query: Union[IssueFilter, str, None] = None,
        *,
        fields: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[Issue]:
        """Search issues by a typed filter or a raw query string."""
        query_text = query if isinstance(query, str) else build_query(query)
        params: Dict[str, Any] = {"fields": fields or ISSUE_FIELDS}
        if query_text:
            params["query"] = query_text
        return self._paginate(
            Issue,
            "/api/issues",
            params=params,
            page_size=page_size,
            limit=limit,
            operation="query_issues",
        )

    def list_comments(
        self,
        issue_id: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[IssueComment]:
        return self._paginate(
            IssueComment,
            f"/api/issues/{issue_id}/comments",
            params={"fields": COMMENT_FIELDS},
            page_size=page_size,
            limit=limit,
            operation="list_comments",
        )

    async def add_comment(self, issue_id: str, text: str) -> IssueComment:
        if not text or not text.strip():
            raise ValueError("Comment text must not be empty.")
        return await self._post_model(
            IssueComment,
            f"/api/issues/{issue_id}/comments",
            json={"text": text},
            params={"fields": COMMENT_FIELDS},
            operation="add_comment",
        )

    async def update_comment(
        self, issue_id: str, comment_id: str, text: str
    ) -> IssueComment:
        if not text or not text.strip():
            raise ValueError("Comment text must not be empty.")
        return await self._post_model(
            IssueComment,
            f"/api/issues/{issue_id}/comments/{comment_id}",
            json={"text": text},
            params={"fields": COMMENT_FIELDS},
            operation="update_comment",
        )

    async def delete_comment(self, issue_id: str, comment_id: str) -> None:
        await self._delete(
            f"/api/issues/{issue_id}/comments/{comment_id}",
            operation="delete_comment",
        )

    async def list_links(self, issue_id: str) -> List[IssueLink]:
        return await self._get_list(
            IssueLink,
            f"/api/issues/{issue_id}/links",
            params={"fields": LINK_FIELDS},
            operation="list_links",
        )

    async def create_issue_link(
        self,
        source_issue_id: str,
        target_issue_id: str,
        *,
        link_type: str = DEFAULT_LINK_TYPE,
    ) -> IssueLink:
        """Link two issues; with the default type the source depends on the target."""
        return await self._post_model(
            IssueLink,
            f"/api/issues/{source_issue_id}/links",
            json={"linkType": {"name": link_type}, "issues": [{"id": target_issue_id}]},
            params={"fields": LINK_FIELDS},
            operation="create_issue_link",
        )

    async def delete_issue_link(self, issue_id: str, link_id: str) -> None:
        await self._delete(
            f"/api/issues/{issue_id}/links/{link_id}",
            operation="delete_issue_link",
        )

    async def change_issue_state(
        self,
        issue_id: str,
        state: str,
        *,
        resolution: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> Issue:
        """
        Move an issue to another workflow state, optionally setting Resolution.
        The comment, if any, is posted only after the state change succeeded.
        """
        if not state or not state.strip():
            raise ValueError("State must not be empty.")
        custom_fields = _custom_fields(state=state)
        if resolution:
            custom_fields.append(
                {
                    "$type": "SingleEnumIssueCustomField",
                    "name": "Resolution",
                    "value": {"name": resolution},
                }
            )
        issue = await self._post_model(
            Issue,
            f"/api/issues/{issue_id}",
            json={"customFields": custom_fields},
            params={"fields": ISSUE_FIELDS},
            operation="change_issue_state",
        )
        if comment:
            await self.add_comment(issue_id, comment)
        return issue

    async def _create(self, data: IssueCreateInput, *, operation: str) -> Issue:
        payload = {"project": {"id": data.project_id}, **_issue_payload(data)}
        return await self._post_model(
            Issue,
            "/api/issues",
            json=payload,
            params={"fields": ISSUE_FIELDS},
            operation=operation,
        )
