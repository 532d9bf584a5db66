from __future__ import annotations

from typing import Any, Dict, Optional, Union

from ..models import TimeReport, WorkItem
from ..paging import DEFAULT_PAGE_SIZE, Pager
from ..query import WorkItemFilter, build_query
from ..utils.duration import parse_duration_minutes
from ._base import DomainClient, drop_none
from .agile import DateLike, to_epoch_millis

WORK_ITEM_FIELDS = (
    "id,issue(id,idReadable,summary,project(id,name,shortName)),"
    "author(id,login,fullName),date,duration(minutes,presentation),"
    "text,type(id,name),created,updated"
)


def _work_item_payload(
    *,
    duration: Union[str, int, None],
    description: Optional[str],
    date: Optional[DateLike],
    work_type: Optional[str],
) -> Dict[str, Any]:
    return drop_none(
        {
            "duration": (
                {"minutes": parse_duration_minutes(duration)}
                if duration is not None
                else None
            ),
            "text": description,
            "date": to_epoch_millis(date) if date is not None else None,
            "type": {"name": work_type} if work_type else None,
        }
    )


class WorkItemsClient(DomainClient):
    domain = "work_items"

    def query_work_items(
        self,
        query: Union[WorkItemFilter, str, None] = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[WorkItem]:
        """
        Search time-tracking entries across issues.

        Example:
            WorkItemFilter(project="MYD", author="jdoe", work_from="2025-07-01")
            -> project: MYD work author: jdoe work date: 2025-07-01 .. *
        """
        query_text = query if isinstance(query, str) else build_query(query)
        params: Dict[str, Any] = {"fields": WORK_ITEM_FIELDS}
        if query_text:
            params["query"] = query_text
        return self._paginate(
            WorkItem,
            "/api/workItems",
            params=params,
            page_size=page_size,
            limit=limit,
            operation="query_work_items",
        )

    async def time_report(
        self,
        query: Union[WorkItemFilter, str, None] = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> TimeReport:
        """Total logged minutes for every work item matching the filter."""
        report = TimeReport()
        async for item in self.query_work_items(query, page_size=page_size):
            report.add(item)
        return report

    def list_issue_work_items(
        self,
        issue_id: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[WorkItem]:
        return self._paginate(
            WorkItem,
            f"/api/issues/{issue_id}/timeTracking/workItems",
            params={"fields": WORK_ITEM_FIELDS},
            page_size=page_size,
            limit=limit,
            operation="list_issue_work_items",
        )

    async def create_work_item(
        self,
        issue_id: str,
        *,
        duration: Union[str, int],
        description: Optional[str] = None,
        date: Optional[DateLike] = None,
        work_type: Optional[str] = None,
    ) -> WorkItem:
        """
        Log time against an issue. `duration` accepts "2h 30m", "1d", "1.5h"
        or a number of minutes; a missing `date` lets the server use today.
        """
        payload = _work_item_payload(
            duration=duration,
            description=description,
            date=date,
            work_type=work_type,
        )
        return await self._post_model(
            WorkItem,
            f"/api/issues/{issue_id}/timeTracking/workItems",
            json=payload,
            params={"fields": WORK_ITEM_FIELDS},
            operation="create_work_item",
        )

    async def update_work_item(
        self,
        issue_id: str,
        work_item_id: str,
        *,
        duration: Union[str, int, None] = None,
        description: Optional[str] = None,
        date: Optional[DateLike] = None,
        work_type: Optional[str] = None,
    ) -> WorkItem:
        payload = _work_item_payload(
            duration=duration,
            description=description,
            date=date,
            work_type=work_type,
        )
        if not payload:
            raise ValueError("No fields provided to update.")
        return await self._post_model(
            WorkItem,
            f"/api/issues/{issue_id}/timeTracking/workItems/{work_item_id}",
            json=payload,
            params={"fields": WORK_ITEM_FIELDS},
            operation="update_work_item",
        )

    async def delete_work_item(self, issue_id: str, work_item_id: str) -> None:
        await self._delete(
            f"/api/issues/{issue_id}/timeTracking/workItems/{work_item_id}",
            operation="delete_work_item",
        )
