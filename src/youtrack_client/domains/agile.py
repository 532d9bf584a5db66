from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Optional, Union

from ..models import AgileBoard, Sprint
from ..paging import DEFAULT_PAGE_SIZE, Pager
from ._base import DomainClient, drop_none

BOARD_FIELDS = (
    "id,name,owner(id,login,fullName),projects(id,name,shortName),"
    "sprints(id,name),currentSprint(id,name),"
    "columnSettings(columns(id,presentation,isResolved,ordinal))"
)
SPRINT_FIELDS = "id,name,goal,start,finish,archived,issues(id,idReadable,summary)"

DateLike = Union[date, datetime, str]


def to_epoch_millis(value: DateLike) -> int:
    """Dates (or ISO strings) become UTC-midnight epoch millis, as YouTrack stores them."""
    if isinstance(value, str):
        value = date.fromisoformat(value)
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    else:
        dt = datetime.combine(value, time.min, tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


class AgileClient(DomainClient):
    domain = "agile"

    def list_boards(
        self,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[AgileBoard]:
        return self._paginate(
            AgileBoard,
            "/api/agiles",
            params={"fields": BOARD_FIELDS},
            page_size=page_size,
            limit=limit,
            operation="list_boards",
        )

    async def get_board(self, board_id: str) -> AgileBoard:
        return await self._get_model(
            AgileBoard,
            f"/api/agiles/{board_id}",
            params={"fields": BOARD_FIELDS},
            operation="get_board",
        )

    def list_sprints(
        self,
        board_id: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[Sprint]:
        return self._paginate(
            Sprint,
            f"/api/agiles/{board_id}/sprints",
            params={"fields": SPRINT_FIELDS},
            page_size=page_size,
            limit=limit,
            operation="list_sprints",
        )

    async def get_sprint(self, board_id: str, sprint_id: str) -> Sprint:
        return await self._get_model(
            Sprint,
            f"/api/agiles/{board_id}/sprints/{sprint_id}",
            params={"fields": SPRINT_FIELDS},
            operation="get_sprint",
        )

    async def create_sprint(
        self,
        board_id: str,
        *,
        name: str,
        start: Optional[DateLike] = None,
        finish: Optional[DateLike] = None,
        goal: Optional[str] = None,
    ) -> Sprint:
        if not name or not name.strip():
            raise ValueError("Sprint name must not be empty.")
        payload = drop_none(
            {
                "name": name,
                "goal": goal,
                "start": to_epoch_millis(start) if start is not None else None,
                "finish": to_epoch_millis(finish) if finish is not None else None,
            }
        )
        return await self._post_model(
            Sprint,
            f"/api/agiles/{board_id}/sprints",
            json=payload,
            params={"fields": SPRINT_FIELDS},
            operation="create_sprint",
        )

    async def assign_issue_to_sprint(
        self, board_id: str, sprint_id: str, issue_id: str
    ) -> None:
        await self._post(
            f"/api/agiles/{board_id}/sprints/{sprint_id}/issues",
            json={"$type": "Issue", "id": issue_id},
            operation="assign_issue_to_sprint",
        )

    async def remove_issue_from_sprint(
        self, board_id: str, sprint_id: str, issue_id: str
    ) -> None:
        await self._delete(
            f"/api/agiles/{board_id}/sprints/{sprint_id}/issues/{issue_id}",
            operation="remove_issue_from_sprint",
        )
