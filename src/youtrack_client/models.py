from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class YouTrackModel(BaseModel):
    """
    Base model for YouTrack JSON entities.
    Every entity may carry a "$type" discriminator and only the fields the
    request selected, so everything past `id` is optional and unknown keys
    are ignored.
    """

    entity_type: Optional[str] = Field(default=None, alias="$type")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# --- Lightweight Reference Models ---


class UserRef(YouTrackModel):
    id: Optional[str] = None
    login: Optional[str] = None
    full_name: Optional[str] = Field(default=None, alias="fullName")
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.name or self.login or "Unknown"


class ProjectRef(YouTrackModel):
    id: Optional[str] = None
    name: Optional[str] = None
    short_name: Optional[str] = Field(default=None, alias="shortName")


class IssueRef(YouTrackModel):
    id: str
    id_readable: Optional[str] = Field(default=None, alias="idReadable")
    summary: Optional[str] = None
    project: Optional[ProjectRef] = None


class NamedRef(YouTrackModel):
    id: Optional[str] = None
    name: Optional[str] = None


class Tag(NamedRef):
    pass


# --- Core Entities ---


class User(UserRef):
    id: str
    banned: Optional[bool] = None
    guest: Optional[bool] = None


class Group(YouTrackModel):
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    users_count: Optional[int] = Field(default=None, alias="usersCount")


class Project(YouTrackModel):
    id: str
    name: Optional[str] = None
    short_name: Optional[str] = Field(default=None, alias="shortName")
    description: Optional[str] = None
    archived: bool = False
    leader: Optional[UserRef] = None


class FieldType(YouTrackModel):
    id: Optional[str] = None
    presentation: Optional[str] = None


class CustomField(YouTrackModel):
    id: str
    name: Optional[str] = None
    field_type: Optional[FieldType] = Field(default=None, alias="fieldType")


class BundleValue(YouTrackModel):
    id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    archived: bool = False
    ordinal: Optional[int] = None


class Bundle(YouTrackModel):
    id: Optional[str] = None
    values: List[BundleValue] = Field(default_factory=list)


class ProjectCustomField(YouTrackModel):
    """Descriptor of a custom field as attached to one project."""

    id: str
    field: Optional[CustomField] = None
    can_be_empty: Optional[bool] = Field(default=None, alias="canBeEmpty")
    empty_field_text: Optional[str] = Field(default=None, alias="emptyFieldText")
    is_public: Optional[bool] = Field(default=None, alias="isPublic")
    ordinal: Optional[int] = None
    bundle: Optional[Bundle] = None

    @property
    def name(self) -> Optional[str]:
        return self.field.name if self.field else None

    @property
    def field_type(self) -> Optional[str]:
        if self.field and self.field.field_type:
            return self.field.field_type.id
        return None


class IssueCustomField(YouTrackModel):
    id: Optional[str] = None
    name: Optional[str] = None
    value: Any = None


class Issue(YouTrackModel):
    id: str
    id_readable: Optional[str] = Field(default=None, alias="idReadable")
    summary: Optional[str] = None
    description: Optional[str] = None
    project: Optional[ProjectRef] = None
    reporter: Optional[UserRef] = None
    created: Optional[int] = None  # epoch millis
    updated: Optional[int] = None
    resolved: Optional[int] = None
    custom_fields: List[IssueCustomField] = Field(
        default_factory=list, alias="customFields"
    )
    tags: List[Tag] = Field(default_factory=list)

    def custom_field(self, name: str) -> Any:
        """Value of the named custom field, or None when absent."""
        for cf in self.custom_fields:
            if cf.name == name:
                return cf.value
        return None


class IssueComment(YouTrackModel):
    id: str
    text: Optional[str] = None
    author: Optional[UserRef] = None
    created: Optional[int] = None
    updated: Optional[int] = None
    deleted: Optional[bool] = None


class LinkType(YouTrackModel):
    name: Optional[str] = None
    directed: Optional[bool] = None


class IssueLink(YouTrackModel):
    id: str
    direction: Optional[str] = None
    link_type: Optional[LinkType] = Field(default=None, alias="linkType")
    issues: List[IssueRef] = Field(default_factory=list)


# --- Agile ---


class SprintRef(YouTrackModel):
    id: str
    name: Optional[str] = None


class Sprint(YouTrackModel):
    id: str
    name: Optional[str] = None
    goal: Optional[str] = None
    start: Optional[int] = None
    finish: Optional[int] = None
    archived: bool = False
    issues: List[IssueRef] = Field(default_factory=list)


class BoardColumn(YouTrackModel):
    id: Optional[str] = None
    presentation: Optional[str] = None
    is_resolved: Optional[bool] = Field(default=None, alias="isResolved")
    ordinal: Optional[int] = None


class AgileBoard(YouTrackModel):
    id: str
    name: Optional[str] = None
    owner: Optional[UserRef] = None
    projects: List[ProjectRef] = Field(default_factory=list)
    sprints: List[SprintRef] = Field(default_factory=list)
    current_sprint: Optional[SprintRef] = Field(default=None, alias="currentSprint")
    columns: List[BoardColumn] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _flatten_column_settings(cls, data: Any) -> Any:
        # Columns live under columnSettings in the API payload.
        if isinstance(data, dict) and "columns" not in data:
            settings = data.get("columnSettings")
            if isinstance(settings, dict):
                return {**data, "columns": settings.get("columns") or []}
        return data


# --- Time tracking ---


class WorkItemDuration(YouTrackModel):
    minutes: Optional[int] = None
    presentation: Optional[str] = None


class WorkItem(YouTrackModel):
    id: str
    issue: Optional[IssueRef] = None
    author: Optional[UserRef] = None
    date: Optional[int] = None  # epoch millis, start of the work day (UTC)
    duration: Optional[WorkItemDuration] = None
    description: Optional[str] = Field(default=None, alias="text")
    type: Optional[NamedRef] = None
    created: Optional[int] = None
    updated: Optional[int] = None

    @property
    def minutes(self) -> Optional[int]:
        return self.duration.minutes if self.duration else None

    @property
    def work_date(self) -> Optional[date]:
        if self.date is None:
            return None
        return datetime.fromtimestamp(self.date / 1000, tz=timezone.utc).date()


class TimeReport(BaseModel):
    """Minutes logged by a set of work items, totalled overall and per key."""

    total_minutes: int = 0
    work_item_count: int = 0
    by_author: Dict[str, int] = Field(default_factory=dict)
    by_issue: Dict[str, int] = Field(default_factory=dict)
    by_type: Dict[str, int] = Field(default_factory=dict)

    def add(self, item: WorkItem) -> None:
        minutes = item.minutes or 0
        self.total_minutes += minutes
        self.work_item_count += 1
        author = item.author.login if item.author and item.author.login else "unknown"
        self.by_author[author] = self.by_author.get(author, 0) + minutes
        if item.issue:
            key = item.issue.id_readable or item.issue.id
            self.by_issue[key] = self.by_issue.get(key, 0) + minutes
        work_type = item.type.name if item.type and item.type.name else "No type"
        self.by_type[work_type] = self.by_type.get(work_type, 0) + minutes


# --- Knowledge base ---


class ArticleRef(YouTrackModel):
    id: str
    id_readable: Optional[str] = Field(default=None, alias="idReadable")
    summary: Optional[str] = None


class Article(YouTrackModel):
    id: str
    id_readable: Optional[str] = Field(default=None, alias="idReadable")
    summary: Optional[str] = None
    content: Optional[str] = None
    project: Optional[ProjectRef] = None
    reporter: Optional[UserRef] = None
    parent_article: Optional[ArticleRef] = Field(default=None, alias="parentArticle")
    child_articles: List[ArticleRef] = Field(
        default_factory=list, alias="childArticles"
    )
    tags: List[Tag] = Field(default_factory=list)
    created: Optional[int] = None
    updated: Optional[int] = None


# --- Input Models (Operation Payloads) ---


class IssueCreateInput(BaseModel):
    project_id: str
    summary: str
    description: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    state: Optional[str] = None
    assignee: Optional[str] = None  # login
    tags: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid")


class IssueUpdateInput(BaseModel):
    summary: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    state: Optional[str] = None
    assignee: Optional[str] = None
    tags: Optional[List[str]] = None

    model_config = ConfigDict(extra="forbid")


# --- Health ---


class HealthState(str, Enum):
    OK = "ok"
    DEGRADED = "degraded"
    UNREACHABLE = "unreachable"


class HealthStatus(BaseModel):
    status: HealthState
    base_url: str
    last_checked_at: datetime
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
