"""
Typed filters rendered into YouTrack's search query language.

    >>> IssueFilter(project="MYD", created_from="2025-07-01", created_to="2025-07-31").to_query()
    'project: MYD created: 2025-07-01 .. 2025-07-31'
"""

from __future__ import annotations

import re
from abc import abstractmethod
from datetime import date, datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

QueryValue = Union[str, int, date, datetime]

RANGE_SEPARATOR = ".."
OPEN_BOUND = "*"

# Whitespace, clause separator, range separator, quotes, value lists and braces.
_RESERVED_RE = re.compile(r'\s|:|\.\.|"|,|\{|\}')
_RESERVED_NON_SPACE_RE = re.compile(r':|\.\.|"|,|\{|\}')


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def format_value(value: QueryValue) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def quote(text: str) -> str:
    """Wrap text in double quotes, escaping backslashes and embedded quotes."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def escape_value(value: QueryValue) -> str:
    text = format_value(value)
    if _RESERVED_RE.search(text):
        return quote(text)
    return text


class QueryBuilder:
    """
    Accumulates query clauses in call order.
    Absent values (None or blank strings) are skipped, never rendered empty.
    """

    def __init__(self) -> None:
        self._clauses: List[str] = []
        self._text: Optional[str] = None

    def field(self, key: str, value: Optional[QueryValue]) -> "QueryBuilder":
        if not _is_absent(value):
            self._clauses.append(f"{key}: {escape_value(value)}")
        return self

    def each(self, key: str, values: Optional[List[QueryValue]]) -> "QueryBuilder":
        for value in values or []:
            self.field(key, value)
        return self

    def range(
        self, key: str, lo: Optional[QueryValue], hi: Optional[QueryValue]
    ) -> "QueryBuilder":
        if _is_absent(lo) and _is_absent(hi):
            return self
        lo_text = OPEN_BOUND if _is_absent(lo) else escape_value(lo)
        hi_text = OPEN_BOUND if _is_absent(hi) else escape_value(hi)
        self._clauses.append(f"{key}: {lo_text} {RANGE_SEPARATOR} {hi_text}")
        return self

    def text(self, value: Optional[str]) -> "QueryBuilder":
        if _is_absent(value):
            return self
        normalized = " ".join(value.split())
        # Plain words stay free-text terms; anything clause-like gets quoted.
        if _RESERVED_NON_SPACE_RE.search(normalized):
            normalized = quote(normalized)
        self._text = normalized
        return self

    def build(self) -> str:
        parts = list(self._clauses)
        if self._text:
            parts.append(self._text)
        return " ".join(parts)


class QueryFilter(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    @abstractmethod
    def to_query(self) -> str:
        """Render the filter as a YouTrack query string."""


class IssueFilter(QueryFilter):
    project: Optional[str] = None
    assignee: Optional[str] = None
    reporter: Optional[str] = None
    state: Optional[str] = None
    type: Optional[str] = None
    priority: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_from: Optional[QueryValue] = None
    created_to: Optional[QueryValue] = None
    updated_from: Optional[QueryValue] = None
    updated_to: Optional[QueryValue] = None
    spent_time_from: Optional[str] = None  # e.g. "1h", "2d"
    spent_time_to: Optional[str] = None
    free_text: Optional[str] = None

    def to_query(self) -> str:
        return (
            QueryBuilder()
            .field("project", self.project)
            .field("assignee", self.assignee)
            .field("reporter", self.reporter)
            .field("state", self.state)
            .field("type", self.type)
            .field("priority", self.priority)
            .each("tag", list(self.tags))
            .range("created", self.created_from, self.created_to)
            .range("updated", self.updated_from, self.updated_to)
            .range("spent time", self.spent_time_from, self.spent_time_to)
            .text(self.free_text)
            .build()
        )


class WorkItemFilter(QueryFilter):
    project: Optional[str] = None
    issue: Optional[str] = None
    author: Optional[str] = None
    work_from: Optional[QueryValue] = None
    work_to: Optional[QueryValue] = None
    created_from: Optional[QueryValue] = None
    created_to: Optional[QueryValue] = None
    free_text: Optional[str] = None

    def to_query(self) -> str:
        return (
            QueryBuilder()
            .field("project", self.project)
            .field("issue id", self.issue)
            .field("work author", self.author)
            .range("work date", self.work_from, self.work_to)
            .range("created", self.created_from, self.created_to)
            .text(self.free_text)
            .build()
        )


class ArticleFilter(QueryFilter):
    project: Optional[str] = None
    author: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    free_text: Optional[str] = None

    def to_query(self) -> str:
        return (
            QueryBuilder()
            .field("project", self.project)
            .field("author", self.author)
            .each("tag", list(self.tags))
            .text(self.free_text)
            .build()
        )


def build_query(query_filter: Optional[QueryFilter]) -> str:
    if query_filter is None:
        return ""
    return query_filter.to_query()


__all__ = [
    "QueryBuilder",
    "QueryFilter",
    "IssueFilter",
    "WorkItemFilter",
    "ArticleFilter",
    "build_query",
    "escape_value",
    "quote",
]
