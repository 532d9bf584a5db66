from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from ..models import Article
from ..paging import DEFAULT_PAGE_SIZE, Pager
from ..query import ArticleFilter, build_query
from ._base import DomainClient, drop_none

ARTICLE_FIELDS = (
    "id,idReadable,summary,content,created,updated,"
    "project(id,name,shortName),reporter(id,login,fullName),"
    "parentArticle(id,idReadable,summary),childArticles(id,idReadable,summary),"
    "tags(id,name)"
)


class KnowledgeBaseClient(DomainClient):
    domain = "knowledge_base"

    async def get_article(self, article_id: str) -> Article:
        return await self._get_model(
            Article,
            f"/api/articles/{article_id}",
            params={"fields": ARTICLE_FIELDS},
            operation="get_article",
        )

    def list_articles(
        self,
        query: Union[ArticleFilter, str, None] = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ) -> Pager[Article]:
        query_text = query if isinstance(query, str) else build_query(query)
        params: Dict[str, Any] = {"fields": ARTICLE_FIELDS}
        if query_text:
            params["query"] = query_text
        return self._paginate(
            Article,
            "/api/articles",
            params=params,
            page_size=page_size,
            limit=limit,
            operation="list_articles",
        )

    async def list_child_articles(self, article_id: str) -> List[Article]:
        return await self._get_list(
            Article,
            f"/api/articles/{article_id}/childArticles",
            params={"fields": ARTICLE_FIELDS},
            operation="list_child_articles",
        )

    async def create_article(
        self,
        *,
        project_id: str,
        summary: str,
        content: Optional[str] = None,
        parent_article_id: Optional[str] = None,
    ) -> Article:
        if not summary or not summary.strip():
            raise ValueError("Article summary must not be empty.")
        payload = drop_none(
            {
                "project": {"id": project_id},
                "summary": summary,
                "content": content,
                "parentArticle": (
                    {"id": parent_article_id} if parent_article_id else None
                ),
            }
        )
        return await self._post_model(
            Article,
            "/api/articles",
            json=payload,
            params={"fields": ARTICLE_FIELDS},
            operation="create_article",
        )

    async def update_article(
        self,
        article_id: str,
        *,
        summary: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Article:
        payload = drop_none({"summary": summary, "content": content})
        if not payload:
            raise ValueError("No fields provided to update.")
        return await self._post_model(
            Article,
            f"/api/articles/{article_id}",
            json=payload,
            params={"fields": ARTICLE_FIELDS},
            operation="update_article",
        )

    async def link_as_sub_article(
        self, parent_article_id: str, child_article_id: str
    ) -> Article:
        if parent_article_id == child_article_id:
            raise ValueError("An article cannot be its own parent.")
        return await self._post_model(
            Article,
            f"/api/articles/{child_article_id}",
            json={"parentArticle": {"id": parent_article_id}},
            params={"fields": ARTICLE_FIELDS},
            operation="link_as_sub_article",
        )

    async def unlink_from_parent(self, article_id: str) -> Article:
        # An explicit null detaches the article to the top level.
        return await self._post_model(
            Article,
            f"/api/articles/{article_id}",
            json={"parentArticle": None},
            params={"fields": ARTICLE_FIELDS},
            operation="unlink_from_parent",
        )

    async def delete_article(self, article_id: str) -> None:
        await self._delete(f"/api/articles/{article_id}", operation="delete_article")
