from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    AsyncIterator,
    Awaitable,
    Callable,
    Generic,
    List,
    Optional,
    TypeVar,
)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


def clamp_page_size(page_size: int) -> int:
    """Clamp page_size into a safe range to avoid huge payloads."""
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return min(page_size, MAX_PAGE_SIZE)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE
    has_more: bool = False

    @property
    def next_offset(self) -> Optional[int]:
        return self.offset + len(self.items) if self.has_more else None


FetchPage = Callable[[int, int], Awaitable[Page[T]]]


class Pager(Generic[T]):
    """
    Lazy async sequence over a paged endpoint.
    - Each `async for` starts again at offset 0; no state is shared between runs
    - Stops on has_more=False, a short page, or once `limit` items are yielded
    - Errors from fetch_page propagate and end the iteration
    """

    def __init__(
        self,
        fetch_page: FetchPage[T],
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        limit: Optional[int] = None,
    ):
        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        self._fetch_page = fetch_page
        self.page_size = clamp_page_size(page_size)
        self.limit = limit

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        offset = 0
        yielded = 0
        while True:
            requested = self.page_size
            if self.limit is not None:
                remaining = self.limit - yielded
                if remaining <= 0:
                    return
                requested = min(requested, remaining)

            page = await self._fetch_page(offset, requested)
            for item in page.items:
                yield item
                yielded += 1
                if self.limit is not None and yielded >= self.limit:
                    return

            if not page.has_more or len(page.items) < requested:
                return
            offset += len(page.items)

    async def to_list(self) -> List[T]:
        return [item async for item in self]


def paginate(
    fetch_page: FetchPage[T],
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    limit: Optional[int] = None,
) -> Pager[T]:
    return Pager(fetch_page, page_size=page_size, limit=limit)


__all__ = [
    "Page",
    "Pager",
    "paginate",
    "clamp_page_size",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
]
