from __future__ import annotations

import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from perkboard.service.results import Page, ServiceResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

FetchPage = Callable[[Any, Optional[str]], ServiceResult[Page[T]]]


class PaginatedFeed(Generic[T]):
    """Client-side "load more" state over a cursor-paginated listing.

    `load` replaces the accumulated items; `load_more` follows the stored
    `next` cursor and appends.
    """

    def __init__(self, fetch_page: FetchPage[T]) -> None:
        self._fetch_page = fetch_page
        self.items: list[T] = []
        self.filters: Any = None
        self.count = 0
        self.next_cursor: str | None = None
        self.degraded = False

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    def _apply(self, result: ServiceResult[Page[T]], *, append: bool) -> bool:
        page = result.data if result.success else None
        if page is None or page.degraded:
            self.degraded = True
            if not append:
                self.items = []
                self.count = 0
                self.next_cursor = None
            return False

        self.items = [*self.items, *page.items] if append else list(page.items)
        self.count = page.pagination.count
        self.next_cursor = page.pagination.next
        self.degraded = False
        return True

    def load(self, filters: Any = None) -> bool:
        self.filters = filters
        return self._apply(self._fetch_page(filters, None), append=False)

    def load_more(self) -> bool:
        if self.next_cursor is None:
            return False
        loaded = self._apply(self._fetch_page(self.filters, self.next_cursor), append=True)
        if not loaded:
            logger.warning("Load more failed; keeping %d loaded items.", len(self.items))
        return loaded

    @classmethod
    def for_perks(cls, service: Any, page_size: int = 24) -> PaginatedFeed[Any]:
        return cls(
            lambda filters, cursor: service.list_perks(
                page_size=page_size, filters=filters, next_cursor=cursor
            )
        )

    @classmethod
    def for_vendors(cls, service: Any, page_size: int = 24) -> PaginatedFeed[Any]:
        return cls(
            lambda filters, cursor: service.list_vendors(
                page_size=page_size, filters=filters, next_cursor=cursor
            )
        )
