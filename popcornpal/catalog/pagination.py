"""Page-number window and navigation rules for paged catalog views."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from popcornpal.catalog.types import Pagination

MAX_VISIBLE_PAGES = 5


@dataclass(frozen=True)
class PaginationModel:
    current_page: int = 1
    total_pages: int = 1
    items_per_page: int = 20
    total_items: int = 0

    @classmethod
    def from_snapshot(cls, pagination: Pagination) -> "PaginationModel":
        return cls(
            current_page=pagination.current_page,
            total_pages=pagination.total_pages,
            items_per_page=pagination.items_per_page,
            total_items=pagination.total_items,
        )

    @property
    def last_page(self) -> int:
        return max(1, self.total_pages)

    @property
    def page(self) -> int:
        return min(max(1, self.current_page), self.last_page)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.last_page

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1

    def page_window(self, max_visible: int = MAX_VISIBLE_PAGES) -> list[int]:
        """Return up to ``max_visible`` page numbers centred on the current page."""
        start = max(1, self.page - max_visible // 2)
        end = min(self.last_page, start + max_visible - 1)
        # Near the last page: slide the window left to keep it full.
        if end - start + 1 < max_visible:
            start = max(1, end - max_visible + 1)
        return list(range(start, end + 1))

    def showing_range(self) -> tuple[int, int]:
        """First and last item numbers shown on the current page (1-based)."""
        if self.total_items <= 0:
            return 0, 0
        first = (self.page - 1) * self.items_per_page + 1
        last = min(self.page * self.items_per_page, self.total_items)
        return first, last

    def accepts_page(self, page: int) -> bool:
        return 1 <= page <= self.total_pages


def change_page(
    model: PaginationModel,
    page: int,
    fetch: Callable[[int], object],
    scroll_to_top: Callable[[], None] | None = None,
) -> bool:
    """
    Request ``page`` if it is in range.

    Returns False (and does nothing) for out-of-range pages. The value returned
    by ``fetch`` is not awaited here; callers that pass a coroutine factory
    schedule it themselves.
    """
    if not model.accepts_page(page):
        return False
    fetch(page)
    if scroll_to_top is not None:
        scroll_to_top()
    return True
