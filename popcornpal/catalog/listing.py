"""Tabbed, paged browsing of the movie and TV show catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from popcornpal import logger
from popcornpal.catalog.client import CatalogClient, CatalogError
from popcornpal.catalog.downloads import visible_items
from popcornpal.catalog.pagination import PaginationModel, change_page
from popcornpal.catalog.types import CatalogItem, CatalogKind, Pagination, format_kind_label
from popcornpal.notices import NoticeBoard

_DATABASE_LABELS: dict[CatalogKind, str] = {
    "movies": "movie database",
    "tvshows": "TV show database",
}


@dataclass
class ListingState:
    kind: CatalogKind = "movies"
    items: list[CatalogItem] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    loading: bool = False
    error: Optional[str] = None


class CatalogListing:
    def __init__(
        self,
        client: CatalogClient,
        *,
        kind: CatalogKind = "movies",
        notices: NoticeBoard | None = None,
        scroll_to_top: Callable[[], None] | None = None,
    ) -> None:
        self.client = client
        self.notices = notices or NoticeBoard()
        self._scroll_to_top = scroll_to_top
        self.state = ListingState(kind=kind)

    @property
    def model(self) -> PaginationModel:
        return PaginationModel.from_snapshot(self.state.pagination)

    async def load(self, page: int = 1) -> None:
        kind = self.state.kind
        self.state.loading = True
        self.state.error = None
        log = logger.get_logger()
        log.debug(f"Fetching {kind} page {page}")
        try:
            result = await self.client.list_titles(kind, page=page)
        except (CatalogError, ValueError) as exc:
            log.warning(f"Error fetching {kind}: {exc}")
            self.state.error = f"Failed to connect to {_DATABASE_LABELS[kind]}"
            self.state.items = []
            self.notices.error(f"{self.state.error}. Please check your connection.")
            return
        finally:
            self.state.loading = False

        self.state.items = visible_items(result.items)
        self.state.pagination = result.pagination
        log.debug(f"Loaded {len(result.items)} {kind} for page {page}")

    async def switch_kind(self, kind: CatalogKind) -> None:
        self.state = ListingState(kind=kind)
        await self.load(1)

    async def change_page(self, page: int) -> bool:
        """Load ``page`` when it exists; returns False for out-of-range pages."""
        model = self.model
        requested: list[int] = []
        if not change_page(model, page, requested.append, self._scroll_to_top):
            return False
        if model.current_page != page:
            label = format_kind_label(self.state.kind).lower()
            self.notices.info(f"Loading {label} page {page}...")
        await self.load(requested[0])
        return True
