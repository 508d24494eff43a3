"""Debounced, latest-wins catalog search."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from popcornpal import logger
from popcornpal.catalog.client import CatalogError
from popcornpal.catalog.downloads import visible_items
from popcornpal.catalog.types import CatalogItem, CatalogKind, CatalogPage, Pagination, SearchInfo
from popcornpal.notices import NoticeBoard

DEFAULT_DEBOUNCE_SECONDS = 0.5

SearchFn = Callable[[str, int], Awaitable[CatalogPage]]


@dataclass
class SearchState:
    query: str = ""
    results: list[CatalogItem] = field(default_factory=list)
    pagination: Pagination = field(default_factory=Pagination)
    search_info: Optional[SearchInfo] = None
    loading: bool = False
    error: Optional[str] = None
    # Sequence number of the most recently dispatched request.
    sequence: int = 0


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class _ScheduledQuery:
    token: CancellationToken
    task: asyncio.Task

    def cancel(self) -> None:
        self.token.cancel()
        self.task.cancel()


class DebouncedSearchOrchestrator:
    """
    Turns rapid input into at most one dispatched search per quiet period.

    Keystrokes go through ``on_input`` (trailing-edge debounce); page changes
    go through ``change_page`` and dispatch immediately. Every dispatch takes
    the next sequence number and a response is applied only while its number
    is still the latest, so a slow earlier response can never overwrite a
    newer one. In-flight requests are not cancelled, only ignored.
    """

    def __init__(
        self,
        search: SearchFn,
        *,
        kind: CatalogKind = "movies",
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        notices: NoticeBoard | None = None,
        on_change: Callable[[SearchState], None] | None = None,
    ) -> None:
        self._search = search
        self.kind = kind
        self.debounce_seconds = debounce_seconds
        self.notices = notices or NoticeBoard()
        self._on_change = on_change
        self.state = SearchState()
        self._pending: _ScheduledQuery | None = None
        self._in_flight: set[asyncio.Task] = set()

    @property
    def kind_label(self) -> str:
        return "movies" if self.kind == "movies" else "tv shows"

    def on_input(self, text: str) -> None:
        self.state.query = text
        self._cancel_pending()
        if not text.strip():
            self._clear_results()
            return
        token = CancellationToken()
        task = asyncio.get_running_loop().create_task(self._debounced_dispatch(text, 1, token))
        self._pending = _ScheduledQuery(token=token, task=task)

    def change_page(self, page: int) -> asyncio.Task | None:
        """Fetch ``page`` of the current query right away; no-op when out of range."""
        query = self.state.query
        if not query.strip() or page < 1 or page > self.state.pagination.total_pages:
            return None
        self._cancel_pending()
        return self._start_dispatch(query, page)

    async def wait_idle(self) -> None:
        """Wait for the pending debounce (if any) and every in-flight search."""
        while True:
            pending = self._pending
            if pending is not None and not pending.task.done():
                await asyncio.gather(pending.task, return_exceptions=True)
                continue
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)
                continue
            return

    def reset(self, kind: CatalogKind | None = None) -> None:
        self._cancel_pending()
        if kind is not None:
            self.kind = kind
        self.state.query = ""
        self._clear_results()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _clear_results(self) -> None:
        # Responses still in flight become stale.
        self.state.sequence += 1
        self.state.results = []
        self.state.pagination = Pagination()
        self.state.search_info = None
        self.state.loading = False
        self.state.error = None
        self._changed()

    async def _debounced_dispatch(self, query: str, page: int, token: CancellationToken) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if token.cancelled:
            return
        self._pending = None
        await self._dispatch(query, page, self._next_sequence())

    def _start_dispatch(self, query: str, page: int) -> asyncio.Task:
        sequence = self._next_sequence()
        task = asyncio.get_running_loop().create_task(self._dispatch(query, page, sequence))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def _next_sequence(self) -> int:
        self.state.sequence += 1
        return self.state.sequence

    def _is_current(self, sequence: int) -> bool:
        return sequence == self.state.sequence

    async def _dispatch(self, query: str, page: int, sequence: int) -> None:
        current = asyncio.current_task()
        if current is not None:
            self._in_flight.add(current)
        self.state.loading = True
        self.state.error = None
        self._changed()
        log = logger.get_logger()
        log.debug(f"Search #{sequence} dispatched: {self.kind} q='{query}' page={page}")
        try:
            result = await self._search(query, page)
        except (CatalogError, ValueError) as exc:
            if not self._is_current(sequence):
                log.debug(f"Search #{sequence} failed after being superseded: {exc}")
                return
            log.warning(f"Search for '{query}' failed: {exc}")
            self.state.error = f"Failed to search {self.kind_label}"
            self.state.results = []
            self.state.search_info = None
            self.state.loading = False
            self.notices.error(self.state.error)
            self._changed()
            return
        finally:
            if current is not None:
                self._in_flight.discard(current)

        if not self._is_current(sequence):
            log.debug(f"Discarding stale search #{sequence} (latest is #{self.state.sequence})")
            return
        self.state.results = visible_items(result.items)
        self.state.pagination = result.pagination
        self.state.search_info = result.search
        self.state.loading = False
        log.debug(f"Search #{sequence} completed: {len(result.items)} results for '{query}'")
        self._changed()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.state)
