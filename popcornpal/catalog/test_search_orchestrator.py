from __future__ import annotations

import asyncio

import pytest

from popcornpal.catalog.client import CatalogConnectionError
from popcornpal.catalog.search_orchestrator import DebouncedSearchOrchestrator
from popcornpal.catalog.types import CatalogItem, CatalogPage, FileOption, Pagination, SearchInfo
from popcornpal.notices import NoticeBoard

_DEBOUNCE = 0.01


def _page(query: str, page: int = 1, total_pages: int = 3) -> CatalogPage:
    item = CatalogItem(
        id=query,
        title=f"{query} result",
        download_options={"1080p": (FileOption(filename=f"{query}.mkv", size="1 GB"),)},
    )
    return CatalogPage(
        kind="movies",
        items=[item],
        pagination=Pagination(current_page=page, total_pages=total_pages, total_items=total_pages * 20),
        search=SearchInfo(query=query, total_found=1),
    )


class _RecordingSearch:
    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []

    async def __call__(self, query: str, page: int) -> CatalogPage:
        self.calls.append((query, page))
        return _page(query, page)


class _GatedSearch:
    """Each query blocks until its gate is opened."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, int]] = []
        self.gates: dict[str, asyncio.Event] = {}

    def gate(self, query: str) -> asyncio.Event:
        return self.gates.setdefault(query, asyncio.Event())

    async def __call__(self, query: str, page: int) -> CatalogPage:
        self.calls.append((query, page))
        await self.gate(query).wait()
        return _page(query, page)


@pytest.mark.asyncio
async def test_burst_of_keystrokes_dispatches_last_query_once() -> None:
    search = _RecordingSearch()
    orchestrator = DebouncedSearchOrchestrator(search, debounce_seconds=_DEBOUNCE)

    for text in ("i", "in", "inc", "ince"):
        orchestrator.on_input(text)
    await orchestrator.wait_idle()

    assert search.calls == [("ince", 1)]
    assert [item.title for item in orchestrator.state.results] == ["ince result"]
    assert orchestrator.state.loading is False


@pytest.mark.asyncio
async def test_stale_response_never_overwrites_newer_one() -> None:
    search = _GatedSearch()
    orchestrator = DebouncedSearchOrchestrator(search, debounce_seconds=_DEBOUNCE)

    orchestrator.on_input("alien")
    await asyncio.sleep(_DEBOUNCE * 3)
    orchestrator.on_input("aliens")
    await asyncio.sleep(_DEBOUNCE * 3)
    assert search.calls == [("alien", 1), ("aliens", 1)]

    search.gate("aliens").set()
    await asyncio.sleep(_DEBOUNCE)
    assert orchestrator.state.results[0].title == "aliens result"

    search.gate("alien").set()
    await orchestrator.wait_idle()
    assert orchestrator.state.results[0].title == "aliens result"
    assert orchestrator.state.search_info == SearchInfo(query="aliens", total_found=1)


@pytest.mark.asyncio
async def test_blank_input_clears_synchronously_and_drops_in_flight() -> None:
    search = _GatedSearch()
    orchestrator = DebouncedSearchOrchestrator(search, debounce_seconds=_DEBOUNCE)

    orchestrator.on_input("heat")
    await asyncio.sleep(_DEBOUNCE * 3)
    orchestrator.on_input("   ")

    assert orchestrator.state.results == []
    assert orchestrator.state.loading is False

    search.gate("heat").set()
    await orchestrator.wait_idle()
    assert orchestrator.state.results == []


@pytest.mark.asyncio
async def test_blank_input_cancels_pending_debounce() -> None:
    search = _RecordingSearch()
    orchestrator = DebouncedSearchOrchestrator(search, debounce_seconds=_DEBOUNCE)

    orchestrator.on_input("heat")
    orchestrator.on_input("")
    await orchestrator.wait_idle()

    assert search.calls == []


@pytest.mark.asyncio
async def test_failure_sets_error_and_notice() -> None:
    async def _failing(query: str, page: int) -> CatalogPage:
        raise CatalogConnectionError("GET /tvshows/search failed")

    notices = NoticeBoard()
    orchestrator = DebouncedSearchOrchestrator(
        _failing, kind="tvshows", debounce_seconds=_DEBOUNCE, notices=notices
    )

    orchestrator.on_input("dark")
    await orchestrator.wait_idle()

    assert orchestrator.state.error == "Failed to search tv shows"
    assert orchestrator.state.results == []
    assert orchestrator.state.loading is False
    assert notices.latest() is not None and notices.latest().is_error


@pytest.mark.asyncio
async def test_change_page_dispatches_immediately() -> None:
    search = _RecordingSearch()
    orchestrator = DebouncedSearchOrchestrator(search, debounce_seconds=60)
    orchestrator.state.query = "heat"
    orchestrator.state.pagination = Pagination(current_page=1, total_pages=3)

    task = orchestrator.change_page(2)
    assert task is not None
    await task

    assert search.calls == [("heat", 2)]
    assert orchestrator.state.pagination.current_page == 2


@pytest.mark.asyncio
async def test_change_page_out_of_range_or_blank_query_is_noop() -> None:
    search = _RecordingSearch()
    orchestrator = DebouncedSearchOrchestrator(search, debounce_seconds=_DEBOUNCE)
    orchestrator.state.pagination = Pagination(current_page=1, total_pages=3)

    assert orchestrator.change_page(2) is None

    orchestrator.state.query = "heat"
    assert orchestrator.change_page(0) is None
    assert orchestrator.change_page(4) is None
    assert search.calls == []


@pytest.mark.asyncio
async def test_on_change_reports_loading_then_results() -> None:
    seen: list[bool] = []
    orchestrator = DebouncedSearchOrchestrator(
        _RecordingSearch(),
        debounce_seconds=_DEBOUNCE,
        on_change=lambda state: seen.append(state.loading),
    )

    orchestrator.on_input("up")
    await orchestrator.wait_idle()

    assert seen == [True, False]


@pytest.mark.asyncio
async def test_reset_switches_kind_and_clears() -> None:
    search = _RecordingSearch()
    orchestrator = DebouncedSearchOrchestrator(search, debounce_seconds=_DEBOUNCE)
    orchestrator.on_input("heat")
    await orchestrator.wait_idle()

    orchestrator.reset(kind="tvshows")

    assert orchestrator.kind_label == "tv shows"
    assert orchestrator.state.query == ""
    assert orchestrator.state.results == []
