from __future__ import annotations

import pytest

from popcornpal.catalog.client import CatalogConnectionError
from popcornpal.catalog.listing import CatalogListing
from popcornpal.catalog.types import CatalogItem, CatalogPage, FileOption, Pagination
from popcornpal.notices import NoticeBoard


def _item(title: str, files: int = 1) -> CatalogItem:
    options = {"720p": tuple(FileOption(filename=f"{title}.{idx}.mkv", size="1 GB") for idx in range(files))}
    return CatalogItem(id=title, title=title, download_options=options)


class _FakeClient:
    def __init__(self, total_pages: int = 3, fail: bool = False) -> None:
        self.total_pages = total_pages
        self.fail = fail
        self.calls: list[tuple[str, int]] = []

    async def list_titles(self, kind, page=1, limit=None):
        self.calls.append((kind, page))
        if self.fail:
            raise CatalogConnectionError("GET /movies failed")
        return CatalogPage(
            kind=kind,
            items=[_item(f"{kind}-{page}"), _item("no files", files=0)],
            pagination=Pagination(current_page=page, total_pages=self.total_pages, total_items=self.total_pages * 20),
        )


@pytest.mark.asyncio
async def test_load_hides_items_without_files() -> None:
    listing = CatalogListing(_FakeClient())

    await listing.load()

    assert [item.title for item in listing.state.items] == ["movies-1"]
    assert listing.state.loading is False
    assert listing.model.total_pages == 3


@pytest.mark.asyncio
async def test_switch_kind_resets_to_first_page() -> None:
    client = _FakeClient()
    listing = CatalogListing(client)
    await listing.load(2)

    await listing.switch_kind("tvshows")

    assert client.calls[-1] == ("tvshows", 1)
    assert listing.state.kind == "tvshows"


@pytest.mark.asyncio
async def test_change_page_fetches_and_scrolls() -> None:
    client = _FakeClient()
    scrolled: list[bool] = []
    notices = NoticeBoard()
    listing = CatalogListing(client, notices=notices, scroll_to_top=lambda: scrolled.append(True))
    await listing.load()

    assert await listing.change_page(3) is True

    assert client.calls[-1] == ("movies", 3)
    assert scrolled == [True]
    assert notices.latest().message == "Loading movies page 3..."


@pytest.mark.asyncio
async def test_change_page_out_of_range_is_noop() -> None:
    client = _FakeClient()
    listing = CatalogListing(client)
    await listing.load()

    assert await listing.change_page(9) is False
    assert client.calls == [("movies", 1)]


@pytest.mark.asyncio
async def test_load_failure_sets_error() -> None:
    notices = NoticeBoard()
    listing = CatalogListing(_FakeClient(fail=True), kind="tvshows", notices=notices)

    await listing.load()

    assert listing.state.error == "Failed to connect to TV show database"
    assert listing.state.items == []
    assert notices.latest().message == "Failed to connect to TV show database. Please check your connection."
