from __future__ import annotations

from popcornpal.catalog.downloads import aggregate_download_options, tier_priority, visible_items
from popcornpal.catalog.types import CatalogItem, FileOption


def _file(name: str) -> FileOption:
    return FileOption(filename=name, size="1.4 GB")


def test_aggregate_orders_tiers_and_skips_empty() -> None:
    f1, f2, f3 = _file("a.mkv"), _file("b.mkv"), _file("c.mkv")

    summary = aggregate_download_options({"720p": [f1], "4k": [], "1080p": [f2, f3]})

    assert summary.tier_labels == ["1080p", "720p"]
    assert summary.total_files == 3
    assert summary.files_for("1080p") == (f2, f3)
    assert summary.files_for("4k") == ()


def test_unknown_tier_sorts_after_others() -> None:
    summary = aggregate_download_options(
        {"webrip": [_file("w.mkv")], "others": [_file("o.mkv")], "4k": [_file("k.mkv")]}
    )
    assert summary.tier_labels == ["4k", "others", "webrip"]
    assert tier_priority("webrip") < tier_priority("others")


def test_aggregate_handles_missing_options() -> None:
    summary = aggregate_download_options(None)
    assert summary.tiers == ()
    assert summary.total_files == 0


def test_visible_items_drops_items_without_files() -> None:
    empty = CatalogItem(id="1", title="Nothing Here", download_options={"720p": ()})
    full = CatalogItem(id="2", title="Arrival", download_options={"1080p": (_file("arrival.mkv"),)})

    assert visible_items([empty, full]) == [full]
    assert full.downloads.total_files == 1
